"""Custom exception hierarchy for daidori."""

from __future__ import annotations

from typing import ClassVar


class DaidoriError(Exception):
    """Base class for all custom errors raised by daidori.

    ``kind`` is the stable identifier a command layer reports to its callers.
    """

    kind: ClassVar[str] = "error"


# --- 2-layer hierarchy ---

class DomainError(DaidoriError):
    """Base class for errors caused by the request or the source file."""


class InfrastructureError(DaidoriError):
    """Base class for errors raised by codecs and the filesystem."""


# --- Domain errors ---

class SourceNotFoundError(DomainError):
    """Raised when the source image does not exist."""

    kind = "file-not-found"


class UnsupportedFormatError(DomainError):
    """Raised when the source extension is not a supported image format."""

    kind = "unsupported-format"


class ImageValidationError(DomainError):
    """Raised when image dimensions are zero or exceed the configured limits."""

    kind = "validation-error"


# --- Infrastructure errors ---

class DecodeError(InfrastructureError):
    """Raised when an image or container payload cannot be decoded or encoded."""

    kind = "decode-error"


class StorageError(InfrastructureError):
    """Raised when a cache entry or an exported file cannot be written."""

    kind = "io-error"


# --- Settings ---

class SettingsError(DaidoriError):
    """Base class for settings related failures."""

    kind = "settings-error"


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""
