"""Tests for the XXH3 cache key derivation."""

from __future__ import annotations

import string
from pathlib import Path

import xxhash

from daidori.utils.hashutils import derive_cache_key


def test_key_is_32_lowercase_hex_chars():
    key = derive_cache_key("/pages/p1.psd", 1700000000, 480, 90)
    assert len(key) == 32
    assert set(key) <= set(string.hexdigits.lower())


def test_key_is_deterministic():
    first = derive_cache_key("/pages/p1.psd", 1700000000, 480, 90)
    second = derive_cache_key(Path("/pages/p1.psd"), 1700000000, 480, 90)
    assert first == second


def test_key_matches_documented_material():
    expected = xxhash.xxh3_128(b"/pages/p1.psd:1700000000:480:90:png:bilinear").hexdigest()
    assert derive_cache_key("/pages/p1.psd", 1700000000, 480, 90, "png", "bilinear") == expected
    assert derive_cache_key("/pages/p1.psd", 1700000000, 480, 90, "png") == expected


def test_each_component_changes_the_key():
    base = derive_cache_key("/pages/p1.psd", 1700000000, 480, 90, "png")
    variants = {
        derive_cache_key("/pages/p2.psd", 1700000000, 480, 90, "png"),
        derive_cache_key("/pages/p1.psd", 1700000001, 480, 90, "png"),
        derive_cache_key("/pages/p1.psd", 1700000000, 240, 90, "png"),
        derive_cache_key("/pages/p1.psd", 1700000000, 480, 80, "png"),
        derive_cache_key("/pages/p1.psd", 1700000000, 480, 90, "jpeg"),
        derive_cache_key("/pages/p1.psd", 1700000000, 480, 90, "png", "lanczos"),
    }
    assert base not in variants
    assert len(variants) == 6


def test_format_is_case_insensitive():
    assert derive_cache_key("a.png", 1, 480, 90, "PNG") == derive_cache_key("a.png", 1, 480, 90, "png")


def test_resample_filter_changes_the_key():
    nearest = derive_cache_key("a.png", 1, 480, 90, "png", "nearest")
    lanczos = derive_cache_key("a.png", 1, 480, 90, "png", "lanczos")
    assert nearest != lanczos
    assert derive_cache_key("a.png", 1, 480, 90, "png", "LANCZOS") == lanczos
