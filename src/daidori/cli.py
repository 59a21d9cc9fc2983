"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import logging
from concurrent.futures import Future
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .appctx import ThumbnailContext
from .application.dtos import ThumbnailResult
from .core.export import create_blank_image, get_image_dimensions
from .config import DEFAULT_PAGE_SIZE
from .errors import DaidoriError, StorageError
from .io.psd import extract_embedded_preview
from .settings.manager import SettingsManager

app = typer.Typer(help="Page thumbnail generator with a two-tier cache")
console = Console()


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DaidoriError as exc:
            typer.echo(f"Error ({exc.kind}): {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def thumb(
    paths: List[Path] = typer.Argument(..., help="Source images (PSD, JPEG, PNG, TIFF)."),
    cache_dir: Optional[Path] = typer.Option(None, "--cache-dir", help="Override the cache directory."),
    settings_path: Optional[Path] = typer.Option(None, "--settings", help="Settings file to use."),
    size: Optional[int] = typer.Option(None, "--size", help="Thumbnail width in pixels."),
    quality: Optional[int] = typer.Option(None, "--quality", help="Encoder quality (1-100)."),
    fmt: Optional[str] = typer.Option(None, "--format", help="Output format: png, jpeg (or jpg) or webp."),
) -> None:
    """Generate thumbnails concurrently and report where they were cached."""

    settings = SettingsManager(path=settings_path)
    try:
        settings.load()
        if size is not None:
            settings.set("thumbnails.size", size, persist=False)
        if quality is not None:
            settings.set("thumbnails.quality", quality, persist=False)
        if fmt is not None:
            fmt = fmt.lower()
            settings.set("thumbnails.format", "jpeg" if fmt == "jpg" else fmt, persist=False)
    except DaidoriError as exc:
        typer.echo(f"Error ({exc.kind}): {exc}", err=True)
        raise typer.Exit(1) from exc

    context = ThumbnailContext(settings=settings, cache_dir=cache_dir)
    try:
        futures: list[tuple[Path, Future[ThumbnailResult]]] = []
        for path in paths:
            try:
                modified_time = int(path.stat().st_mtime)
            except OSError:
                # Missing files still go through the service so that they
                # are reported like any other failure.
                modified_time = 0
            futures.append((path, context.service.submit(path, modified_time)))

        table = Table(title="Thumbnails")
        table.add_column("Source")
        table.add_column("Status")
        table.add_column("Cache file")
        failures = 0
        for path, future in futures:
            try:
                result = future.result()
            except DaidoriError as exc:
                failures += 1
                table.add_row(str(path), f"[red]{exc.kind}[/red]", str(exc))
                continue
            table.add_row(str(path), result.status.value, str(result.cache_path))
        console.print(table)
    finally:
        context.close()

    if failures:
        raise typer.Exit(1)


@app.command()
@_handle_errors
def preview(
    source: Path = typer.Argument(..., help="PSD file to inspect."),
    output: Path = typer.Argument(..., help="Where to write the embedded JPEG."),
) -> None:
    """Extract the embedded JPEG preview of a PSD file."""

    try:
        data = source.read_bytes()
    except OSError as exc:
        typer.echo(f"Error: cannot read {source}: {exc}", err=True)
        raise typer.Exit(1) from exc
    embedded = extract_embedded_preview(data)
    if embedded is None:
        typer.echo(f"No embedded preview found in {source}", err=True)
        raise typer.Exit(1)
    try:
        output.write_bytes(embedded.payload)
    except OSError as exc:
        raise StorageError(f"Cannot write preview to {output}: {exc}") from exc
    console.print(
        f"Wrote {embedded.width}x{embedded.height} preview "
        f"(resource {embedded.resource_id}) to {output}"
    )


@app.command()
@_handle_errors
def dimensions(source: Path = typer.Argument(..., help="Image to inspect.")) -> None:
    """Print the validated dimensions of an image."""

    width, height = get_image_dimensions(source)
    console.print(f"{width}x{height}")


@app.command()
@_handle_errors
def blank(
    output: Path = typer.Argument(..., help="Output file; the extension selects the format."),
    width: int = typer.Option(DEFAULT_PAGE_SIZE[0], "--width", help="Page width in pixels."),
    height: int = typer.Option(DEFAULT_PAGE_SIZE[1], "--height", help="Page height in pixels."),
) -> None:
    """Write a blank white page, A5 at 350 dpi unless a size is given."""

    create_blank_image(width, height, output)
    console.print(f"Wrote blank {width}x{height} page to {output}")


if __name__ == "__main__":
    app()
