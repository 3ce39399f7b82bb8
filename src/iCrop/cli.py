"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich import print

from .core.transformations import transformation_from_config
from .editor import ImageEditor
from .errors import ICropError, InvalidConfigurationError, RasterDecodeError
from .plugins import CropPlugin
from .utils.console_logger import ensure_console_logger

_LOGGER = logging.getLogger(__name__)

app = typer.Typer(help="Crop and rotate images with a replayable transformation list")


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (InvalidConfigurationError, RasterDecodeError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except ICropError as exc:
            typer.echo(f"Unexpected error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline activity."),
) -> None:
    ensure_console_logger(
        logging.getLogger("iCrop"),
        "icrop-cli",
        level=logging.DEBUG if verbose else logging.WARNING,
    )


@app.command()
@_handle_errors
def info(source: Path = typer.Argument(..., exists=True, dir_okay=False)) -> None:
    """Print the size and mode of an image."""

    editor = ImageEditor.open(source)
    raster = editor.pipeline.source
    print(
        f"[bold]{source.name}[/bold]\n"
        f"Size: {raster.native_width}x{raster.native_height}\n"
        f"Mode: {raster.image.mode}"
    )


@app.command()
@_handle_errors
def crop(
    source: Path = typer.Argument(..., exists=True, dir_okay=False),
    output: Path = typer.Argument(...),
    x: float = typer.Option(0.0, "--x", help="Left edge of the selection in pixels."),
    y: float = typer.Option(0.0, "--y", help="Top edge of the selection in pixels."),
    width: float = typer.Option(..., "--width", help="Selection width in pixels."),
    height: float = typer.Option(..., "--height", help="Selection height in pixels."),
    ratio: Optional[float] = typer.Option(None, "--ratio", help="Enforce width/height."),
    min_width: float = typer.Option(1.0, "--min-width"),
    min_height: float = typer.Option(1.0, "--min-height"),
    force: bool = typer.Option(False, "--force", help="Use the selection verbatim, skipping constraints."),
) -> None:
    """Crop SOURCE to the given selection and write OUTPUT as PNG."""

    select_options = {"minWidth": min_width, "minHeight": min_height, "ratio": ratio}
    editor = ImageEditor.open(source, {"plugins": {"crop": select_options, "rotate": False}})
    plugin = editor.plugin(CropPlugin.name)
    if not isinstance(plugin, CropPlugin):
        typer.echo("Error: the crop plugin is not available", err=True)
        raise typer.Exit(1)

    plugin.draw_zone(x, y, width, height, force_dimension=force)
    pending = plugin.crop_current_zone()
    if pending is None:
        typer.echo("Error: the selection does not cover any pixel", err=True)
        raise typer.Exit(1)
    result = pending.result()
    editor.export(output)
    print(f"[green]Cropped to {result.native_width}x{result.native_height}: {output}")


@app.command()
@_handle_errors
def replay(
    source: Path = typer.Argument(..., exists=True, dir_okay=False),
    steps: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON list of transformations."),
    output: Path = typer.Argument(...),
) -> None:
    """Apply a recorded list of transformations to SOURCE."""

    try:
        configs = json.loads(steps.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise InvalidConfigurationError(f"{steps} is not valid JSON: {exc}") from exc
    if not isinstance(configs, list):
        raise InvalidConfigurationError(f"{steps} must contain a JSON list")
    transformations = [transformation_from_config(config) for config in configs]

    editor = ImageEditor.open(source, {"plugins": {"crop": False, "rotate": False}})
    for transformation in transformations:
        editor.apply_transformation(transformation).result()
    _LOGGER.debug("Replayed %d transformation(s)", len(transformations))
    editor.export(output)
    raster = editor.pipeline.source
    print(
        f"[green]Applied {len(transformations)} transformation(s): "
        f"{raster.native_width}x{raster.native_height} -> {output}"
    )


if __name__ == "__main__":  # pragma: no cover
    app()
