"""Shared helpers for CLI commands: config loading, inputs, errors, notifications."""

import asyncio
import logging
import sys
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, NoReturn, TypeVar

import click

from watercurtain.exceptions import format_error_for_display
from watercurtain.models import AppConfig
from watercurtain.protocols import NotificationLevel
from watercurtain.raster import ImageInput, ManualInput, RasterInput, TextInput, VectorInput

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LEVEL_COLORS = {
    NotificationLevel.INFO: None,
    NotificationLevel.SUCCESS: "green",
    NotificationLevel.WARNING: "yellow",
    NotificationLevel.ERROR: "red",
}


class ConsoleNotifier:
    """NotificationObserver that prints to the terminal."""

    def __init__(self):
        self.errors = 0

    def on_notification(self, level: NotificationLevel, title: str, message: str) -> None:
        if level == NotificationLevel.ERROR:
            self.errors += 1
        click.secho(
            f"{title}: {message}",
            fg=_LEVEL_COLORS[level],
            err=level in (NotificationLevel.ERROR, NotificationLevel.WARNING),
        )


def load_config(ctx: click.Context) -> AppConfig:
    return AppConfig.load_or_default(ctx.obj["config_path"])


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


def fail(ctx: click.Context, error: Exception) -> NoReturn:
    """Print an error the way every command does and exit with status 1."""
    logger.error(f"Command failed: {error}", exc_info=not hasattr(error, "user_message"))
    user_message, recovery_hint = format_error_for_display(error)

    click.echo(f"ERROR: {user_message}", err=True)
    if recovery_hint:
        click.echo(f"\n{recovery_hint}", err=True)
    click.echo(f"\nFor details, check the log file: {ctx.obj['log_path']}", err=True)
    sys.exit(1)


def input_options(func):
    """Attach the --text/--image/--svg/--grid input options to a command."""
    options = [
        click.option("--text", "texts", multiple=True, help="Text prompt (repeatable)"),
        click.option(
            "--image", "images", multiple=True,
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            help="Raster image file (repeatable)",
        ),
        click.option(
            "--svg", "svgs", multiple=True,
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            help="SVG file (repeatable)",
        ),
        click.option(
            "--grid", "grids", multiple=True,
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            help="Text grid file, '#' = on and '.' = off (repeatable)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def collect_inputs(
    texts: tuple[str, ...],
    images: tuple[Path, ...],
    svgs: tuple[Path, ...],
    grids: tuple[Path, ...],
    config: AppConfig,
) -> list[RasterInput]:
    """Turn the input options into raster inputs, texts first then images, SVGs and grids."""
    inputs: list[RasterInput] = [TextInput(text=t, font_path=config.font_path) for t in texts]
    inputs += [ImageInput.from_path(p) for p in images]
    inputs += [VectorInput.from_path(p) for p in svgs]
    inputs += [
        ManualInput(name=p.stem, grid_text=p.read_text(encoding="utf-8"), max_rows=config.max_manual_rows)
        for p in grids
    ]
    return inputs
