"""Pattern generation commands."""

import json
import sys
from pathlib import Path

import click

from watercurtain.exceptions import WaterCurtainError
from watercurtain.models import PatternDraft
from watercurtain.raster import (
    ImageInput,
    ManualInput,
    RasterInput,
    TextInput,
    VectorInput,
    build_draft,
    render_grid_text,
)

from ..context import fail, load_config

valves_option = click.option(
    "--valves", "-n", type=int, default=None,
    help="Number of valves (multiple of 8, default from config)",
)
json_option = click.option(
    "--json", "as_json", is_flag=True, help="Print the pattern as JSON (device format)"
)


def _emit(ctx: click.Context, spec: RasterInput, valves: int | None, as_json: bool) -> None:
    config = load_config(ctx)
    try:
        draft = build_draft(spec, valves or config.default_valve_count)
    except WaterCurtainError as e:
        fail(ctx, e)

    if as_json:
        click.echo(json.dumps(draft.to_wire()))
        return
    _print_draft(draft)


def _print_draft(draft: PatternDraft) -> None:
    click.echo(f"{draft.name} [{draft.source.value}] {draft.row_count} rows x {draft.valve_count} valves")
    click.echo(render_grid_text(draft.matrix))


@click.group(name="generate")
def generate_group():
    """Generate a pattern and print it."""
    pass


@generate_group.command(name="text")
@click.argument("prompt")
@valves_option
@json_option
@click.pass_context
def generate_text(ctx, prompt: str, valves: int | None, as_json: bool):
    """Render PROMPT as a pattern."""
    config = load_config(ctx)
    _emit(ctx, TextInput(text=prompt, font_path=config.font_path), valves, as_json)


@generate_group.command(name="image")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@valves_option
@json_option
@click.pass_context
def generate_image(ctx, path: Path, valves: int | None, as_json: bool):
    """Convert an image's opaque pixels into a pattern."""
    _emit(ctx, ImageInput.from_path(path), valves, as_json)


@generate_group.command(name="svg")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@valves_option
@json_option
@click.pass_context
def generate_svg(ctx, path: Path, valves: int | None, as_json: bool):
    """Render an SVG file into a pattern."""
    _emit(ctx, VectorInput.from_path(path), valves, as_json)


@generate_group.command(name="grid")
@click.argument("path", type=click.Path(allow_dash=True, dir_okay=False, path_type=Path))
@click.option("--name", default=None, help="Pattern name (default: file name)")
@json_option
@click.pass_context
def generate_grid(ctx, path: Path, name: str | None, as_json: bool):
    """
    Read a hand-drawn grid ('#' = on, '.' = off) from PATH, or '-' for stdin.

    \b
    Example grid (8 valves, 2 rows):
      ##....##
      ..####..
    """
    if str(path) == "-":
        text = sys.stdin.read()
        default_name = "My Manual Pattern"
    else:
        text = path.read_text(encoding="utf-8")
        default_name = path.stem

    config = load_config(ctx)
    spec = ManualInput(name=name or default_name, grid_text=text, max_rows=config.max_manual_rows)
    # Manual grids keep their own width
    _emit(ctx, spec, None, as_json)
