"""Terminal preview command."""

import click

from watercurtain.exceptions import WaterCurtainError
from watercurtain.models.pattern import concat_matrices
from watercurtain.preview import SequenceAnimator
from watercurtain.raster import build_draft, render_grid_text

from ..context import collect_inputs, fail, input_options, load_config, run_async


async def _animate(animator: SequenceAnimator, on: str, off: str, max_frames: int | None) -> None:
    async for _, row in animator.frames(max_frames=max_frames):
        click.echo(render_grid_text((row,), on=on, off=off))


@click.command(name="preview")
@input_options
@click.option("--valves", "-n", type=int, default=None, help="Number of valves (default from config)")
@click.option("--animate", is_flag=True, help="Play rows in device order (bottom row first)")
@click.option("--loop", is_flag=True, help="Repeat the animation (stop with Ctrl+C or --frames)")
@click.option("--frames", type=int, default=None, help="Stop after this many rows")
@click.option("--speed", type=int, default=None, help="Milliseconds per row (default from config)")
@click.option("--on", "on_char", default="#", show_default=True, help="Character for open valves")
@click.option("--off", "off_char", default=".", show_default=True, help="Character for closed valves")
@click.pass_context
def preview(ctx, texts, images, svgs, grids, valves, animate, loop, frames, speed, on_char, off_char):
    """
    Show patterns in the terminal.

    Several inputs are joined into one sequence in the order given
    (texts, images, SVGs, then grids), as an upload would send them.
    """
    config = load_config(ctx)
    inputs = collect_inputs(texts, images, svgs, grids, config)
    if not inputs:
        raise click.UsageError("Give at least one of --text, --image, --svg or --grid.")

    try:
        drafts = [build_draft(spec, valves or config.default_valve_count) for spec in inputs]
    except WaterCurtainError as e:
        fail(ctx, e)

    matrix = concat_matrices(d.matrix for d in drafts)

    if not animate:
        for draft in drafts:
            click.echo(f"{draft.name}: {draft.row_count} rows x {draft.valve_count} valves")
        click.echo(render_grid_text(matrix, on=on_char, off=off_char))
        return

    try:
        animator = SequenceAnimator(matrix, interval_ms=speed or config.speed, loop=loop)
        run_async(_animate(animator, on_char, off_char, frames))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--speed") from e
    except KeyboardInterrupt:
        click.echo("\nStopped.", err=True)
