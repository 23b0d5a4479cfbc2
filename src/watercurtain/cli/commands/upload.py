"""Sequence upload command."""

import logging

import click

from watercurtain.device import DeviceDiscovery, DeviceLink, DeviceSession
from watercurtain.exceptions import WaterCurtainError
from watercurtain.models import AppConfig
from watercurtain.raster import build_draft
from watercurtain.services import PatternStore, UploadResult, UploadService

from ..context import collect_inputs, fail, input_options, load_config, run_async

logger = logging.getLogger(__name__)


async def _upload(config: AppConfig, store: PatternStore, address: str | None, find: bool) -> UploadResult:
    session = DeviceSession(address or config.device_address)
    if find:
        await DeviceDiscovery(session, config).discover_or_raise()

    link = DeviceLink(session, ws_path=config.ws_path, connect_timeout=config.connect_timeout)
    uploader = UploadService(
        store, link, settle_delay=config.settle_delay, completion_delay=config.completion_delay
    )
    async with link:
        await link.connect()
        return await uploader.upload()


@click.command(name="upload")
@input_options
@click.option("--valves", "-n", type=int, default=None, help="Number of valves (default from config)")
@click.option("--address", "-a", default=None, help="Device address (default from config)")
@click.option("--discover", "find", is_flag=True, help="Search for the device before connecting")
@click.pass_context
def upload(ctx, texts, images, svgs, grids, valves, address, find):
    """
    Generate patterns and upload them to the device as one sequence.

    The device is left paused; start it with 'watercurtain control play'.
    """
    config = load_config(ctx)
    inputs = collect_inputs(texts, images, svgs, grids, config)
    if not inputs:
        raise click.UsageError("Give at least one of --text, --image, --svg or --grid.")

    store = PatternStore()
    try:
        for spec in inputs:
            store.add(build_draft(spec, valves or config.default_valve_count))
        result = run_async(_upload(config, store, address, find))
    except WaterCurtainError as e:
        fail(ctx, e)

    click.secho(
        f"Sent {result.pattern_count} patterns ({result.valve_count} valves, "
        f"{result.row_count} rows) to the hardware.",
        fg="green",
    )
