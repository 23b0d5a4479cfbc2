"""Playback control commands."""

from collections.abc import Awaitable, Callable

import click

from watercurtain.orchestration import Orchestrator

from ..context import ConsoleNotifier, load_config, run_async

address_option = click.option(
    "--address", "-a", default=None, help="Device address (default from config)"
)


async def _with_device(
    orchestrator: Orchestrator, address: str | None, action: Callable[[], Awaitable[bool]]
) -> bool:
    try:
        if not await orchestrator.connect(address):
            return False
        return await action()
    finally:
        await orchestrator.shutdown()


def _run(ctx: click.Context, address: str | None, action_factory) -> None:
    config = load_config(ctx)
    orchestrator = Orchestrator(config, config_path=ctx.obj["config_path"])
    notifier = ConsoleNotifier()
    orchestrator.register_observer(notifier)

    ok = run_async(_with_device(orchestrator, address, action_factory(orchestrator)))
    if not ok:
        ctx.exit(1)


@click.group(name="control")
def control_group():
    """Send playback commands to the device."""
    pass


@control_group.command(name="play")
@address_option
@click.pass_context
def play(ctx, address):
    """Start playing the loaded sequence."""
    _run(ctx, address, lambda o: o.play)


@control_group.command(name="pause")
@address_option
@click.pass_context
def pause(ctx, address):
    """Pause playback."""
    _run(ctx, address, lambda o: o.pause)


@control_group.command(name="speed")
@click.argument("slider", type=click.IntRange(20, 500))
@address_option
@click.pass_context
def speed(ctx, slider, address):
    """Set speed from SLIDER (20 = slowest, 500 = fastest)."""
    _run(ctx, address, lambda o: lambda: o.set_speed(slider))


@control_group.command(name="color")
@click.argument("value")
@address_option
@click.pass_context
def color(ctx, value, address):
    """Set the LED color to VALUE (#RRGGBB)."""
    _run(ctx, address, lambda o: lambda: o.set_color(value))


@control_group.command(name="reboot-to-ap")
@address_option
@click.confirmation_option(prompt="Reboot the device into access-point mode?")
@click.pass_context
def reboot_to_ap(ctx, address):
    """Reboot the device into its setup access point (192.168.4.1)."""
    _run(ctx, address, lambda o: o.reboot_to_ap)
