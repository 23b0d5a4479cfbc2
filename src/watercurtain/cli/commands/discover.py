"""Device discovery command."""

import click

from watercurtain.device import DeviceDiscovery, DeviceSession
from watercurtain.exceptions import ErrorContext
from watercurtain.model_manager import ModelManagerService
from watercurtain.models import AppConfig

from ..context import fail, load_config, run_async


@click.command(name="discover")
@click.option("--save", is_flag=True, help="Store the found address in the config file")
@click.pass_context
def discover(ctx, save: bool):
    """Search the network for the device and print its address."""
    config = load_config(ctx)
    session = DeviceSession(config.device_address)
    discovery = DeviceDiscovery(session, config)

    candidates = discovery.candidates()
    click.echo(f"Probing {len(candidates)} addresses...", err=True)
    address = run_async(discovery.discover())

    if address is None:
        click.echo("Could not automatically detect the device.", err=True)
        click.echo("Please enter the IP address manually (--address).", err=True)
        ctx.exit(1)

    click.echo(address)

    if save:
        with ErrorContext("save discovered address", re_raise=False) as saving:
            service = ModelManagerService[AppConfig](AppConfig, config, default_path=ctx.obj["config_path"])
            service.set("device_address", address)
            service.save()
        if saving.error:
            fail(ctx, saving.error)
        click.echo(f"Saved device address to {ctx.obj['config_path']}", err=True)
