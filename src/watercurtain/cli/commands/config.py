"""
Config command.

Commands:
    - config show [--field FIELD]   # Display configuration
    - config set KEY VALUE          # Update one field and save
    - config reset [--field FIELD]  # Reset to defaults
"""

import json
import typing

import click
from pydantic import ValidationError

from watercurtain.exceptions import wrap_pydantic_error
from watercurtain.model_manager import ModelManagerService
from watercurtain.models import AppConfig

from ..context import fail, load_config


def _service(ctx: click.Context) -> ModelManagerService[AppConfig]:
    return ModelManagerService[AppConfig](
        AppConfig, load_config(ctx), default_path=ctx.obj["config_path"]
    )


def _parse_value(key: str, raw: str):
    """Convert a command-line string for a field; pydantic does the type coercion."""
    annotation = AppConfig.model_fields[key].annotation
    if typing.get_origin(annotation) is list:
        return [item.strip() for item in raw.split(",") if item.strip()]
    if type(None) in typing.get_args(annotation) and raw.lower() in ("", "none", "null"):
        return None
    return raw


@click.group(name="config")
def config():
    """Show and change settings."""
    pass


@config.command(name="show")
@click.option("--field", "-f", default=None, help="Show a single field")
@click.option("--json", "as_json", is_flag=True, help="Print as JSON")
@click.pass_context
def show(ctx, field, as_json):
    """Display the current configuration."""
    values = _service(ctx).get_all()
    if field is not None:
        if field not in values:
            raise click.BadParameter(f"Unknown field '{field}'", param_hint="--field")
        values = {field: values[field]}

    if as_json:
        click.echo(json.dumps(values, indent=2))
        return

    click.echo(f"Config file: {ctx.obj['config_path']}")
    for key, value in values.items():
        click.echo(f"  {key}: {value}")


@config.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def set_value(ctx, key, value):
    """Set KEY to VALUE and save (lists are comma-separated)."""
    if key not in AppConfig.model_fields:
        raise click.BadParameter(
            f"Unknown field '{key}'. Choose from: {', '.join(AppConfig.model_fields)}",
            param_hint="KEY",
        )

    service = _service(ctx)
    try:
        service.set(key, _parse_value(key, value))
    except ValidationError as e:
        fail(ctx, wrap_pydantic_error(e, str(ctx.obj["config_path"])))

    service.save()
    click.echo(f"{key} = {service.get_all()[key]}")


@config.command(name="reset")
@click.option("--field", "-f", default=None, help="Reset a single field")
@click.confirmation_option(prompt="Reset configuration to defaults?")
@click.pass_context
def reset(ctx, field):
    """Reset configuration (or one field) to defaults."""
    service = _service(ctx)
    if field is None:
        service.reset()
    else:
        if field not in AppConfig.model_fields:
            raise click.BadParameter(f"Unknown field '{field}'", param_hint="--field")
        service.set(field, getattr(AppConfig(), field))

    service.save()
    click.echo("Configuration reset." if field is None else f"{field} reset.")
