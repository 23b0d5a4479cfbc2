"""Main CLI entry point."""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

import click

from watercurtain import __version__
from watercurtain.models.config import default_config_dir, default_config_path

from .commands import config, control_group, discover, generate_group, preview, upload

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

# -v count -> level; anything above the last entry is DEBUG
_VERBOSITY_LEVELS = (logging.WARNING, logging.INFO)


def resolve_log_path(debug: bool, log_file: Optional[Path]) -> Path:
    """--log-file wins, then ./watercurtain-debug.log for --debug, then the config dir."""
    if log_file:
        return log_file
    if debug:
        return Path.cwd() / "watercurtain-debug.log"
    return default_config_dir() / "logs" / "watercurtain.log"


def _level_for(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> int:
    if log_file:
        return getattr(logging, log_level.upper())
    if debug or verbose >= len(_VERBOSITY_LEVELS):
        return logging.DEBUG
    return _VERBOSITY_LEVELS[verbose]


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> Path:
    """
    Send log records to a rotating file and return its path.

    The level comes from -v/--debug, or from --log-level when --log-file is
    given. Calling this again (one process running several commands, as in
    tests) replaces the handler installed by the previous call.
    """
    level = _level_for(verbose, debug, log_file, log_level)
    log_path = resolve_log_path(debug, log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    handler.set_name("watercurtain")

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == "watercurtain":
            root_logger.removeHandler(existing)
            existing.close()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    logger.info(f"Logging to {log_path} at {logging.getLevelName(level)}")
    return log_path


@click.group()
@click.pass_context
@click.version_option(version=__version__, prog_name="watercurtain")
@click.option(
    '--config', 'config_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Config file (default: ~/.watercurtain/config.json)'
)
@click.option(
    '-v', '--verbose',
    count=True,
    help='Log more (-v INFO, -vv DEBUG)'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Log everything to ./watercurtain-debug.log'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Write the log here instead'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    help='Level used with --log-file (default: INFO)'
)
def cli(
    ctx,
    config_path: Optional[Path],
    verbose: int,
    debug: bool,
    log_file: Optional[Path],
    log_level: str
):
    """
    Water Curtain - pattern designer and controller for a digital water curtain.

    Turn text, images, SVG files or hand-drawn grids into valve patterns,
    preview them in the terminal, and upload them to the device.

    \b
    Examples:
      # Render a text pattern for a 16-valve curtain
      watercurtain generate text "HELLO" --valves 16

      # Watch it fall
      watercurtain preview --text "HELLO" --animate

      # Find the device on the network
      watercurtain discover --save

      # Upload two patterns as one sequence
      watercurtain upload --text "HI" --image logo.png

      # Start playback
      watercurtain control play

      # Enable debug logging
      watercurtain --debug upload --text "HI"
    """
    log_path = setup_logging(verbose, debug, log_file, log_level)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path or default_config_path()
    ctx.obj["log_path"] = log_path


# Register commands
cli.add_command(generate_group)
cli.add_command(preview)
cli.add_command(discover)
cli.add_command(upload)
cli.add_command(control_group)
cli.add_command(config)

if __name__ == "__main__":
    cli()
