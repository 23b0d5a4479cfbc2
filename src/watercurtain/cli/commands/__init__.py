"""CLI commands for watercurtain."""

from .config import config
from .control import control_group
from .discover import discover
from .generate import generate_group
from .preview import preview
from .upload import upload

__all__ = ["config", "control_group", "discover", "generate_group", "preview", "upload"]
