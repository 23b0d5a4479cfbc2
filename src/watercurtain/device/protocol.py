"""JSON wire protocol spoken over the device WebSocket.

Outbound commands are JSON objects tagged by ``action``. The device never
replies to a specific command; it pushes messages that are recognized by
their shape:

| inbound | meaning |
|---|---|
| ``{"action": "ip_address", "ip": ...}`` | device reports its address |
| ``{"patterns": [...]}`` | device's stored pattern list |
| ``{"action": "pattern_saved", "name": ...}`` | save acknowledged |

Anything else is ignored.
"""

import json
import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from watercurtain.models import Color, Pattern
from watercurtain.models.config import MAX_SPEED_MS, MIN_SPEED_MS, SPEED_INVERT
from watercurtain.models.pattern import Matrix

logger = logging.getLogger(__name__)


class Command(BaseModel):
    """Base class for outbound commands."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    action: str


class ConfigCommand(Command):
    """Announce the valve and LED counts of the sequence about to be loaded."""

    action: Literal["config"] = "config"
    valves: int = Field(gt=0)
    leds: int = Field(gt=0)


class LoadPatternCommand(Command):
    """Load the full concatenated sequence into the device's playback buffer."""

    action: Literal["load_pattern"] = "load_pattern"
    pattern: Matrix


class SavePatternCommand(Command):
    """Store one pattern in the device's own pattern list."""

    action: Literal["save_pattern"] = "save_pattern"
    id: str
    name: str
    pattern_data: Matrix = Field(alias="patternData")
    source: str
    prompt_or_file: str | None = Field(default=None, alias="promptOrFile")

    @classmethod
    def from_pattern(cls, pattern: Pattern) -> "SavePatternCommand":
        return cls(
            id=pattern.id,
            name=pattern.name,
            pattern_data=pattern.matrix,
            source=pattern.source.value,
            prompt_or_file=pattern.origin,
        )


class PlayCommand(Command):
    action: Literal["play"] = "play"


class PauseCommand(Command):
    action: Literal["pause"] = "pause"


class SpeedCommand(Command):
    """Set the per-row playback delay in milliseconds."""

    action: Literal["speed"] = "speed"
    value: int = Field(ge=MIN_SPEED_MS, le=MAX_SPEED_MS)

    @classmethod
    def from_slider(cls, slider: int) -> "SpeedCommand":
        """Build from a speed slider position (higher slider = shorter delay)."""
        if not MIN_SPEED_MS <= slider <= MAX_SPEED_MS:
            raise ValueError(f"Speed must be between {MIN_SPEED_MS} and {MAX_SPEED_MS}, got {slider}")
        return cls(value=SPEED_INVERT - slider)


class ColorCommand(Command):
    """Set the LED strip color."""

    action: Literal["color"] = "color"
    value: str

    @field_validator("value")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        return Color.from_hex(v).to_hex()


class RebootToApCommand(Command):
    """Reboot the device into its setup access point."""

    action: Literal["reboot_to_ap"] = "reboot_to_ap"


def encode_command(command: Command) -> str:
    """Serialize a command to a JSON text frame."""
    return command.model_dump_json(by_alias=True, exclude_none=True)


# =================================================================
# Inbound messages
# =================================================================


class IpAddressMessage(BaseModel):
    ip: str = Field(min_length=1)


class PatternListMessage(BaseModel):
    # Raw entries; the store validates and repairs them on hydration
    patterns: list[Any]


class PatternSavedMessage(BaseModel):
    name: str | None = None


InboundMessage = IpAddressMessage | PatternListMessage | PatternSavedMessage


def decode_messages(payload: str | bytes) -> list[InboundMessage]:
    """
    Decode one inbound frame into the messages it carries.

    A single frame may carry more than one message (e.g. an address report
    alongside the pattern list). Unrecognized content yields an empty list.

    Raises:
        ValueError: If the payload is not a JSON object
    """
    data = json.loads(payload)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

    messages: list[InboundMessage] = []
    action = data.get("action")

    ip = data.get("ip")
    if action == "ip_address" and isinstance(ip, str) and ip.strip():
        messages.append(IpAddressMessage(ip=ip.strip()))

    if isinstance(data.get("patterns"), list):
        messages.append(PatternListMessage(patterns=data["patterns"]))

    if action == "pattern_saved":
        name = data.get("name")
        messages.append(PatternSavedMessage(name=name if isinstance(name, str) else None))

    if not messages:
        logger.debug(f"Ignoring unrecognized message: {data}")
    return messages
