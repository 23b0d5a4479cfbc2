"""LED strip color."""

import re

from pydantic import BaseModel, ConfigDict, Field

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")


class Color(BaseModel):
    """
    An RGB triple, parsed from and written as ``#RRGGBB``.

    Both the config and the ``color`` command normalize through this
    model, so ``7df9ff`` and ``#7DF9FF`` reach the device identically.
    """

    model_config = ConfigDict(frozen=True)

    r: int = Field(ge=0, le=255)
    g: int = Field(ge=0, le=255)
    b: int = Field(ge=0, le=255)

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        """
        Raises:
            ValueError: Not six hex digits (an optional leading '#' is allowed)
        """
        match = _HEX_RE.match(value.strip())
        if match is None:
            raise ValueError(f"Invalid color '{value}', expected #RRGGBB")
        channels = bytes.fromhex(match.group(1))
        return cls(r=channels[0], g=channels[1], b=channels[2])

    def to_hex(self) -> str:
        """Upper-case form with '#', e.g. '#7DF9FF'."""
        return "#" + bytes((self.r, self.g, self.b)).hex().upper()
