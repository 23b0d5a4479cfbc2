"""Application configuration model."""

from pathlib import Path

from pydantic import BaseModel, Field, field_serializer, field_validator

from watercurtain.model_manager.persistence import PydanticPersistence

from .color import Color

# Address the device answers on in access-point (setup) mode
AP_DEFAULT_ADDRESS = "192.168.4.1"

# Addresses the device historically shows up on in home networks
DEFAULT_CANDIDATES = [
    AP_DEFAULT_ADDRESS,
    "192.168.1.100",
    "192.168.1.101",
    "192.168.1.102",
    "192.168.0.100",
    "192.168.0.101",
    "192.168.0.102",
    "10.0.0.100",
    "10.0.0.101",
]

# Playback delay is the inverse of the slider position: delay = SPEED_INVERT - slider
SPEED_INVERT = 520
MIN_SPEED_MS = 20
MAX_SPEED_MS = 500


def default_config_dir() -> Path:
    """Directory holding config.json and logs."""
    return Path.home() / ".watercurtain"


def default_config_path() -> Path:
    return default_config_dir() / "config.json"


class AppConfig(BaseModel):
    """Application configuration and settings."""

    # Device addressing
    device_address: str = Field(
        default=AP_DEFAULT_ADDRESS,
        min_length=1,
        description="Device IPv4 address (updated when the device reports its address)",
    )
    ws_path: str = Field(default="/ws", description="WebSocket endpoint path on the device")
    connect_timeout: float = Field(
        default=5.0, gt=0, description="Connect handshake timeout (seconds)"
    )

    # Discovery
    discovery_candidates: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CANDIDATES),
        description="Addresses probed, in order, when searching for the device",
    )
    discovery_path: str = Field(
        default="/api/ip", description="HTTP path answering {\"ip\": ...} on the device"
    )
    discovery_hint_url: str | None = Field(
        default=None,
        description="URL answering {\"ip\": ...} asked before the candidates (e.g. a page served by the device)",
    )
    http_probe_timeout: float = Field(
        default=2.0, gt=0, description="Per-candidate HTTP check timeout (seconds)"
    )
    ws_probe_timeout: float = Field(
        default=1.0, gt=0, description="Per-candidate WebSocket fallback timeout (seconds)"
    )

    # Upload handshake
    settle_delay: float = Field(
        default=0.2, ge=0, description="Pause between config and load_pattern (seconds)"
    )
    completion_delay: float = Field(
        default=0.5, ge=0, description="Pause after pause command before reporting completion"
    )

    # Pattern generation
    default_valve_count: int = Field(
        default=16, description="Valve count used when none is given (multiple of 8)"
    )
    max_manual_rows: int = Field(
        default=100, ge=1, description="Upper bound on rows for hand-drawn patterns"
    )
    font_path: Path | None = Field(
        default=None, description="TrueType font for text patterns (None = bundled default)"
    )

    # Playback
    led_color: str = Field(default="#7DF9FF", description="LED color sent on connect")
    speed: int = Field(
        default=100,
        ge=MIN_SPEED_MS,
        le=MAX_SPEED_MS,
        description="Animation tick interval in milliseconds (lower = faster)",
    )

    @field_validator("default_valve_count")
    @classmethod
    def validate_valve_count(cls, v: int) -> int:
        if v < 8 or v % 8 != 0:
            raise ValueError("must be a positive multiple of 8")
        return v

    @field_validator("led_color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        return Color.from_hex(v).to_hex()

    @field_validator("discovery_candidates")
    @classmethod
    def validate_candidates(cls, v: list[str]) -> list[str]:
        return [address.strip() for address in v if address.strip()]

    @field_serializer("font_path")
    def serialize_path(self, path: Path | None) -> str | None:
        return str(path) if path else None

    @classmethod
    def load_or_default(cls, path: Path | None = None) -> "AppConfig":
        """
        Load config from file or return default.

        A missing file yields defaults; a corrupted file also yields defaults
        but is left untouched on disk.

        Args:
            path: Path to config file. If None, uses ~/.watercurtain/config.json.
        """
        if path is None:
            path = default_config_path()

        return PydanticPersistence.ensure_valid_or_create(path, cls, auto_save=False)

    def save(self, path: Path | None = None) -> None:
        """Save config to file."""
        PydanticPersistence.save_json(self, path or default_config_path())
