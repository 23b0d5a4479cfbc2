"""Device communication: wire protocol, session, link and discovery."""

from .discovery import DeviceDiscovery
from .link import Connector, DeviceLink, websocket_connector
from .protocol import (
    ColorCommand,
    Command,
    ConfigCommand,
    IpAddressMessage,
    LoadPatternCommand,
    PatternListMessage,
    PatternSavedMessage,
    PauseCommand,
    PlayCommand,
    RebootToApCommand,
    SavePatternCommand,
    SpeedCommand,
    decode_messages,
    encode_command,
)
from .session import DeviceSession

__all__ = [
    "ColorCommand",
    "Command",
    "ConfigCommand",
    "Connector",
    "DeviceDiscovery",
    "DeviceLink",
    "DeviceSession",
    "IpAddressMessage",
    "LoadPatternCommand",
    "PatternListMessage",
    "PatternSavedMessage",
    "PauseCommand",
    "PlayCommand",
    "RebootToApCommand",
    "SavePatternCommand",
    "SpeedCommand",
    "decode_messages",
    "encode_command",
    "websocket_connector",
]
