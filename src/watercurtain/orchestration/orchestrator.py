"""
Application orchestrator for coordinating the controller's services.

This module wires the device session, pattern store, link, discovery and
upload service together. Every operator action is an orchestrator method;
failures never escape those methods, they become notifications.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from watercurtain.device import (
    ColorCommand,
    Command,
    Connector,
    DeviceDiscovery,
    DeviceLink,
    DeviceSession,
    PauseCommand,
    PlayCommand,
    RebootToApCommand,
    SavePatternCommand,
    SpeedCommand,
)
from watercurtain.exceptions import handle_errors
from watercurtain.model_manager import ModelManagerService, ObserverManager
from watercurtain.models import AppConfig, Pattern, PatternDraft
from watercurtain.protocols import LinkEvent, NotificationLevel, NotificationObserver
from watercurtain.raster import ManualInput, RasterInput, TextInput, build_draft
from watercurtain.services import PatternStore, UploadResult, UploadService

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Top-level coordinator for one controller session.

    Architecture:
        Orchestrator (this class, a LinkObserver)
        ├── config_service: AppConfig held by ModelManagerService
        ├── session: target address
        ├── store: PatternStore
        ├── link: DeviceLink
        ├── discovery: DeviceDiscovery
        └── uploader: UploadService

    Notifications (successes, warnings and every recovered error) go to
    registered NotificationObservers.
    """

    def __init__(
        self,
        config: AppConfig,
        config_path: Path | None = None,
        connector: Connector | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Application configuration
            config_path: Where config changes are saved (None = never saved)
            connector: WebSocket connector override (tests)
            http_transport: httpx transport override for discovery (tests)
            sleep: Sleep function for the upload handshake delays (tests)
        """
        self.config_service = ModelManagerService[AppConfig](
            AppConfig, config, default_path=config_path, auto_save=config_path is not None
        )
        self.session = DeviceSession(config.device_address)
        self.store = PatternStore()
        self.link = DeviceLink(
            self.session,
            ws_path=config.ws_path,
            connect_timeout=config.connect_timeout,
            connector=connector,
        )
        self.discovery = DeviceDiscovery(
            self.session, config, transport=http_transport, connector=connector
        )
        self.uploader = UploadService(
            self.store,
            self.link,
            settle_delay=config.settle_delay,
            completion_delay=config.completion_delay,
            sleep=sleep,
        )

        self._is_playing = False
        self._notifiers = ObserverManager[NotificationObserver](observer_type_name="notification")

        self.link.register_observer(self)

    @property
    def config(self) -> AppConfig:
        return self.config_service.get_model()

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def is_connected(self) -> bool:
        return self.link.is_connected

    # =================================================================
    # Notifications
    # =================================================================

    def register_observer(self, observer: NotificationObserver) -> None:
        self._notifiers.register(observer)

    def unregister_observer(self, observer: NotificationObserver) -> None:
        self._notifiers.unregister(observer)

    def _notify(self, level: NotificationLevel, title: str, message: str) -> None:
        self._notifiers.notify("on_notification", level, title, message)

    def _guard(self, func: Callable, operation: str, title: str, fallback: Any = None) -> Callable:
        """Wrap func so any failure is logged and reported as an error notification."""
        return handle_errors(
            operation_name=operation,
            user_notification=lambda message: self._notify(NotificationLevel.ERROR, title, message),
            fallback_value=fallback,
            re_raise=False,
        )(func)

    async def _send(self, command: Command) -> bool:
        if await self.link.send(command):
            return True
        self._notify(NotificationLevel.ERROR, "Not Connected", "Connect to the hardware first.")
        return False

    # =================================================================
    # Link events
    # =================================================================

    def on_link_event(self, event: LinkEvent, **data: Any) -> None:
        """Translate device link events into store/config updates and notifications."""
        if event == LinkEvent.CONNECTED:
            self._notify(
                NotificationLevel.SUCCESS,
                "Connected",
                f"Connected to Digital Water Curtain hardware at {data.get('address')}!",
            )

        elif event == LinkEvent.DISCONNECTED:
            self._is_playing = False
            if data.get("reason") == "closed":
                self._notify(NotificationLevel.INFO, "Disconnected", "Disconnected from hardware.")
            else:
                self._notify(NotificationLevel.ERROR, "Disconnected", "Connection to hardware lost.")

        elif event == LinkEvent.IP_REPORTED:
            ip = data["ip"]
            self.config_service.set("device_address", ip)
            self._notify(NotificationLevel.INFO, "Device Address", f"Device reported address {ip}.")

        elif event == LinkEvent.PATTERNS:
            loaded = self.store.hydrate(data.get("patterns", []))
            self._notify(
                NotificationLevel.INFO,
                "Patterns Loaded",
                f"Loaded {len(loaded)} patterns from the device.",
            )

        elif event == LinkEvent.PATTERN_SAVED:
            self._notify(
                NotificationLevel.SUCCESS,
                "Pattern Saved",
                f'Pattern "{data.get("name")}" saved to the device!',
            )

    # =================================================================
    # Connection
    # =================================================================

    async def connect(self, address: str | None = None) -> bool:
        """
        Connect to ``address`` (or the session target) and sync the LED color.

        Returns:
            True if connected
        """
        target = (address if address is not None else self.session.target_address).strip()
        if not target:
            self._notify(NotificationLevel.ERROR, "Error", "Please enter the device IP address.")
            return False

        self.session.update_target(target, origin="operator")
        connected = await self._guard(self.link.connect, "connect", "Connection Failed", False)(target)
        if connected:
            await self.link.send(ColorCommand(value=self.config.led_color))
        return bool(connected)

    async def disconnect(self) -> None:
        await self.link.close()

    async def toggle_connection(self) -> bool:
        """Connect when disconnected, disconnect otherwise. Returns the new connected state."""
        if self.link.is_connected:
            await self.disconnect()
            return False
        return await self.connect()

    async def discover(self) -> str | None:
        """Search for the device; on success the session and config point at it."""
        self._notify(NotificationLevel.INFO, "Detecting", "Searching for the device...")
        address = await self._guard(
            self.discovery.discover_or_raise, "discover device", "Detection Failed"
        )()
        if address:
            self.config_service.set("device_address", address)
            self._notify(NotificationLevel.SUCCESS, "IP Detected", f"Found device at {address}")
        return address

    # =================================================================
    # Patterns
    # =================================================================

    async def generate(self, spec: RasterInput, valve_count: int | None = None) -> Pattern | None:
        """Rasterize an input and add the result to the store."""
        if isinstance(spec, TextInput) and spec.font_path is None and self.config.font_path:
            spec = spec.model_copy(update={"font_path": self.config.font_path})
        elif isinstance(spec, ManualInput):
            spec = spec.model_copy(update={"max_rows": min(spec.max_rows, self.config.max_manual_rows)})
        count = valve_count or self.config.default_valve_count

        draft = self._guard(build_draft, "generate pattern", "Error")(spec, count)
        if draft is None:
            return None

        pattern = await self.add_pattern(draft)
        self._notify(
            NotificationLevel.SUCCESS, "Success", f"New {spec.kind} pattern generated!"
        )
        return pattern

    async def add_pattern(self, draft: PatternDraft) -> Pattern:
        """Add a draft to the store, saving it on the device when connected."""
        pattern = self.store.add(draft)
        if self.link.is_connected:
            await self.link.send(SavePatternCommand.from_pattern(pattern))
        return pattern

    def delete_pattern(self, pattern_id: str) -> bool:
        return self.store.remove(pattern_id)

    def move_pattern(self, pattern_id: str, before_id: str | None) -> bool:
        return self.store.reorder(pattern_id, before_id)

    # =================================================================
    # Upload & playback
    # =================================================================

    async def upload(self) -> UploadResult | None:
        """Upload the whole store; the device is left paused."""
        result = await self._guard(self.uploader.upload, "upload sequence", "Upload Failed")()
        if result is None:
            return None

        self._is_playing = False
        self._notify(
            NotificationLevel.SUCCESS,
            "Sequence Uploaded",
            f"Sent {result.pattern_count} patterns ({result.valve_count} valves) to the hardware.",
        )
        return result

    async def play(self) -> bool:
        if await self._send(PlayCommand()):
            self._is_playing = True
            return True
        return False

    async def pause(self) -> bool:
        if await self._send(PauseCommand()):
            self._is_playing = False
            return True
        return False

    async def toggle_playback(self) -> bool:
        """Play if paused, pause if playing. Returns the new playing state."""
        if self._is_playing:
            await self.pause()
        else:
            await self.play()
        return self._is_playing

    async def set_speed(self, slider: int) -> bool:
        """Set playback speed from a slider position in [20, 500] (higher is faster)."""
        try:
            command = SpeedCommand.from_slider(slider)
        except (ValueError, ValidationError) as e:
            self._notify(NotificationLevel.ERROR, "Invalid Speed", str(e))
            return False

        self.config_service.set("speed", command.value)
        return await self._send(command)

    async def set_color(self, color: str) -> bool:
        """Change the LED color and send it to the device."""
        try:
            command = ColorCommand(value=color)
        except ValidationError as e:
            self._notify(NotificationLevel.ERROR, "Invalid Color", e.errors()[0]["msg"])
            return False

        self.config_service.set("led_color", command.value)
        return await self._send(command)

    async def reboot_to_ap(self) -> bool:
        """Reboot the device into access-point mode; the link drops on its own."""
        return await self._send(RebootToApCommand())

    async def shutdown(self) -> None:
        await self.link.close()
        logger.info("Orchestrator shut down")
