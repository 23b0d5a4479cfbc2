"""Sequence upload handshake."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from pydantic import BaseModel

from watercurtain.device import ConfigCommand, DeviceLink, LoadPatternCommand, PauseCommand
from watercurtain.exceptions import NotConnectedError, UploadInProgressError

from .pattern_store import PatternStore

logger = logging.getLogger(__name__)


class UploadResult(BaseModel):
    """Summary of a completed upload."""

    pattern_count: int
    valve_count: int
    row_count: int
    paused: bool


class UploadService:
    """
    Pushes the store's sequence to the device.

    Handshake, in order::

        config {valves, leds}   -> wait settle_delay
        load_pattern {pattern}  -> pause
        wait completion_delay   -> done

    The whole sequence goes in one load_pattern frame. Only one upload
    runs at a time.
    """

    def __init__(
        self,
        store: PatternStore,
        link: DeviceLink,
        settle_delay: float = 0.2,
        completion_delay: float = 0.5,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._store = store
        self._link = link
        self._settle_delay = settle_delay
        self._completion_delay = completion_delay
        self._sleep = sleep
        self._uploading = False

    @property
    def is_uploading(self) -> bool:
        return self._uploading

    async def upload(self) -> UploadResult:
        """
        Upload the current sequence and leave the device paused.

        Raises:
            UploadInProgressError: If another upload is still running
            EmptySequenceError: If the store is empty (nothing sent)
            InvalidValveCountError: If the valve count is unusable (nothing sent)
            NotConnectedError: If a handshake frame could not be sent
        """
        if self._uploading:
            raise UploadInProgressError()

        self._uploading = True
        try:
            return await self._upload()
        finally:
            self._uploading = False

    async def _upload(self) -> UploadResult:
        pattern_count = len(self._store)
        sequence = self._store.sequence()
        valve_count = len(sequence[0])
        logger.info(
            f"Uploading {pattern_count} patterns: {len(sequence)} rows x {valve_count} valves"
        )

        if not await self._link.send(ConfigCommand(valves=valve_count, leds=valve_count)):
            raise NotConnectedError("config")

        # The device reallocates its buffers on config
        await self._sleep(self._settle_delay)

        if not await self._link.send(LoadPatternCommand(pattern=sequence)):
            raise NotConnectedError("load_pattern")

        paused = await self._link.send(PauseCommand())
        if not paused:
            logger.warning("Pattern loaded but pause command was not delivered")

        await self._sleep(self._completion_delay)
        logger.info("Upload complete")
        return UploadResult(
            pattern_count=pattern_count,
            valve_count=valve_count,
            row_count=len(sequence),
            paused=paused,
        )
