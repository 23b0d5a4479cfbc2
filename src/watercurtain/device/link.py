"""WebSocket link to the water curtain device."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosed

from watercurtain.exceptions import ConnectionFailedError, wrap_connection_error
from watercurtain.model_manager import ObserverManager
from watercurtain.models import ConnectionState
from watercurtain.protocols import LinkEvent, LinkObserver

from .protocol import (
    Command,
    InboundMessage,
    IpAddressMessage,
    PatternListMessage,
    PatternSavedMessage,
    decode_messages,
    encode_command,
)
from .session import DeviceSession

logger = logging.getLogger(__name__)

# Takes a ws:// URI and returns an open connection supporting send(),
# close() and async iteration over incoming frames
Connector = Callable[[str], Awaitable[Any]]


async def websocket_connector(uri: str) -> Any:
    """Open a client connection with the websockets library."""
    # Timeout is applied by the caller; pattern lists can exceed the default frame limit
    return await ws_connect(uri, open_timeout=None, max_size=None)


class DeviceLink:
    """
    One bidirectional connection to the device.

    State machine::

        DISCONNECTED --connect()--> CONNECTING --open--> CONNECTED
        CONNECTED --close()--> CLOSING --> DISCONNECTED
        CONNECTED --remote close / error--> DISCONNECTED

    Outbound commands are fire-and-forget. Inbound frames are decoded and
    fanned out to registered LinkObservers; an ``ip_address`` report also
    moves the session's target address.

    Example:
        ```python
        async with DeviceLink(session) as link:
            await link.connect()
            await link.send(PlayCommand())
        ```
    """

    def __init__(
        self,
        session: DeviceSession,
        ws_path: str = "/ws",
        connect_timeout: float = 5.0,
        connector: Connector | None = None,
    ):
        self._session = session
        self._ws_path = ws_path
        self._connect_timeout = connect_timeout
        self._connector = connector or websocket_connector

        self._state = ConnectionState.DISCONNECTED
        self._address: str | None = None
        self._ws: Any = None
        self._reader: asyncio.Task | None = None
        self._attempt = 0
        self._send_lock = asyncio.Lock()

        self._observers = ObserverManager[LinkObserver](observer_type_name="link")

    # =================================================================
    # Observers
    # =================================================================

    def register_observer(self, observer: LinkObserver) -> None:
        self._observers.register(observer)

    def unregister_observer(self, observer: LinkObserver) -> None:
        self._observers.unregister(observer)

    def _notify(self, event: LinkEvent, **data: Any) -> None:
        self._observers.notify("on_link_event", event, **data)

    # =================================================================
    # State
    # =================================================================

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def address(self) -> str | None:
        """Address of the current (or last attempted) connection."""
        return self._address

    @property
    def session(self) -> DeviceSession:
        return self._session

    def _set_state(self, state: ConnectionState) -> None:
        if state is not self._state:
            logger.debug(f"Link {self._state.value} -> {state.value}")
            self._state = state

    # =================================================================
    # Lifecycle
    # =================================================================

    async def connect(self, address: str | None = None) -> bool:
        """
        Open the link to ``address`` (defaults to the session target).

        Returns:
            True if the link is now connected, False if the request was
            refused because a connection already exists or is in progress,
            or was abandoned by a concurrent close()

        Raises:
            ConnectionFailedError: If the handshake fails or times out
        """
        if self._state is not ConnectionState.DISCONNECTED:
            logger.warning(f"Connect refused: link is {self._state.value}")
            return False

        address = (address if address is not None else self._session.target_address).strip()
        if not address:
            raise ConnectionFailedError("<empty>", original_error="no address given")

        self._attempt += 1
        attempt = self._attempt
        self._address = address
        self._set_state(ConnectionState.CONNECTING)
        uri = f"ws://{address}{self._ws_path}"
        logger.info(f"Connecting to {uri}")

        try:
            async with asyncio.timeout(self._connect_timeout):
                ws = await self._connector(uri)
        except asyncio.CancelledError:
            if attempt == self._attempt and self._state is ConnectionState.CONNECTING:
                self._set_state(ConnectionState.DISCONNECTED)
            raise
        except Exception as e:
            error = wrap_connection_error(e, address)
            if attempt == self._attempt and self._state is ConnectionState.CONNECTING:
                self._set_state(ConnectionState.DISCONNECTED)
            logger.error(error.technical_message)
            self._notify(LinkEvent.CONNECTION_FAILED, address=address, error=error)
            raise error from e

        if attempt != self._attempt or self._state is not ConnectionState.CONNECTING:
            # close() won the race while the handshake was in flight
            logger.info(f"Connection to {address} abandoned")
            await self._close_socket(ws)
            return False

        self._ws = ws
        self._set_state(ConnectionState.CONNECTED)
        self._reader = asyncio.create_task(self._read_loop(ws), name=f"link-reader-{address}")
        logger.info(f"Connected to {address}")
        self._notify(LinkEvent.CONNECTED, address=address)
        return True

    async def close(self) -> None:
        """Close the link. Safe to call in any state, any number of times."""
        if self._state in (ConnectionState.DISCONNECTED, ConnectionState.CLOSING):
            return

        if self._state is ConnectionState.CONNECTING:
            self._set_state(ConnectionState.DISCONNECTED)
            return

        self._set_state(ConnectionState.CLOSING)
        ws, self._ws = self._ws, None
        await self._stop_reader()
        await self._close_socket(ws)
        self._set_state(ConnectionState.DISCONNECTED)
        logger.info(f"Disconnected from {self._address}")
        self._notify(LinkEvent.DISCONNECTED, address=self._address, reason="closed")

    async def __aenter__(self) -> "DeviceLink":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _stop_reader(self) -> None:
        reader, self._reader = self._reader, None
        if reader is None or reader is asyncio.current_task():
            return
        reader.cancel()
        # asyncio.wait does not re-raise the reader's cancellation
        await asyncio.wait([reader])

    async def _close_socket(self, ws: Any) -> None:
        if ws is None:
            return
        try:
            await ws.close()
        except Exception as e:
            logger.debug(f"Error while closing socket to {self._address}: {e}")

    async def _drop(self, ws: Any, reason: str) -> None:
        """Tear down after a remote close or I/O error (idempotent)."""
        if self._ws is not ws or self._state is not ConnectionState.CONNECTED:
            return

        self._ws = None
        self._set_state(ConnectionState.DISCONNECTED)
        await self._stop_reader()
        await self._close_socket(ws)
        logger.warning(f"Connection to {self._address} lost: {reason}")
        self._notify(LinkEvent.DISCONNECTED, address=self._address, reason=reason)

    # =================================================================
    # Outbound
    # =================================================================

    async def send(self, command: Command) -> bool:
        """
        Send a command.

        Returns:
            True if the frame was written; False (nothing written) when the
            link is not connected or the write failed, in which case the
            link is now DISCONNECTED
        """
        if self._state is not ConnectionState.CONNECTED or self._ws is None:
            logger.warning(f"Cannot send '{command.action}': link is {self._state.value}")
            return False

        ws = self._ws
        frame = encode_command(command)
        async with self._send_lock:
            try:
                await ws.send(frame)
            except Exception as e:
                logger.error(f"Failed to send '{command.action}': {e}")
                await self._drop(ws, f"send failed: {e}")
                return False

        logger.debug(f"Sent '{command.action}' ({len(frame)} bytes)")
        return True

    # =================================================================
    # Inbound
    # =================================================================

    async def _read_loop(self, ws: Any) -> None:
        reason = "closed by device"
        try:
            async for payload in ws:
                self._dispatch(payload)
        except ConnectionClosed as e:
            reason = f"closed by device ({e})"
        except Exception as e:
            logger.error(f"Reader for {self._address} failed: {e}", exc_info=True)
            reason = f"read failed: {e}"
        await self._drop(ws, reason)

    def _dispatch(self, payload: str | bytes) -> None:
        try:
            messages = decode_messages(payload)
        except (ValueError, RecursionError) as e:
            logger.warning(f"Discarding malformed message from device: {e}")
            return

        for message in messages:
            try:
                self._handle(message)
            except Exception as e:
                logger.warning(f"Discarding {type(message).__name__} from device: {e}", exc_info=True)

    def _handle(self, message: InboundMessage) -> None:
        if isinstance(message, IpAddressMessage):
            logger.info(f"Device reported address {message.ip}")
            self._session.update_target(message.ip, origin="device")
            self._notify(LinkEvent.IP_REPORTED, ip=message.ip)
        elif isinstance(message, PatternListMessage):
            logger.info(f"Device sent {len(message.patterns)} stored patterns")
            self._notify(LinkEvent.PATTERNS, patterns=message.patterns)
        elif isinstance(message, PatternSavedMessage):
            logger.info(f"Device saved pattern '{message.name}'")
            self._notify(LinkEvent.PATTERN_SAVED, name=message.name)

    def __repr__(self) -> str:
        return f"DeviceLink(address={self._address!r}, state={self._state.value})"
