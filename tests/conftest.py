"""Pytest fixtures for tests."""

import asyncio
import json
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from watercurtain.device import DeviceLink, DeviceSession
from watercurtain.models import AppConfig, PatternDraft, PatternSource

_CLOSE = object()


class FakeWebSocket:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self, incoming=()):
        self.sent: list[str] = []
        self.closed = False
        self.fail_send = False
        self._queue: asyncio.Queue = asyncio.Queue()
        for payload in incoming:
            self._queue.put_nowait(payload)

    async def send(self, frame: str) -> None:
        if self.fail_send:
            raise ConnectionResetError("connection reset by peer")
        self.sent.append(frame)

    async def close(self) -> None:
        self.closed = True
        self._queue.put_nowait(_CLOSE)

    def push(self, payload) -> None:
        """Deliver a frame from the 'device'."""
        self._queue.put_nowait(payload if isinstance(payload, str) else json.dumps(payload))

    def hang_up(self) -> None:
        """Simulate the device closing the connection."""
        self._queue.put_nowait(_CLOSE)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._queue.get()
        if item is _CLOSE:
            raise StopAsyncIteration
        return item

    @property
    def sent_json(self) -> list[dict]:
        return [json.loads(frame) for frame in self.sent]

    @property
    def actions(self) -> list[str]:
        return [message["action"] for message in self.sent_json]


class FakeConnector:
    """Connector that hands out FakeWebSockets for reachable hosts only."""

    def __init__(self, reachable: set[str] | None = None):
        self.reachable = reachable
        self.uris: list[str] = []
        self.sockets: list[FakeWebSocket] = []

    async def __call__(self, uri: str) -> FakeWebSocket:
        self.uris.append(uri)
        host = uri.split("://", 1)[1].split("/", 1)[0]
        if self.reachable is not None and host not in self.reachable:
            raise ConnectionRefusedError(f"[Errno 111] Connect call failed ('{host}', 80)")
        ws = FakeWebSocket()
        self.sockets.append(ws)
        return ws

    @property
    def last(self) -> FakeWebSocket:
        return self.sockets[-1]


class SleepRecorder:
    """Replacement for asyncio.sleep that records delays without waiting."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        await asyncio.sleep(0)


async def drain() -> None:
    """Let background tasks (the link reader) run."""
    for _ in range(10):
        await asyncio.sleep(0)


def make_draft(rows: int = 2, valves: int = 8, name: str = "test", fill: bool = True) -> PatternDraft:
    """Build a checkerboard draft (all cells off when fill is False)."""
    matrix = tuple(
        tuple(fill and (r + c) % 2 == 0 for c in range(valves)) for r in range(rows)
    )
    return PatternDraft(name=name, matrix=matrix, source=PatternSource.MANUAL, origin=f"{rows}x{valves} grid")


@pytest.fixture
def temp_dir():
    """Create a temporary directory that gets cleaned up."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config():
    """Default configuration with no handshake delays."""
    return AppConfig(settle_delay=0.0, completion_delay=0.0)


@pytest.fixture
def session():
    return DeviceSession()


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def link(session, connector):
    """A link that connects through the fake connector."""
    return DeviceLink(session, connect_timeout=0.5, connector=connector)
