"""Tests for the upload handshake."""

import asyncio

import pytest

from conftest import make_draft
from watercurtain.exceptions import (
    EmptySequenceError,
    InvalidValveCountError,
    NotConnectedError,
    UploadInProgressError,
)
from watercurtain.services import PatternStore, UploadService


@pytest.fixture
def store():
    return PatternStore()


@pytest.fixture
def uploader(store, link, sleep_recorder):
    return UploadService(store, link, settle_delay=0.2, completion_delay=0.5, sleep=sleep_recorder)


class TestUpload:
    """Test the config / load_pattern / pause sequence."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_handshake_order(self, store, link, connector, uploader, sleep_recorder):
        first = store.add(make_draft(rows=2, valves=8, name="first"))
        second = store.add(make_draft(rows=3, valves=8, name="second", fill=False))
        await link.connect()

        result = await uploader.upload()

        ws = connector.last
        assert ws.actions == ["config", "load_pattern", "pause"]
        assert ws.sent_json[0] == {"action": "config", "valves": 8, "leds": 8}
        pattern = ws.sent_json[1]["pattern"]
        assert len(pattern) == 5
        assert pattern == [list(row) for row in first.matrix + second.matrix]
        assert sleep_recorder.calls == [0.2, 0.5]

        assert result.pattern_count == 2
        assert result.row_count == 5
        assert result.valve_count == 8
        assert result.paused is True
        await link.close()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sixteen_valves_configured_before_load(self, store, link, connector, uploader):
        store.add(make_draft(rows=4, valves=16, name="wide"))
        store.add(make_draft(rows=1, valves=16, name="wider", fill=False))
        await link.connect()

        result = await uploader.upload()

        ws = connector.last
        assert ws.sent_json[0] == {"action": "config", "valves": 16, "leds": 16}
        assert ws.actions.index("config") < ws.actions.index("load_pattern")
        assert ws.actions.count("config") == 1
        assert all(len(row) == 16 for row in ws.sent_json[1]["pattern"])
        assert result.valve_count == 16
        await link.close()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_single_frame_for_large_sequence(self, store, link, connector, uploader):
        for i in range(20):
            store.add(make_draft(rows=50, valves=32, name=f"p{i}"))
        await link.connect()

        await uploader.upload()

        assert len(connector.last.sent_json[1]["pattern"]) == 1000
        assert connector.last.sent_json[0]["leds"] == 32
        await link.close()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_store_sends_nothing(self, link, connector, uploader, sleep_recorder):
        await link.connect()

        with pytest.raises(EmptySequenceError):
            await uploader.upload()

        assert connector.last.sent == []
        assert sleep_recorder.calls == []
        await link.close()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_mixed_widths_send_nothing(self, store, link, connector, uploader):
        store.add(make_draft(valves=8))
        store.add(make_draft(valves=16))
        await link.connect()

        with pytest.raises(InvalidValveCountError):
            await uploader.upload()

        assert connector.last.sent == []
        await link.close()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_not_connected(self, store, uploader, sleep_recorder):
        store.add(make_draft())

        with pytest.raises(NotConnectedError) as exc_info:
            await uploader.upload()

        assert exc_info.value.action == "config"
        assert sleep_recorder.calls == []
        assert not uploader.is_uploading

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_link_drops_mid_upload(self, store, link, connector):
        store.add(make_draft())
        await link.connect()

        async def drop_during_settle(seconds):
            connector.last.fail_send = True

        uploader = UploadService(store, link, sleep=drop_during_settle)

        with pytest.raises(NotConnectedError) as exc_info:
            await uploader.upload()

        assert exc_info.value.action == "load_pattern"
        assert connector.last.actions == ["config"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_concurrent_upload_rejected(self, store, link, connector):
        store.add(make_draft())
        await link.connect()
        gate = asyncio.Event()

        async def blocking_sleep(seconds):
            await gate.wait()

        uploader = UploadService(store, link, sleep=blocking_sleep)
        first = asyncio.create_task(uploader.upload())
        await asyncio.sleep(0)
        assert uploader.is_uploading

        with pytest.raises(UploadInProgressError):
            await uploader.upload()

        gate.set()
        result = await first
        assert result.paused
        assert connector.last.actions == ["config", "load_pattern", "pause"]
        await link.close()
