# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Tests for StreamSessionManager

Keepalive timing uses short real intervals; assertions allow for
scheduler jitter.
"""

import asyncio
import json

import pytest

from github_mcp.session_manager import KEEPALIVE_FRAME, StreamSessionManager, data_frame

ENDPOINT = "http://testserver/sse"


@pytest.fixture
async def manager():
    manager = StreamSessionManager(keepalive_interval=0.05)
    yield manager
    await manager.shutdown()


def _drain(session):
    frames = []
    while not session.outbox.empty():
        frames.append(session.outbox.get_nowait())
    return frames


def test_data_frame_format():
    assert data_frame({"a": 1, "b": "x"}) == 'data: {"a":1,"b":"x"}\n\n'


def test_keepalive_frame_is_a_comment():
    assert KEEPALIVE_FRAME.startswith(":")
    assert KEEPALIVE_FRAME.endswith("\n\n")


def test_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        StreamSessionManager(keepalive_interval=0)


class TestSessionLifecycle:

    async def test_open_registers_and_queues_handshake(self, manager):
        session = manager.open_session(ENDPOINT)

        assert manager.is_open(session.session_id)
        assert manager.session_ids == [session.session_id]

        handshake = session.outbox.get_nowait()
        assert handshake.startswith("data: ")
        payload = json.loads(handshake[len("data: "):])
        assert payload == {"jsonrpc": "2.0", "method": "endpoint", "params": {"uri": ENDPOINT}}

    async def test_session_ids_are_unique(self, manager):
        ids = {manager.open_session(ENDPOINT).session_id for _ in range(20)}
        assert len(ids) == 20

    async def test_keepalives_are_emitted(self, manager):
        session = manager.open_session(ENDPOINT)

        await asyncio.sleep(0.13)

        frames = _drain(session)
        assert frames.count(KEEPALIVE_FRAME) >= 2
        assert session.keepalives_sent >= 2
        assert manager.is_open(session.session_id)

    async def test_close_stops_keepalives_and_unregisters(self, manager):
        session = manager.open_session(ENDPOINT)

        assert manager.close_session(session.session_id) is True
        assert not manager.is_open(session.session_id)

        await asyncio.sleep(0.12)
        assert session.keepalive_task.done()
        assert session.keepalives_sent == 0
        assert _drain(session)[-1] is None

    async def test_close_is_idempotent(self, manager):
        session = manager.open_session(ENDPOINT)

        assert manager.close_session(session.session_id) is True
        assert manager.close_session(session.session_id) is False
        assert manager.close_session("never-opened") is False

    async def test_sessions_are_independent(self, manager):
        first = manager.open_session(ENDPOINT)
        second = manager.open_session(ENDPOINT)

        manager.close_session(first.session_id)
        await asyncio.sleep(0.08)

        assert manager.session_ids == [second.session_id]
        assert second.keepalives_sent >= 1

    async def test_send(self, manager):
        session = manager.open_session(ENDPOINT)
        _drain(session)

        assert manager.send(session.session_id, {"jsonrpc": "2.0", "method": "ping"}) is True
        assert session.outbox.get_nowait() == 'data: {"jsonrpc":"2.0","method":"ping"}\n\n'

        assert manager.send("missing", {}) is False

    async def test_shutdown_closes_everything(self, manager):
        sessions = [manager.open_session(ENDPOINT) for _ in range(3)]

        await manager.shutdown()

        assert manager.session_ids == []
        assert all(s.keepalive_task.done() for s in sessions)


class TestStream:

    async def test_stream_yields_handshake_then_keepalive(self, manager):
        session = manager.open_session(ENDPOINT)
        frames = manager.stream(session)

        first = await frames.__anext__()
        second = await asyncio.wait_for(frames.__anext__(), timeout=1)

        assert first.startswith("data: ")
        assert second == KEEPALIVE_FRAME
        await frames.aclose()

    async def test_stream_ends_when_session_closed(self, manager):
        session = manager.open_session(ENDPOINT)
        manager.close_session(session.session_id)

        frames = [frame async for frame in manager.stream(session)]

        assert len(frames) == 1
        assert frames[0].startswith("data: ")

    async def test_consumer_disconnect_closes_session(self, manager):
        session = manager.open_session(ENDPOINT)
        frames = manager.stream(session)

        await frames.__anext__()
        await frames.aclose()

        assert not manager.is_open(session.session_id)
