# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Stream Session Manager

Owns the server-sent event connections of the streaming transport:
- Assigns each connection a fresh session id and registers it
- Sends the endpoint handshake, then a keepalive comment every interval
- Delivers one-way messages to a session
- Cancels the keepalive and unregisters the session on disconnect

Call traffic never flows through here; tools/call is served by the
request/response transport even while a stream is open.
"""

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional

from github_mcp.core.logging import log_event
from github_mcp.mcp_jsonrpc import build_endpoint_notification

logger = logging.getLogger(__name__)

DEFAULT_KEEPALIVE_INTERVAL = 30.0
KEEPALIVE_FRAME = ":ping\n\n"


def data_frame(message: Dict[str, Any]) -> str:
    """Encode a JSON message as one SSE data frame"""
    return f"data: {json.dumps(message, separators=(',', ':'))}\n\n"


@dataclass
class StreamSession:
    """Server-side state of one open stream"""
    session_id: str
    endpoint_uri: str
    created_at: datetime
    outbox: "asyncio.Queue[Optional[str]]" = field(default_factory=asyncio.Queue)
    keepalive_task: Optional[asyncio.Task] = None
    keepalives_sent: int = 0


class StreamSessionManager:
    """Registry of live stream sessions"""

    def __init__(self, keepalive_interval: float = DEFAULT_KEEPALIVE_INTERVAL):
        if keepalive_interval <= 0:
            raise ValueError("keepalive_interval must be positive")
        self.keepalive_interval = keepalive_interval
        self.sessions: Dict[str, StreamSession] = {}

    @property
    def session_ids(self) -> List[str]:
        return list(self.sessions)

    def is_open(self, session_id: str) -> bool:
        return session_id in self.sessions

    def open_session(self, endpoint_uri: str) -> StreamSession:
        """
        Register a new stream (requires a running event loop).

        Queues the handshake frame announcing where JSON-RPC requests go,
        then starts the keepalive timer.

        Args:
            endpoint_uri: Callback address for request/response traffic

        Returns:
            The new session
        """
        session = StreamSession(
            session_id=str(uuid.uuid4()),
            endpoint_uri=endpoint_uri,
            created_at=datetime.now(timezone.utc)
        )
        session.outbox.put_nowait(data_frame(build_endpoint_notification(endpoint_uri)))
        session.keepalive_task = asyncio.create_task(self._keepalive(session))
        self.sessions[session.session_id] = session

        log_event(logger, "stream_session_opened", session_id=session.session_id,
                  live_sessions=len(self.sessions))
        return session

    def close_session(self, session_id: str) -> bool:
        """
        Tear down a session. Idempotent.

        Returns:
            True if the session was open
        """
        session = self.sessions.pop(session_id, None)
        if session is None:
            return False

        if session.keepalive_task and not session.keepalive_task.done():
            session.keepalive_task.cancel()
        # Ends the frame stream for any consumer still attached
        session.outbox.put_nowait(None)

        log_event(logger, "stream_session_closed", session_id=session_id,
                  keepalives_sent=session.keepalives_sent, live_sessions=len(self.sessions))
        return True

    def send(self, session_id: str, message: Dict[str, Any]) -> bool:
        """
        Queue a one-way JSON message for a session.

        Returns:
            False if the session is not open
        """
        session = self.sessions.get(session_id)
        if session is None:
            return False
        session.outbox.put_nowait(data_frame(message))
        return True

    async def _keepalive(self, session: StreamSession):
        """Queue a keepalive comment every interval until cancelled"""
        while True:
            await asyncio.sleep(self.keepalive_interval)
            if session.session_id not in self.sessions:
                return
            session.outbox.put_nowait(KEEPALIVE_FRAME)
            session.keepalives_sent += 1

    async def stream(self, session: StreamSession) -> AsyncIterator[str]:
        """
        Yield the session's frames until it is closed.

        The session is closed when the consumer stops iterating (peer
        disconnect cancels the response task).
        """
        try:
            while True:
                frame = await session.outbox.get()
                if frame is None:
                    break
                yield frame
        finally:
            self.close_session(session.session_id)

    async def shutdown(self):
        """Close every session and wait for keepalive timers to stop"""
        tasks = [s.keepalive_task for s in self.sessions.values() if s.keepalive_task]
        for session_id in list(self.sessions):
            self.close_session(session_id)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
