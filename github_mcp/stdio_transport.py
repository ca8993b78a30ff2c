# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Stdio transport for MCP.

Line-delimited JSON-RPC: one message per line on stdin, one response per
line on stdout. Lines are dispatched concurrently; responses are written
as they complete, so their order follows completion, not arrival.
"""

import asyncio
import json
import logging
import sys
from typing import Any, Dict, Protocol, Set

from github_mcp.core.errors import ParseError
from github_mcp.core.logging import log_event
from github_mcp.dispatcher import Dispatcher
from github_mcp.messages import decode
from github_mcp.mcp_jsonrpc import INVALID_REQUEST, build_error_response

logger = logging.getLogger(__name__)

# File writes carry base64 content inline, so request lines can be large
MAX_LINE_BYTES = 32 * 1024 * 1024


class LineWriter(Protocol):
    def write(self, data: bytes) -> Any: ...

    async def drain(self) -> None: ...


class StdioTransport:
    """Process-attached duplex channel for a Dispatcher"""

    def __init__(self, dispatcher: Dispatcher, max_line_bytes: int = MAX_LINE_BYTES):
        self.dispatcher = dispatcher
        self.max_line_bytes = max_line_bytes
        self._write_lock = asyncio.Lock()
        self._pending: Set[asyncio.Task] = set()

    async def serve(self, reader: asyncio.StreamReader, writer: LineWriter) -> None:
        """
        Serve until end of input, then wait for in-flight calls.

        A line longer than the reader's limit is answered with an
        Invalid Request error; serving continues with the next line.

        Args:
            reader: Source of request lines
            writer: Sink for response lines
        """
        while True:
            try:
                line = await reader.readline()
            except (ValueError, asyncio.LimitOverrunError) as e:
                # readline() has already dropped the oversized chunk
                log_event(logger, "stdio_line_rejected", level="WARNING", reason=str(e))
                await self._write(writer, build_error_response(
                    None, INVALID_REQUEST, "Invalid Request: message line too long"
                ))
                continue

            if not line:
                break
            if not line.strip():
                continue
            task = asyncio.create_task(self._handle_line(line, writer))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        logger.info("stdin closed, stdio transport stopped")

    async def _handle_line(self, line: bytes, writer: LineWriter) -> None:
        try:
            raw = decode(line)
        except ParseError as e:
            await self._write(writer, build_error_response(None, e.code, e.message))
            return

        response = await self.dispatcher.handle_message(raw)
        if response is not None:
            await self._write(writer, response)

    async def _write(self, writer: LineWriter, message: Dict[str, Any]) -> None:
        data = (json.dumps(message, ensure_ascii=False) + "\n").encode("utf-8")
        async with self._write_lock:
            writer.write(data)
            await writer.drain()

    async def run(self, stdin=None, stdout=None) -> None:
        """
        Serve over the process's stdin/stdout, or over the given pipe files.

        Args:
            stdin: Readable pipe file (defaults to sys.stdin)
            stdout: Writable pipe file (defaults to sys.stdout)
        """
        loop = asyncio.get_running_loop()
        stdin = stdin or sys.stdin
        stdout = stdout or sys.stdout

        reader = asyncio.StreamReader(limit=self.max_line_bytes)
        await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), stdin)

        transport, protocol = await loop.connect_write_pipe(asyncio.streams.FlowControlMixin, stdout)
        writer = asyncio.StreamWriter(transport, protocol, reader, loop)

        await self.serve(reader, writer)
