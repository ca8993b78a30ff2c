# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
GitHub MCP Server (HTTP)

Serves the MCP protocol over HTTP:
- POST / and POST /sse: JSON-RPC 2.0 request/response
- GET /sse: server-sent event stream (endpoint handshake + keepalive)
- GET /mcp/tools, POST /mcp/tools/call: direct-call (legacy REST) framing
- GET /mcp, GET /health: metadata and liveness
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import BaseModel, Field, ValidationError

from github_mcp.core.config import Config
from github_mcp.core.errors import InvalidArgumentsError, ParseError, UnknownToolError
from github_mcp.dispatcher import Dispatcher, ToolCallResult
from github_mcp.mcp_jsonrpc import INVALID_REQUEST, PARSE_ERROR, build_error_response
from github_mcp.messages import decode
from github_mcp.session_manager import StreamSessionManager

logger = logging.getLogger(__name__)


class ToolCallRequest(BaseModel):
    """Direct-call request body"""
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class GitHubMCPServer:
    """
    HTTP binding for the dispatcher and the stream session manager.

    Both collaborators are injected so their lifecycle stays explicit.
    """

    def __init__(
        self,
        config: Config,
        dispatcher: Dispatcher,
        session_manager: Optional[StreamSessionManager] = None,
        backend_close: Optional[Callable[[], Awaitable[None]]] = None
    ):
        """
        Args:
            config: Server configuration
            dispatcher: Shared dispatcher
            session_manager: Stream session registry (created from config if omitted)
            backend_close: Optional coroutine function awaited on shutdown
        """
        self.config = config
        self.name = config.server_name
        self.dispatcher = dispatcher
        self.session_manager = session_manager or StreamSessionManager(
            keepalive_interval=config.keepalive_interval
        )
        self._backend_close = backend_close

        # Create FastAPI app
        self.app = FastAPI(
            title=f"MCP Server: {self.name}",
            description=config.server_description,
            version=config.server_version,
            lifespan=self._lifespan
        )

        # Add CORS middleware to allow browser-based MCP clients
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._setup_routes()

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        self.dispatcher.cache.start_sweeper(self.config.cache_sweep_interval)
        logger.info(f"[{self.name}] started")
        try:
            yield
        finally:
            await self.session_manager.shutdown()
            await self.dispatcher.cache.stop_sweeper()
            if self._backend_close:
                await self._backend_close()
            logger.info(f"[{self.name}] stopped")

    def _setup_routes(self):
        """Setup JSON-RPC, streaming and direct-call routes"""

        @self.app.get("/health")
        async def health():
            return {"status": "healthy", "service": self.name}

        @self.app.get("/mcp")
        async def server_metadata():
            return {
                "name": self.name,
                "version": self.config.server_version,
                "description": self.config.server_description,
                "capabilities": ["tools"],
                "tools": self.dispatcher.registry.tool_names
            }

        # ===== JSON-RPC 2.0 =====

        @self.app.post("/")
        async def mcp_endpoint(request: Request):
            """Main MCP endpoint - handles all JSON-RPC messages"""
            return await self._handle_jsonrpc(request)

        @self.app.post("/sse")
        async def mcp_sse_endpoint(request: Request):
            """JSON-RPC endpoint announced in the stream handshake"""
            return await self._handle_jsonrpc(request)

        # ===== STREAMING =====

        @self.app.get("/sse")
        async def event_stream():
            session = self.session_manager.open_session(f"{self.config.base_url}/sse")
            return StreamingResponse(
                self.session_manager.stream(session),
                media_type="text/event-stream",
                headers={
                    "Cache-Control": "no-cache",
                    "Connection": "keep-alive",
                    "X-Accel-Buffering": "no",
                    "MCP-Session-Id": session.session_id
                }
            )

        # ===== DIRECT-CALL FRAMING =====

        @self.app.get("/mcp/tools")
        async def list_tools():
            return self.dispatcher.list_tools_result()

        @self.app.post("/mcp/tools/call")
        async def call_tool(request: Request):
            return await self._handle_direct_call(request)

    async def _handle_jsonrpc(self, request: Request) -> Response:
        try:
            raw = decode(await request.body())
        except ParseError as e:
            return JSONResponse(
                status_code=400,
                content=build_error_response(None, PARSE_ERROR, e.message)
            )

        response = await self.dispatcher.handle_message(raw)
        if response is None:
            return Response(status_code=202)

        if "error" in response and response["error"]["code"] in (INVALID_REQUEST, PARSE_ERROR):
            return JSONResponse(status_code=400, content=response)
        return JSONResponse(content=response)

    async def _handle_direct_call(self, request: Request) -> JSONResponse:
        """
        Direct-call framing: every failure is an in-band error content block.
        """
        try:
            body = ToolCallRequest.model_validate(json.loads(await request.body()))
        except (ValueError, ValidationError) as e:
            result = ToolCallResult.error(f"Malformed request: {e}")
            return JSONResponse(status_code=400, content=result.to_dict())

        try:
            result = await self.dispatcher.call_tool(body.name, body.arguments)
        except UnknownToolError as e:
            return JSONResponse(status_code=404, content=ToolCallResult.error(e.message).to_dict())
        except InvalidArgumentsError as e:
            return JSONResponse(status_code=400, content=ToolCallResult.error(e.message).to_dict())

        return JSONResponse(content=result.to_dict())

    def run(self):
        """Start the MCP server"""
        logger.info(f"Starting MCP Server: {self.name} on port {self.config.port}")
        uvicorn.run(self.app, host=self.config.host, port=self.config.port, log_config=None)
