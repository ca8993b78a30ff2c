# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Request Dispatcher

Turns validated protocol messages into responses:
- initialize / tools/list are answered from static data
- tools/call resolves the tool, validates arguments, consults the response
  cache, invokes the backend on a miss, and formats the payload as text

Transport-agnostic: the HTTP, streaming and stdio bindings all share one
Dispatcher instance. No lock serializes calls; the backend invocation is the
only await point.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from github_mcp.core.config import Config
from github_mcp.core.errors import (
    BackendError,
    MCPServerError,
    ToolExecutionError,
)
from github_mcp.core.logging import log_event
from github_mcp.github_client import Backend
from github_mcp.mcp_jsonrpc import (
    INTERNAL_ERROR,
    build_error_response,
    build_result_response,
    build_text_content,
)
from github_mcp.messages import (
    CallToolRequest,
    InitializeRequest,
    ListToolsRequest,
    Notification,
    ProtocolMessage,
    parse_message,
    request_id_of,
)
from github_mcp.response_cache import MISSING, ResponseCache, fingerprint
from github_mcp.tool_registry import ToolRegistry

logger = logging.getLogger(__name__)


@dataclass
class ToolCallResult:
    """Outcome of one tool call, as shown to the caller"""
    content: List[Dict[str, Any]] = field(default_factory=list)
    is_error: bool = False

    @classmethod
    def text(cls, text: str) -> "ToolCallResult":
        return cls(content=[build_text_content(text)])

    @classmethod
    def error(cls, message: str) -> "ToolCallResult":
        return cls(content=[build_text_content(f"Error: {message}")], is_error=True)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"content": self.content}
        if self.is_error:
            result["isError"] = True
        return result


class Dispatcher:
    """Routes protocol messages to the registry, cache and backend"""

    def __init__(
        self,
        registry: ToolRegistry,
        backend: Backend,
        cache: Optional[ResponseCache] = None,
        config: Optional[Config] = None
    ):
        self.registry = registry
        self.backend = backend
        self.cache = cache if cache is not None else ResponseCache()
        self.config = config or Config()

        self.protocol_version = self.config.protocol_version
        self.server_info = {
            "name": self.config.server_name,
            "version": self.config.server_version
        }
        self.capabilities = {"tools": {}}

    # ===== JSON-RPC FRAMING =====

    async def handle_message(self, raw: Any) -> Optional[Dict[str, Any]]:
        """
        Handle one decoded JSON-RPC message.

        Args:
            raw: Decoded JSON value as received from a transport

        Returns:
            JSON-RPC response dict, or None for notifications
        """
        request_id = request_id_of(raw)
        try:
            message = parse_message(raw)
            return await self.dispatch(message)
        except MCPServerError as e:
            log_event(logger, "request_rejected", level="WARNING",
                      request_id=request_id, error=e.__class__.__name__, reason=e.message)
            return build_error_response(request_id, e.code, e.message, e.details or None)
        except Exception as e:
            logger.exception(f"Unhandled error for request {request_id}")
            return build_error_response(request_id, INTERNAL_ERROR, f"Internal error: {e}")

    async def dispatch(self, message: ProtocolMessage) -> Optional[Dict[str, Any]]:
        """
        Route a validated message.

        Raises:
            UnknownToolError: tools/call named a tool that is not registered
            InvalidArgumentsError: tools/call arguments failed schema validation
        """
        if isinstance(message, Notification):
            logger.debug(f"Notification received: {message.method}")
            return None

        if isinstance(message, InitializeRequest):
            return build_result_response(message.id, self.initialize_result())

        if isinstance(message, ListToolsRequest):
            return build_result_response(message.id, self.list_tools_result())

        if isinstance(message, CallToolRequest):
            result = await self.call_tool(message.params.name, message.params.arguments)
            return build_result_response(message.id, result.to_dict())

        raise TypeError(f"Unsupported message type: {type(message).__name__}")

    # ===== OPERATIONS =====

    def initialize_result(self) -> Dict[str, Any]:
        """Static server metadata"""
        return {
            "protocolVersion": self.protocol_version,
            "capabilities": self.capabilities,
            "serverInfo": self.server_info
        }

    def list_tools_result(self) -> Dict[str, Any]:
        return {"tools": [tool.to_wire() for tool in self.registry.list_tools()]}

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> ToolCallResult:
        """
        Execute a tool.

        Unknown tools and invalid arguments raise before any backend or
        cache interaction. Backend and formatting failures are returned as
        an error result, never raised.

        Args:
            name: Tool name
            arguments: Raw caller arguments

        Returns:
            ToolCallResult with one text content block

        Raises:
            UnknownToolError: If name is not registered
            InvalidArgumentsError: If arguments fail the tool's schema
        """
        tool = self.registry.resolve(name)
        args = self.registry.validate_arguments(name, arguments)

        request = tool.build_request(args)
        key = fingerprint(request.endpoint, request.method, request.body)

        payload = self.cache.get(key, MISSING)
        if payload is not MISSING:
            log_event(logger, "cache_hit", level="DEBUG", tool=name, endpoint=request.endpoint)
        else:
            log_event(logger, "cache_miss", level="DEBUG", tool=name, endpoint=request.endpoint)
            try:
                payload = await self.backend.invoke(request.endpoint, request.method, request.body)
            except BackendError as e:
                log_event(logger, "backend_error", level="WARNING",
                          tool=name, status=e.status, reason=e.message)
                return ToolCallResult.error(e.message)
            self.cache.put(key, payload)

        try:
            text = tool.format_result(payload, args)
        except ToolExecutionError as e:
            return ToolCallResult.error(e.message)
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Unexpected payload shape for {name}: {e!r}")
            return ToolCallResult.error(f"Unexpected response from backend for {name}")

        log_event(logger, "tool_call_completed", tool=name)
        return ToolCallResult.text(text)
