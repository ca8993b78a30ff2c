# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Custom exceptions for the GitHub MCP server.

All exceptions inherit from MCPServerError for consistent error handling.
Each error carries the JSON-RPC error code it maps to, so transports can
translate it into their own framing without inspecting the type.
"""

from typing import Any, Dict, List, Optional

from github_mcp.mcp_jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_ERROR,
)


class MCPServerError(Exception):
    """Base exception for all GitHub MCP server errors."""

    def __init__(
        self,
        message: str,
        code: int = INTERNAL_ERROR,
        details: Optional[dict] = None
    ):
        """
        Initialize server error.

        Args:
            message: Human-readable error message
            code: JSON-RPC error code
            details: Additional error details
        """
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for API response."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details
        }


class MalformedMessageError(MCPServerError):
    """Input does not match any recognized protocol message shape."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, code=INVALID_REQUEST, details=details)


class ParseError(MalformedMessageError):
    """Input is not valid JSON."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, details=details)
        self.code = PARSE_ERROR


class UnknownMethodError(MalformedMessageError):
    """Well-formed JSON-RPC request naming a method this server does not serve."""

    def __init__(self, method: Any, details: Optional[dict] = None):
        super().__init__(f"Method not found: {method}", details=details)
        self.code = METHOD_NOT_FOUND
        self.method = method


class UnknownToolError(MCPServerError):
    """Tool name not present in the registry."""

    def __init__(self, tool_name: str, details: Optional[dict] = None):
        """
        Initialize unknown tool error.

        Args:
            tool_name: Requested tool name
            details: Additional error details
        """
        super().__init__(f"Unknown tool: {tool_name}", code=METHOD_NOT_FOUND, details=details)
        self.tool_name = tool_name


class InvalidArgumentsError(MCPServerError):
    """Tool arguments do not satisfy the tool's parameter schema."""

    def __init__(
        self,
        tool_name: str,
        errors: List[Dict[str, Any]],
        details: Optional[dict] = None
    ):
        """
        Initialize invalid arguments error.

        Args:
            tool_name: Tool whose schema rejected the arguments
            errors: One entry per failing field ({"field", "message"})
            details: Additional error details
        """
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        super().__init__(
            f"Invalid arguments for {tool_name}: {summary}",
            code=INVALID_PARAMS,
            details={"errors": errors, **(details or {})}
        )
        self.tool_name = tool_name
        self.errors = errors


class BackendError(MCPServerError):
    """The downstream data service failed (non-2xx status or network fault)."""

    def __init__(self, message: str, status: Optional[int] = None, details: Optional[dict] = None):
        """
        Initialize backend error.

        Args:
            message: Error message, passed through unchanged
            status: HTTP status code, None for transport faults
            details: Additional error details
        """
        super().__init__(message, code=SERVER_ERROR, details=details)
        self.status = status


class ToolExecutionError(MCPServerError):
    """A tool could not turn the backend payload into a result."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, code=SERVER_ERROR, details=details)


class ConfigurationError(MCPServerError):
    """Configuration error (missing credentials, invalid config file)."""

    def __init__(self, message: str, config_file: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message, code=INTERNAL_ERROR, details=details)
        self.config_file = config_file
