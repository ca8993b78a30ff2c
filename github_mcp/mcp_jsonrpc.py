# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
JSON-RPC 2.0 Message Builders for MCP Protocol (server side)
"""

from typing import Any, Dict, Optional, Union

JSONRPC_VERSION = "2.0"

# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000

RequestId = Optional[Union[int, str]]


def build_result_response(request_id: RequestId, result: Dict[str, Any]) -> Dict:
    """Build JSON-RPC success response"""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "result": result
    }


def build_error_response(
    request_id: RequestId,
    code: int,
    message: str,
    data: Optional[Dict] = None
) -> Dict:
    """Build JSON-RPC error response"""
    error = {"code": code, "message": message}
    if data:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}


def build_notification(method: str, params: Optional[Dict[str, Any]] = None) -> Dict:
    """Build JSON-RPC notification (no id, no response expected)"""
    notification = {
        "jsonrpc": JSONRPC_VERSION,
        "method": method
    }
    if params is not None:
        notification["params"] = params
    return notification


def build_endpoint_notification(uri: str) -> Dict:
    """Build the notification announcing where JSON-RPC requests should be posted"""
    return build_notification("endpoint", {"uri": uri})


def build_text_content(text: str) -> Dict[str, str]:
    """Build an MCP text content block"""
    return {"type": "text", "text": text}
