# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
MCP Protocol Messages

Incoming JSON-RPC traffic is validated once, in parse_message(), into one of
the request models below (discriminated by "method"). Handlers only ever see
validated models, never raw dicts.
"""

import json
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from github_mcp.core.errors import MalformedMessageError, ParseError, UnknownMethodError
from github_mcp.mcp_jsonrpc import JSONRPC_VERSION, RequestId

INITIALIZE = "initialize"
LIST_TOOLS = "tools/list"
CALL_TOOL = "tools/call"
NOTIFICATION_PREFIX = "notifications/"

REQUEST_METHODS = (INITIALIZE, LIST_TOOLS, CALL_TOOL)


class JSONRPCMessage(BaseModel):
    """Fields shared by every JSON-RPC 2.0 message"""
    model_config = ConfigDict(extra="ignore", frozen=True)

    jsonrpc: Literal["2.0"]


class InitializeParams(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    protocol_version: Optional[str] = Field(default=None, alias="protocolVersion")
    client_info: Dict[str, Any] = Field(default_factory=dict, alias="clientInfo")
    capabilities: Dict[str, Any] = Field(default_factory=dict)


class InitializeRequest(JSONRPCMessage):
    id: Union[int, str]
    method: Literal["initialize"]
    params: InitializeParams = Field(default_factory=InitializeParams)


class ListToolsRequest(JSONRPCMessage):
    id: Union[int, str]
    method: Literal["tools/list"]
    params: Dict[str, Any] = Field(default_factory=dict)


class CallToolParams(BaseModel):
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class CallToolRequest(JSONRPCMessage):
    id: Union[int, str]
    method: Literal["tools/call"]
    params: CallToolParams


class Notification(JSONRPCMessage):
    """Client notification (no id, no response)"""
    method: str
    params: Dict[str, Any] = Field(default_factory=dict)


Request = Annotated[
    Union[InitializeRequest, ListToolsRequest, CallToolRequest],
    Field(discriminator="method")
]
ProtocolMessage = Union[InitializeRequest, ListToolsRequest, CallToolRequest, Notification]

_request_adapter: TypeAdapter = TypeAdapter(Request)


def request_id_of(raw: Any) -> RequestId:
    """Best-effort correlation id, used to address error responses"""
    if isinstance(raw, dict):
        request_id = raw.get("id")
        if isinstance(request_id, (int, str)) and not isinstance(request_id, bool):
            return request_id
    return None


def decode(text: Union[str, bytes]) -> Any:
    """
    Decode one JSON document.

    Raises:
        ParseError: If the text is not valid JSON
    """
    try:
        return json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Parse error: {e}")


def parse_message(raw: Any) -> ProtocolMessage:
    """
    Validate a decoded JSON value into a protocol message.

    Args:
        raw: Decoded JSON value

    Returns:
        InitializeRequest, ListToolsRequest, CallToolRequest or Notification

    Raises:
        MalformedMessageError: Shape does not match any recognized message
        UnknownMethodError: Well-formed request for a method this server does not serve
    """
    if not isinstance(raw, dict):
        raise MalformedMessageError("Invalid Request: expected a JSON object")

    if raw.get("jsonrpc") != JSONRPC_VERSION:
        raise MalformedMessageError("Invalid JSON-RPC version")

    method = raw.get("method")
    if not isinstance(method, str):
        raise MalformedMessageError("Invalid Request: missing method")

    if "id" not in raw:
        if method.startswith(NOTIFICATION_PREFIX):
            try:
                return Notification.model_validate(raw)
            except ValidationError as e:
                raise MalformedMessageError("Invalid notification", details={"errors": _describe(e)})
        raise MalformedMessageError(f"Invalid Request: {method} requires an id")

    if method not in REQUEST_METHODS:
        raise UnknownMethodError(method)

    try:
        return _request_adapter.validate_python(raw)
    except ValidationError as e:
        raise MalformedMessageError(f"Invalid {method} request", details={"errors": _describe(e)})


def _describe(error: ValidationError) -> list:
    return [
        {"field": ".".join(str(part) for part in e["loc"]), "message": e["msg"]}
        for e in error.errors()
    ]
