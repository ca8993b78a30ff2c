# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Unit tests for ToolRegistry and argument validation"""

import pytest

from github_mcp.core.errors import InvalidArgumentsError, UnknownToolError
from github_mcp.tool_registry import BackendRequest, ToolDescriptor, ToolRegistry


def _descriptor(name="echo", properties=None, required=None):
    schema = {"type": "object", "properties": properties or {}}
    if required:
        schema["required"] = required
    return ToolDescriptor(
        name=name,
        description=f"{name} tool",
        input_schema=schema,
        build_request=lambda args: BackendRequest(endpoint="/echo"),
        format_result=lambda payload, args: str(payload),
    )


@pytest.fixture
def echo_registry():
    return ToolRegistry([
        _descriptor(
            properties={
                "text": {"type": "string"},
                "count": {"type": "number", "default": 1},
                "loud": {"type": "boolean"},
                "mode": {"type": "string", "enum": ["a", "b"]},
                "tags": {"type": "array", "items": {"type": "string"}},
            },
            required=["text"]
        ),
        _descriptor(name="noop"),
    ])


class TestCatalog:

    def test_declaration_order(self, echo_registry):
        assert echo_registry.tool_names == ["echo", "noop"]
        assert [t.name for t in echo_registry.list_tools()] == ["echo", "noop"]

    def test_contains_and_len(self, echo_registry):
        assert "echo" in echo_registry
        assert "missing" not in echo_registry
        assert len(echo_registry) == 2

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            ToolRegistry([_descriptor(), _descriptor()])

    def test_resolve_unknown(self, echo_registry):
        with pytest.raises(UnknownToolError) as exc_info:
            echo_registry.resolve("missing")
        assert exc_info.value.tool_name == "missing"

    def test_wire_format_hides_callables(self, echo_registry):
        wire = echo_registry.resolve("echo").to_wire()

        assert set(wire) == {"name", "description", "inputSchema"}
        assert wire["inputSchema"]["required"] == ["text"]

    def test_required_fields(self, echo_registry):
        assert echo_registry.resolve("echo").required_fields == ["text"]
        assert echo_registry.resolve("noop").required_fields == []


class TestValidateArguments:

    def test_defaults_applied_and_absent_optionals_dropped(self, echo_registry):
        assert echo_registry.validate_arguments("echo", {"text": "hi"}) == {"text": "hi", "count": 1}

    def test_extra_fields_ignored(self, echo_registry):
        args = echo_registry.validate_arguments("echo", {"text": "hi", "unexpected": 1})
        assert "unexpected" not in args

    def test_none_arguments_treated_as_empty(self, echo_registry):
        assert echo_registry.validate_arguments("noop", None) == {}

    def test_missing_required(self, echo_registry):
        with pytest.raises(InvalidArgumentsError) as exc_info:
            echo_registry.validate_arguments("echo", {})

        assert exc_info.value.errors[0]["field"] == "text"
        assert exc_info.value.message.startswith("Invalid arguments for echo: text:")

    @pytest.mark.parametrize("args, field", [
        ({"text": 5}, "text"),
        ({"text": "hi", "count": "5"}, "count"),
        ({"text": "hi", "loud": "yes"}, "loud"),
        ({"text": "hi", "mode": "c"}, "mode"),
        ({"text": "hi", "tags": "x"}, "tags"),
    ])
    def test_type_mismatch(self, echo_registry, args, field):
        with pytest.raises(InvalidArgumentsError) as exc_info:
            echo_registry.validate_arguments("echo", args)

        assert exc_info.value.errors[0]["field"].split(".")[0] == field

    def test_number_accepts_float(self, echo_registry):
        assert echo_registry.validate_arguments("echo", {"text": "hi", "count": 2.5})["count"] == 2.5

    def test_non_object_arguments(self, echo_registry):
        with pytest.raises(InvalidArgumentsError):
            echo_registry.validate_arguments("echo", ["hi"])

    def test_unknown_tool(self, echo_registry):
        with pytest.raises(UnknownToolError):
            echo_registry.validate_arguments("missing", {})
