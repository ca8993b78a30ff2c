# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Tool Registry

Static catalog of tool descriptors. Each descriptor pairs the wire-visible
definition (name, description, input schema) with the two pure functions that
make a tool work: one mapping validated arguments to a backend request, and
one rendering the backend payload as text.

Arguments are validated with a pydantic model generated from each
descriptor's JSON schema. Types are strict: "5" is not a number.
"""

from typing import Any, Callable, Dict, Iterable, List, Literal, Optional, Type, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    create_model,
)

from github_mcp.core.errors import InvalidArgumentsError, UnknownToolError


class BackendRequest(BaseModel):
    """One call against the backend data service"""
    model_config = ConfigDict(frozen=True)

    endpoint: str
    method: str = "GET"
    body: Optional[Dict[str, Any]] = None


RequestBuilder = Callable[[Dict[str, Any]], BackendRequest]
ResultFormatter = Callable[[Any, Dict[str, Any]], str]


class ToolDescriptor(BaseModel):
    """MCP Tool Definition"""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    input_schema: Dict[str, Any]
    build_request: RequestBuilder = Field(exclude=True, repr=False)
    format_result: ResultFormatter = Field(exclude=True, repr=False)

    @property
    def required_fields(self) -> List[str]:
        return list(self.input_schema.get("required", []))

    def to_wire(self) -> Dict[str, Any]:
        """Protocol representation (camelCase field names, as MCP clients expect)"""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema
        }


_PRIMITIVE_TYPES: Dict[str, Any] = {
    "string": StrictStr,
    "number": Union[StrictInt, StrictFloat],
    "integer": StrictInt,
    "boolean": StrictBool,
    "object": Dict[str, Any],
}


def _field_type(prop: Dict[str, Any]) -> Any:
    if "enum" in prop:
        return Literal[tuple(prop["enum"])]
    if prop.get("type") == "array":
        items = prop.get("items")
        return List[_field_type(items)] if items else List[Any]
    return _PRIMITIVE_TYPES.get(prop.get("type"), Any)


def build_argument_model(tool_name: str, input_schema: Dict[str, Any]) -> Type[BaseModel]:
    """
    Generate a pydantic model validating a tool's arguments.

    Required fields must be present, declared defaults are filled in, and
    optional fields without a default are left out of the dumped arguments.
    Undeclared fields are ignored.
    """
    required = set(input_schema.get("required", []))
    fields: Dict[str, Any] = {}

    for field_name, prop in input_schema.get("properties", {}).items():
        field_type = _field_type(prop)
        if field_name in required:
            fields[field_name] = (field_type, ...)
        elif "default" in prop:
            fields[field_name] = (field_type, prop["default"])
        else:
            fields[field_name] = (Optional[field_type], None)

    model_name = "".join(part.title() for part in tool_name.split("_")) + "Arguments"
    return create_model(model_name, __config__=ConfigDict(extra="ignore"), **fields)


class ToolRegistry:
    """
    Read-only catalog of tools, in declaration order.

    Built once at startup and never mutated afterwards.
    """

    def __init__(self, descriptors: Iterable[ToolDescriptor]):
        self._tools: Dict[str, ToolDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in self._tools:
                raise ValueError(f"Duplicate tool name: {descriptor.name}")
            self._tools[descriptor.name] = descriptor

        self._argument_models: Dict[str, Type[BaseModel]] = {
            name: build_argument_model(name, descriptor.input_schema)
            for name, descriptor in self._tools.items()
        }

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def tool_names(self) -> List[str]:
        return list(self._tools)

    def list_tools(self) -> List[ToolDescriptor]:
        """All descriptors, in declaration order"""
        return list(self._tools.values())

    def resolve(self, name: str) -> ToolDescriptor:
        """
        Look up a descriptor by name.

        Raises:
            UnknownToolError: If no tool has that name
        """
        try:
            return self._tools[name]
        except (KeyError, TypeError):
            raise UnknownToolError(str(name))

    def validate_arguments(self, name: str, arguments: Any) -> Dict[str, Any]:
        """
        Validate arguments against a tool's schema.

        Args:
            name: Tool name
            arguments: Raw arguments from the caller

        Returns:
            Validated arguments with defaults applied

        Raises:
            UnknownToolError: If no tool has that name
            InvalidArgumentsError: If a required field is missing or a type mismatches
        """
        self.resolve(name)
        model = self._argument_models[name]

        try:
            validated = model.model_validate(arguments if arguments is not None else {})
        except ValidationError as e:
            errors = [
                {
                    "field": ".".join(str(part) for part in error["loc"]) or "arguments",
                    "message": error["msg"]
                }
                for error in e.errors()
            ]
            raise InvalidArgumentsError(name, errors)

        return validated.model_dump(exclude_none=True)
