"""Tool definitions shared by every tool the agent can call."""

from __future__ import annotations

import copy
import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

Payload = Union[bytes, bytearray, str, Mapping[str, Any], None]


class ToolError(Exception):
    """Raised when a tool cannot do what it was asked to do."""


@dataclass(frozen=True)
class ToolDefinition:
    """A tool the model may call: its name, description, input schema and body."""

    name: str
    description: str
    input_schema: dict[str, Any]
    function: Callable[[Payload], str] = field(repr=False, compare=False)

    def run(self, payload: Payload) -> str:
        """Call the tool with a JSON payload and return its textual result."""
        result = self.function(payload)
        if not isinstance(result, str):
            raise ToolError(f"tool {self.name} returned {type(result).__name__}, expected str")
        return result

    def to_api(self) -> dict[str, Any]:
        """Describe the tool in the shape the messages API expects."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": copy.deepcopy(self.input_schema),
        }


def object_schema(properties: Mapping[str, tuple[str, str]]) -> dict[str, Any]:
    """Build an object input schema from ``name -> (json type, description)`` pairs."""
    return {
        "type": "object",
        "properties": {
            name: {"type": kind, "description": description}
            for name, (kind, description) in properties.items()
        },
    }


def parse_input(payload: Payload) -> dict[str, Any]:
    """Decode a tool payload into a dictionary of its fields.

    A JSON ``null`` yields an empty dictionary; anything other than an object
    is rejected.
    """
    if isinstance(payload, Mapping):
        return dict(payload)
    if payload is None:
        raise ToolError("failed to parse input: unexpected end of JSON input")
    try:
        data = json.loads(payload)
    except (ValueError, TypeError) as exc:
        raise ToolError(f"failed to parse input: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ToolError(
            f"failed to parse input: expected a JSON object, got {type(data).__name__}"
        )
    return data