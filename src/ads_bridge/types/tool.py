from __future__ import annotations

from dataclasses import dataclass
from typing import Any

__all__ = ["ToolDefinition", "ParametersSchema"]

# JSON-Schema-like: {type, properties: {name: {type, description, enum?, items?, properties?}}, required}
ParametersSchema = dict[str, Any]


@dataclass(slots=True)
class ToolDefinition:
    """Protocol-agnostic description of a tool, the source every adapter derives from."""
    name: str
    description: str
    parameters_schema: ParametersSchema
