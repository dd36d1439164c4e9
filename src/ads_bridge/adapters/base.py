"""Base class for protocol adapters."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Mapping, Optional

from ads_bridge._exceptions import ConfigurationError
from ads_bridge.schemas import TOOL_DESCRIPTIONS
from ads_bridge.types import ImageContent, NormalizedCall, ParametersSchema, ToolOutput

__all__ = ["BaseAdapter", "JSON_SCHEMA_TYPES"]

# Fixed, total mapping from JSON Schema primitive names to themselves. Protocols
# with their own type vocabulary override ``type_map``.
JSON_SCHEMA_TYPES: dict[str, str] = {
    "string": "string",
    "number": "number",
    "integer": "integer",
    "boolean": "boolean",
    "array": "array",
    "object": "object",
}


class BaseAdapter(ABC):
    """
    Translator between one tool-calling convention and the internal call/result shape.

    Subclasses implement ``parse_request``, ``format_response`` and
    ``get_tool_definitions`` and may override ``format_error``. Adapters are
    stateless: nothing on the instance changes after ``__init__``, so one
    instance can serve any number of interleaved requests.
    """

    name: ClassVar[str] = "base"
    type_map: ClassVar[Mapping[str, str]] = JSON_SCHEMA_TYPES
    # Top-level schema keys copied through verbatim in addition to the translated ones.
    passthrough_keys: ClassVar[tuple[str, ...]] = ()

    def __init__(self, descriptions: Optional[Mapping[str, str]] = None) -> None:
        self.descriptions: Mapping[str, str] = (
            TOOL_DESCRIPTIONS if descriptions is None else descriptions
        )

    # ------------------------------------------------------------------ contract

    @abstractmethod
    def parse_request(self, request: Any) -> NormalizedCall:
        """Locate the protocol envelope in *request* and normalise it."""
        ...

    @abstractmethod
    def format_response(self, result: ToolOutput, call_id: Optional[str] = None) -> Any:
        """Render a tool result in the protocol's response shape."""
        ...

    @abstractmethod
    def get_tool_definitions(self, schemas: Mapping[str, ParametersSchema]) -> list[dict[str, Any]]:
        """Protocol-native tool descriptors, in the insertion order of *schemas*."""
        ...

    def format_error(self, error: Any, call_id: Optional[str] = None) -> Any:
        """Render *error* in the protocol's error shape. Never raises."""
        return {
            "error": {
                "message": self.error_message(error),
                "type": type(error).__name__,
            }
        }

    # ------------------------------------------------------------------ helpers

    def describe(self, tool_name: str) -> str:
        try:
            return self.descriptions[tool_name]
        except KeyError:
            raise ConfigurationError(f"No description for tool: {tool_name}") from None

    def map_type(self, type_name: Any) -> str:
        if isinstance(type_name, str) and type_name in self.type_map:
            return self.type_map[type_name]
        return self.type_map["string"]

    def convert_schema(self, schema: Mapping[str, Any]) -> dict[str, Any]:
        """Translate a top-level parameters schema without touching the source."""
        converted: dict[str, Any] = {
            "type": self.map_type(schema.get("type", "object")),
            "properties": {
                key: self.convert_property(prop)
                for key, prop in (schema.get("properties") or {}).items()
            },
            "required": list(schema.get("required") or []),
        }
        for key in self.passthrough_keys:
            if key in schema:
                converted[key] = schema[key]
        return converted

    def convert_property(self, prop: Mapping[str, Any]) -> dict[str, Any]:
        prop = prop or {}
        converted: dict[str, Any] = {"type": self.map_type(prop.get("type"))}

        if "description" in prop:
            converted["description"] = prop["description"]

        if "enum" in prop:
            converted["enum"] = list(prop["enum"])

        items = prop.get("items")
        if isinstance(items, Mapping):
            converted["items"] = self.convert_property(items)

        properties = prop.get("properties")
        if isinstance(properties, Mapping):
            converted["properties"] = {
                key: self.convert_property(sub) for key, sub in properties.items()
            }
            if "required" in prop:
                converted["required"] = list(prop["required"])

        return converted

    @staticmethod
    def stable_json(payload: Any) -> str:
        """Deterministic JSON text, so identical results format identically."""
        return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False, default=str)

    @classmethod
    def split_content(cls, result: ToolOutput) -> tuple[str, list[ImageContent]]:
        """
        Flatten a tool result into its text and its image items.

        Text items are joined with a newline in their original order. A plain
        string passes through verbatim; any other object without a content
        list is serialised with ``stable_json``.
        """
        if isinstance(result, Mapping) and isinstance(result.get("content"), list):
            texts: list[str] = []
            images: list[ImageContent] = []
            for item in result["content"]:
                if not isinstance(item, Mapping):
                    continue
                if item.get("type") == "text":
                    texts.append(str(item.get("text") or ""))
                elif item.get("type") == "image" and item.get("data") and item.get("mimeType"):
                    images.append(item)  # type: ignore[arg-type]
            return "\n".join(texts), images

        if isinstance(result, str):
            return result, []

        return cls.stable_json(result), []

    @staticmethod
    def error_message(error: Any) -> str:
        """Best-effort human-readable message for any error-like object."""
        if error is None:
            return "Unknown error"
        try:
            message = getattr(error, "message", None)
            if message is None and isinstance(error, Mapping):
                message = error.get("message")
            if message is None:
                message = str(error)
            message = str(message)
        except Exception:
            message = ""
        if message:
            return message
        try:
            return type(error).__name__
        except Exception:
            return "Unknown error"
