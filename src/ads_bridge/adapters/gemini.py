"""Gemini function-calling adapter."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ads_bridge._exceptions import MalformedRequestError
from ads_bridge.types import NormalizedCall, ParametersSchema, ToolOutput

from .base import BaseAdapter

__all__ = ["GeminiAdapter"]

GEMINI_TYPES: dict[str, str] = {
    "string": "STRING",
    "number": "NUMBER",
    "integer": "INTEGER",
    "boolean": "BOOLEAN",
    "array": "ARRAY",
    "object": "OBJECT",
}

RESULT_NAME = "function_result"
ERROR_NAME = "error"


class GeminiAdapter(BaseAdapter):
    """
    Adapter for Gemini's function-calling convention.

    Accepts ``{function_call: {name, args}}`` or a ``parts`` array, in which
    case the first part carrying a function call wins. The camelCase
    ``functionCall`` spelling used by the REST API is accepted as well.
    """

    name = "gemini"
    type_map = GEMINI_TYPES

    def parse_request(self, request: Any) -> NormalizedCall:
        if not isinstance(request, Mapping):
            raise MalformedRequestError("Gemini request must be a JSON object")

        function_call = self._function_call(request)
        if function_call is None:
            parts = request.get("parts")
            if parts is not None and not isinstance(parts, list):
                raise MalformedRequestError("parts must be an array")
            for part in parts or ():
                if isinstance(part, Mapping):
                    function_call = self._function_call(part)
                    if function_call is not None:
                        break

        if function_call is None:
            raise MalformedRequestError("Invalid Gemini function call format")

        name = function_call.get("name")
        if not isinstance(name, str) or not name:
            raise MalformedRequestError("Function call is missing a name")

        args = function_call.get("args") or {}
        if not isinstance(args, Mapping):
            raise MalformedRequestError("function_call.args must be an object")

        return NormalizedCall(tool_name=name, args=dict(args))

    def format_response(self, result: ToolOutput, call_id: Optional[str] = None) -> dict[str, Any]:
        text, images = self.split_content(result)

        parts: list[dict[str, Any]] = []
        if text.strip():
            parts.append({"text": text})
        for image in images:
            parts.append(
                {"inline_data": {"mime_type": image["mimeType"], "data": image["data"]}}
            )

        return self._function_response(RESULT_NAME, parts)

    def get_tool_definitions(self, schemas: Mapping[str, ParametersSchema]) -> list[dict[str, Any]]:
        return [
            {
                "name": name,
                "description": self.describe(name),
                "parameters": self.convert_schema(schema),
            }
            for name, schema in schemas.items()
        ]

    def format_error(self, error: Any, call_id: Optional[str] = None) -> dict[str, Any]:
        return self._function_response(
            ERROR_NAME, [{"text": f"Error: {self.error_message(error)}"}]
        )

    @staticmethod
    def _function_call(container: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
        for key in ("function_call", "functionCall"):
            value = container.get(key)
            if isinstance(value, Mapping):
                return value
        return None

    @staticmethod
    def _function_response(name: str, parts: list[dict[str, Any]]) -> dict[str, Any]:
        return {"function_response": {"name": name, "response": {"parts": parts}}}
