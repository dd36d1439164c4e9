"""MCP adapter: the generic JSON-RPC tool protocol."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ads_bridge._exceptions import AdsBridgeError, MalformedRequestError
from ads_bridge.types import NormalizedCall, ParametersSchema, ToolOutput, text_content

from .base import BaseAdapter

__all__ = ["MCPAdapter", "LIST_TOOLS"]

# Tool name carried by a normalised "tools/list" request. Bindings answer it
# with ``get_tool_definitions``; it is never registered or dispatched.
LIST_TOOLS = "tools/list"

METHOD_NOT_FOUND = -32601


class MCPAdapter(BaseAdapter):
    """Adapter for MCP ``tools/list`` and ``tools/call`` requests."""

    name = "mcp"
    passthrough_keys = ("additionalProperties",)

    def parse_request(self, request: Any) -> NormalizedCall:
        if not isinstance(request, Mapping):
            raise MalformedRequestError("MCP request must be a JSON object")

        method = request.get("method")

        if method == "tools/call":
            params = request.get("params")
            if not isinstance(params, Mapping):
                raise MalformedRequestError("tools/call requires a params object")

            tool_name = params.get("name")
            if not isinstance(tool_name, str) or not tool_name:
                raise MalformedRequestError("tools/call requires params.name")

            arguments = params.get("arguments") or {}
            if not isinstance(arguments, Mapping):
                raise MalformedRequestError("params.arguments must be an object")

            return NormalizedCall(tool_name=tool_name, args=dict(arguments))

        if method == "tools/list":
            return NormalizedCall(tool_name=LIST_TOOLS)

        raise MalformedRequestError(
            f"Unsupported MCP method: {method}", code=METHOD_NOT_FOUND
        )

    def format_response(self, result: ToolOutput, call_id: Optional[str] = None) -> dict[str, Any]:
        # Results already in MCP shape pass through, copied so the handler's
        # object is never shared with the response.
        if isinstance(result, Mapping) and isinstance(result.get("content"), list):
            response: dict[str, Any] = {
                "content": [dict(item) for item in result["content"] if isinstance(item, Mapping)]
            }
            if result.get("isError"):
                response["isError"] = True
            return response

        text, _ = self.split_content(result)
        return {"content": [text_content(text)]}

    def get_tool_definitions(self, schemas: Mapping[str, ParametersSchema]) -> list[dict[str, Any]]:
        return [
            {
                "name": name,
                "description": self.describe(name),
                "inputSchema": self.convert_schema(schema),
            }
            for name, schema in schemas.items()
        ]

    def format_error(self, error: Any, call_id: Optional[str] = None) -> dict[str, Any]:
        try:
            code = getattr(error, "code", None)
        except Exception:
            code = None
        if not isinstance(code, int) or isinstance(code, bool):
            code = AdsBridgeError.code
        return {"error": {"code": code, "message": self.error_message(error)}}
