"""OpenAI function-calling adapter."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Union

from openai.types.shared_params import FunctionDefinition

from ads_bridge._exceptions import MalformedRequestError
from ads_bridge.types import ImageContent, NormalizedCall, ParametersSchema, ToolOutput

from .base import BaseAdapter

__all__ = ["OpenAIAdapter"]

_logger = logging.getLogger(__name__)

IMAGE_PREAMBLE = "Here are the retrieved images:"

OpenAIMessage = dict[str, Any]


class OpenAIAdapter(BaseAdapter):
    """
    Adapter for OpenAI's function-calling convention.

    Accepts the legacy ``function_call`` field and the newer ``tool_calls``
    array. Only the first entry of ``tool_calls`` is serviced per request.
    """

    name = "openai"

    def parse_request(self, request: Any) -> NormalizedCall:
        if not isinstance(request, Mapping):
            raise MalformedRequestError("OpenAI request must be a JSON object")

        # Legacy format: { function_call: { name, arguments: "{...}" } }
        function_call = request.get("function_call")
        if isinstance(function_call, Mapping):
            return NormalizedCall(
                tool_name=self._function_name(function_call),
                args=self._decode_arguments(function_call.get("arguments")),
            )

        # Tool calls array: { tool_calls: [{ id, function: { name, arguments } }] }
        tool_calls = request.get("tool_calls")
        if isinstance(tool_calls, list) and tool_calls:
            if len(tool_calls) > 1:
                _logger.warning(
                    "Received %d tool calls; only the first is serviced per request",
                    len(tool_calls),
                )

            tool_call = tool_calls[0]
            function = tool_call.get("function") if isinstance(tool_call, Mapping) else None
            if not isinstance(function, Mapping):
                raise MalformedRequestError("tool_calls[0].function must be an object")

            call_id = tool_call.get("id")
            return NormalizedCall(
                tool_name=self._function_name(function),
                args=self._decode_arguments(function.get("arguments")),
                call_id=str(call_id) if call_id is not None else None,
            )

        raise MalformedRequestError("Invalid OpenAI function call format")

    def format_response(
        self, result: ToolOutput, call_id: Optional[str] = None
    ) -> Union[OpenAIMessage, list[OpenAIMessage]]:
        text, images = self.split_content(result)
        message = self._result_message(text, call_id)

        if not images:
            return message

        # Tool messages cannot carry images; they follow in a user message.
        return [
            message,
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": IMAGE_PREAMBLE},
                    *(self._image_part(image) for image in images),
                ],
            },
        ]

    def get_tool_definitions(self, schemas: Mapping[str, ParametersSchema]) -> list[dict[str, Any]]:
        definitions: list[dict[str, Any]] = []
        for name, schema in schemas.items():
            function: FunctionDefinition = {
                "name": name,
                "description": self.describe(name),
                "parameters": self.convert_schema(schema),
            }
            definitions.append({"type": "function", "function": function})
        return definitions

    def format_error(self, error: Any, call_id: Optional[str] = None) -> OpenAIMessage:
        return self._result_message(f"Error: {self.error_message(error)}", call_id)

    # ------------------------------------------------------------------ helpers

    @staticmethod
    def _result_message(content: str, call_id: Optional[str]) -> OpenAIMessage:
        if call_id:
            return {"role": "tool", "tool_call_id": call_id, "content": content}
        return {"role": "function", "content": content}

    @staticmethod
    def _image_part(image: ImageContent) -> dict[str, Any]:
        return {
            "type": "image_url",
            "image_url": {
                "url": f"data:{image['mimeType']};base64,{image['data']}",
                "detail": "auto",
            },
        }

    @staticmethod
    def _function_name(function: Mapping[str, Any]) -> str:
        name = function.get("name")
        if not isinstance(name, str) or not name:
            raise MalformedRequestError("Function call is missing a name")
        return name

    @staticmethod
    def _decode_arguments(raw_args: Any) -> dict[str, Any]:
        """Arguments arrive as a JSON string or, from some clients, an object."""
        if raw_args is None:
            return {}
        if isinstance(raw_args, Mapping):
            return dict(raw_args)
        if not isinstance(raw_args, str):
            raise MalformedRequestError(
                f"Function arguments must be a JSON string or object, got {type(raw_args).__name__}"
            )
        if not raw_args.strip():
            return {}

        try:
            arguments = json.loads(raw_args)
        except json.JSONDecodeError as exc:
            raise MalformedRequestError(
                f"Function arguments are not valid JSON: {exc}", original_exc=exc
            ) from exc

        if not isinstance(arguments, dict):
            raise MalformedRequestError("Function arguments must decode to a JSON object")
        return arguments
