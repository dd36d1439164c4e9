"""Tool result shapes shared by handlers and adapters."""

from __future__ import annotations

import json
from typing import Any, Literal, NotRequired, TypedDict, Union

__all__ = [
    "TextContent",
    "ImageContent",
    "ContentItem",
    "ToolResult",
    "ToolOutput",
    "text_content",
    "image_content",
    "text_result",
    "json_result",
]


class TextContent(TypedDict):
    type: Literal["text"]
    text: str


class ImageContent(TypedDict):
    type: Literal["image"]
    data: str           # base64, no data: prefix
    mimeType: str


ContentItem = Union[TextContent, ImageContent]


class ToolResult(TypedDict):
    content: list[ContentItem]
    isError: NotRequired[bool]


# Handlers may also hand back a bare string or any JSON-serialisable object.
ToolOutput = Union[ToolResult, str, dict[str, Any], list[Any]]


def text_content(text: str) -> TextContent:
    return {"type": "text", "text": text}


def image_content(data: str, mime_type: str) -> ImageContent:
    return {"type": "image", "data": data, "mimeType": mime_type}


def text_result(text: str) -> ToolResult:
    return {"content": [text_content(text)]}


def json_result(payload: Any) -> ToolResult:
    """Wrap *payload* as a single pretty-printed JSON text item."""
    return text_result(json.dumps(payload, indent=2, ensure_ascii=False))
