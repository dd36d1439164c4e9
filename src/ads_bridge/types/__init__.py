from .call import NormalizedCall
from .result import (
    ContentItem,
    ImageContent,
    TextContent,
    ToolOutput,
    ToolResult,
    image_content,
    json_result,
    text_content,
    text_result,
)
from .tool import ParametersSchema, ToolDefinition

__all__ = [
    "NormalizedCall",
    "ContentItem",
    "ImageContent",
    "TextContent",
    "ToolOutput",
    "ToolResult",
    "image_content",
    "json_result",
    "text_content",
    "text_result",
    "ParametersSchema",
    "ToolDefinition",
]
