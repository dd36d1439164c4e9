"""
ads-bridge - Facebook Ads tools for MCP, OpenAI and Gemini tool calling.
"""

import logging

from ._exceptions import (
    AdsBridgeError,
    ConfigurationError,
    InternalError,
    MalformedRequestError,
    UnknownToolError,
    UpstreamAPIError,
    UpstreamTimeoutError,
    ValidationError,
    classify_error,
)
from .adapters import BaseAdapter, GeminiAdapter, MCPAdapter, OpenAIAdapter
from .config import Settings, __version__
from .dispatcher import Dispatcher
from .factory import create_adapter, create_adapters
from .protocols import ToolProtocol
from .registry import ToolRegistry
from .schemas import TOOL_DESCRIPTIONS, TOOL_SCHEMAS
from .types import NormalizedCall, ToolDefinition, ToolResult

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AdsBridgeError",
    "ConfigurationError",
    "InternalError",
    "MalformedRequestError",
    "UnknownToolError",
    "UpstreamAPIError",
    "UpstreamTimeoutError",
    "ValidationError",
    "classify_error",
    "BaseAdapter",
    "GeminiAdapter",
    "MCPAdapter",
    "OpenAIAdapter",
    "Settings",
    "Dispatcher",
    "create_adapter",
    "create_adapters",
    "ToolProtocol",
    "ToolRegistry",
    "TOOL_DESCRIPTIONS",
    "TOOL_SCHEMAS",
    "NormalizedCall",
    "ToolDefinition",
    "ToolResult",
    "__version__",
]
