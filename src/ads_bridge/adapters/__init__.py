"""Pure transformation adapters for the supported tool-calling protocols."""

from .base import BaseAdapter
from .gemini import GeminiAdapter
from .mcp import LIST_TOOLS, MCPAdapter
from .openai import OpenAIAdapter

__all__ = [
    "BaseAdapter",
    "MCPAdapter",
    "OpenAIAdapter",
    "GeminiAdapter",
    "LIST_TOOLS",
]
