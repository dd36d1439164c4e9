from __future__ import annotations

from enum import StrEnum


class ToolProtocol(StrEnum):
    MCP = "mcp"
    OPENAI = "openai"
    GEMINI = "gemini"


__all__ = ["ToolProtocol"]
