from __future__ import annotations

from typing import Mapping, Optional, Type

from .adapters import BaseAdapter, GeminiAdapter, MCPAdapter, OpenAIAdapter
from .protocols import ToolProtocol

# map ToolProtocol enum to its adapter implementation
_ADAPTER_REGISTRY: dict[ToolProtocol, Type[BaseAdapter]] = {
    ToolProtocol.MCP: MCPAdapter,
    ToolProtocol.OPENAI: OpenAIAdapter,
    ToolProtocol.GEMINI: GeminiAdapter,
}


def create_adapter(
    protocol: ToolProtocol | str,
    *,
    descriptions: Optional[Mapping[str, str]] = None,
) -> BaseAdapter:
    """
    Factory for any supported protocol adapter.

    Args:
        protocol: Which protocol to adapt (MCP, OPENAI, GEMINI), or its value.
        descriptions: Tool name -> description lookup shared by every adapter.
            Defaults to ``schemas.TOOL_DESCRIPTIONS``.
    """
    try:
        adapter_cls = _ADAPTER_REGISTRY[ToolProtocol(protocol)]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Unsupported protocol: {protocol}") from exc

    return adapter_cls(descriptions)


def create_adapters(
    descriptions: Optional[Mapping[str, str]] = None,
) -> dict[ToolProtocol, BaseAdapter]:
    """One adapter per supported protocol, all reading the same description table."""
    return {
        protocol: create_adapter(protocol, descriptions=descriptions)
        for protocol in _ADAPTER_REGISTRY
    }
