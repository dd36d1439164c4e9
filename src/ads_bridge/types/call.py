"""
Protocol-neutral dataclasses for tool invocation.

Everything protocol-specific lives in the adapters.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

__all__ = ["NormalizedCall"]


@dataclass(frozen=True, slots=True)
class NormalizedCall:
    """An adapter-independent request to run one registered tool."""
    tool_name: str
    args: dict[str, Any] = field(default_factory=dict)
    call_id: Optional[str] = None   # only set by protocols that correlate results
