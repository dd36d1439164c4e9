"""
Tool registry: name -> (async handler, input schema, description).

Pure data plus function references. The registry, the shared schema table
and the shared description table must name exactly the same tools; a
mismatch is a configuration defect and is reported at start-up by
``verify_tool_tables``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterator, Mapping, Optional

from ._exceptions import ConfigurationError
from .types import ParametersSchema, ToolDefinition, ToolOutput

__all__ = ["ToolHandler", "ToolEntry", "ToolRegistry", "verify_tool_tables"]

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any]], Awaitable[ToolOutput]]


@dataclass(frozen=True, slots=True)
class ToolEntry:
    name: str
    handler: ToolHandler
    schema: ParametersSchema
    description: str

    def definition(self) -> ToolDefinition:
        return ToolDefinition(self.name, self.description, self.schema)


class ToolRegistry:
    """Insertion-ordered mapping of tool name to ``ToolEntry``."""

    def __init__(self) -> None:
        self._entries: dict[str, ToolEntry] = {}

    def register(
        self,
        name: str,
        handler: ToolHandler,
        schema: ParametersSchema,
        description: str,
    ) -> ToolEntry:
        """Register a tool handler."""
        if not name:
            raise ConfigurationError("Tool name must not be empty")
        if name in self._entries:
            raise ConfigurationError(f"Tool already registered: {name}")
        entry = ToolEntry(name, handler, schema, description)
        self._entries[name] = entry
        logger.debug("Registered tool: %s", name)
        return entry

    def get(self, name: str) -> Optional[ToolEntry]:
        return self._entries.get(name)

    def names(self) -> list[str]:
        return list(self._entries)

    def schemas(self) -> dict[str, ParametersSchema]:
        """Name -> parameters schema, in registration order."""
        return {name: entry.schema for name, entry in self._entries.items()}

    def describe(self, name: str) -> Optional[str]:
        entry = self._entries.get(name)
        return entry.description if entry else None

    def descriptions(self) -> dict[str, str]:
        return {name: entry.description for name, entry in self._entries.items()}

    def definitions(self) -> list[ToolDefinition]:
        return [entry.definition() for entry in self._entries.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[ToolEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


def verify_tool_tables(
    registry: ToolRegistry,
    schemas: Mapping[str, ParametersSchema],
    descriptions: Mapping[str, str],
) -> None:
    """Raise ConfigurationError unless all three tables name the same tools."""
    tables = {
        "registry": set(registry.names()),
        "schemas": set(schemas),
        "descriptions": set(descriptions),
    }
    every = set().union(*tables.values())
    problems = [
        f"{table} is missing {', '.join(sorted(every - names))}"
        for table, names in tables.items()
        if every - names
    ]
    if problems:
        raise ConfigurationError("Tool tables disagree: " + "; ".join(problems))
