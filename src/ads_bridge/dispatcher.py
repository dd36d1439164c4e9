from __future__ import annotations

import logging
from typing import Optional

from ._exceptions import UnknownToolError
from .registry import ToolRegistry
from .types import NormalizedCall, ToolOutput

__all__ = ["Dispatcher"]


class Dispatcher:
    """
    Look up and invoke the handler for a ``NormalizedCall``.

    Every protocol reaches tools through this one method, so it carries no
    protocol-specific logic at all. Handler exceptions propagate unchanged;
    the calling binding hands them to its adapter's ``format_error``.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.registry = registry
        self.logger = logger or logging.getLogger(__name__)

    async def dispatch(self, call: NormalizedCall) -> ToolOutput:
        entry = self.registry.get(call.tool_name)
        if entry is None:
            raise UnknownToolError(call.tool_name)

        self.logger.info("Calling tool %s", call.tool_name)
        self.logger.debug("Arguments for %s: %r", call.tool_name, call.args)
        return await entry.handler(dict(call.args))
