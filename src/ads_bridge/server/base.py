from __future__ import annotations

import logging
from typing import Any, Optional

from ads_bridge._exceptions import classify_error
from ads_bridge.adapters import LIST_TOOLS, BaseAdapter, MCPAdapter
from ads_bridge.dispatcher import Dispatcher

__all__ = ["invoke"]

_logger = logging.getLogger(__name__)


async def invoke(
    adapter: BaseAdapter,
    dispatcher: Dispatcher,
    raw: Any,
    *,
    logger: Optional[logging.Logger] = None,
) -> tuple[Any, int]:
    """
    Run one protocol request end to end: parse, dispatch, format.

    Never raises. Any failure is classified and rendered with
    ``adapter.format_error``; the second element is the HTTP status to use
    (200 on success, the error's ``status_code`` otherwise).
    """
    log = logger or _logger
    call_id: Optional[str] = None
    try:
        call = adapter.parse_request(raw)
        call_id = call.call_id

        if call.tool_name == LIST_TOOLS and isinstance(adapter, MCPAdapter):
            schemas = dispatcher.registry.schemas()
            return {"tools": adapter.get_tool_definitions(schemas)}, 200

        result = await dispatcher.dispatch(call)
        return adapter.format_response(result, call_id), 200
    except Exception as exc:
        error = classify_error(exc, log)
        log.warning("%s request failed: %s", adapter.name, error.message)
        return adapter.format_error(error, call_id), error.status_code
