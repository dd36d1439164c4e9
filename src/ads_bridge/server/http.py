"""FastAPI application serving the vendor function-calling protocols."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ads_bridge._exceptions import MalformedRequestError
from ads_bridge.adapters import BaseAdapter
from ads_bridge.config import SUPPORTED_PROTOCOLS, __version__
from ads_bridge.dispatcher import Dispatcher
from ads_bridge.factory import create_adapters
from ads_bridge.protocols import ToolProtocol

from .base import invoke

__all__ = ["create_app", "HTTP_PROTOCOLS"]

logger = logging.getLogger(__name__)

HTTP_PROTOCOLS: tuple[ToolProtocol, ...] = (ToolProtocol.OPENAI, ToolProtocol.GEMINI)


def create_app(
    dispatcher: Dispatcher,
    adapters: Optional[Mapping[ToolProtocol, BaseAdapter]] = None,
    *,
    lifespan: Any = None,
) -> FastAPI:
    """
    Build the HTTP app.

    Per protocol ``<p>`` in ``HTTP_PROTOCOLS``:

    - ``GET /<p>/functions/definitions`` (alias ``/<p>/defs``) lists tools;
    - ``POST /<p>/functions`` (alias ``/<p>/call``) runs one call.
    """
    adapters = adapters or create_adapters()
    registry = dispatcher.registry
    app = FastAPI(title="ads-bridge", version=__version__, lifespan=lifespan)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"status": "ok", "protocols": [protocol.value for protocol in SUPPORTED_PROTOCOLS]}

    @app.get("/tools")
    async def tools() -> dict[str, Any]:
        return {
            "tools": [
                {"name": entry.name, "description": entry.description} for entry in registry
            ]
        }

    for protocol in HTTP_PROTOCOLS:
        _add_protocol_routes(app, protocol.value, adapters[protocol], dispatcher)

    return app


def _add_protocol_routes(
    app: FastAPI,
    prefix: str,
    adapter: BaseAdapter,
    dispatcher: Dispatcher,
) -> None:
    async def definitions() -> dict[str, Any]:
        return {"functions": adapter.get_tool_definitions(dispatcher.registry.schemas())}

    async def call(request: Request) -> JSONResponse:
        try:
            raw = await request.json()
        except ValueError as exc:
            error = MalformedRequestError(f"Request body is not valid JSON: {exc}", original_exc=exc)
            logger.warning("%s request rejected: %s", prefix, error.message)
            return JSONResponse(adapter.format_error(error), status_code=error.status_code)

        payload, status = await invoke(adapter, dispatcher, raw, logger=logger)
        return JSONResponse(payload, status_code=status)

    app.add_api_route(f"/{prefix}/functions/definitions", definitions, methods=["GET"])
    app.add_api_route(f"/{prefix}/defs", definitions, methods=["GET"], include_in_schema=False)
    app.add_api_route(f"/{prefix}/functions", call, methods=["POST"])
    app.add_api_route(f"/{prefix}/call", call, methods=["POST"], include_in_schema=False)
