"""
``ads-bridge`` command line entry point.

Modes:
    mcp   stdio JSON-RPC only (default)
    api   HTTP only
    both  HTTP and stdio in one event loop
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from typing import Awaitable, Optional, Sequence

import uvicorn

from ._exceptions import ConfigurationError
from .config import Settings, __version__
from .dispatcher import Dispatcher
from .factory import create_adapters
from .graph_api import GraphAPIClient
from .protocols import ToolProtocol
from .server import StdioBinding, create_app
from .token_storage import TokenStore
from .tools import build_registry

__all__ = ["main", "run", "build_parser", "serve_until_first_exits"]

logger = logging.getLogger("ads_bridge")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ads-bridge",
        description="Serve Facebook Ads tools over MCP, OpenAI and Gemini tool calling.",
    )
    parser.add_argument("--mode", choices=("mcp", "api", "both"), help="Which transports to run")
    parser.add_argument("--host", help="HTTP bind address")
    parser.add_argument("--port", type=int, help="HTTP port")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


async def serve_until_first_exits(*servers: Awaitable[None]) -> None:
    """Run servers side by side; once one stops, cancel the others."""
    tasks = [asyncio.ensure_future(server) for server in servers]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in tasks:
            task.cancel()
    if pending:
        await asyncio.wait(pending)
    for task in done:
        task.result()


async def run(settings: Settings) -> None:
    token_store = TokenStore(settings.token_file)

    async with GraphAPIClient.from_settings(settings, token_store) as graph:
        registry = build_registry(
            graph,
            token_store,
            access_token=settings.facebook_access_token,
            ad_account_id=settings.facebook_ad_account_id,
        )
        dispatcher = Dispatcher(registry)
        adapters = create_adapters()
        logger.info("Registered %d tools", len(registry))

        servers = []
        if settings.server_mode in ("mcp", "both"):
            stdio = StdioBinding(
                dispatcher,
                adapter=adapters[ToolProtocol.MCP],
                server_name=settings.server_name,
                server_version=settings.server_version,
            )
            servers.append(stdio.serve())

        if settings.server_mode in ("api", "both"):
            app = create_app(dispatcher, adapters)
            # log_config=None: uvicorn logs through the root logger, i.e. stderr
            config = uvicorn.Config(app, host=settings.host, port=settings.port, log_config=None)
            logger.info("HTTP API listening on http://%s:%d", settings.host, settings.port)
            servers.append(uvicorn.Server(config).serve())

        await serve_until_first_exits(*servers)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    try:
        settings = Settings.from_env()
    except ConfigurationError as exc:
        logger.error("%s", exc.message)
        return 2

    overrides = {
        key: value
        for key, value in (("server_mode", args.mode), ("host", args.host), ("port", args.port))
        if value is not None
    }
    settings = dataclasses.replace(settings, **overrides)

    logger.info("Starting ads-bridge %s in %s mode", __version__, settings.server_mode)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except ConfigurationError as exc:
        logger.error("%s", exc.message)
        return 2
    return 0
