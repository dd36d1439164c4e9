"""
Line-delimited JSON-RPC 2.0 over stdin/stdout.

stdout carries protocol messages only; all logging goes to stderr.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
import threading
from typing import Any, Optional, TextIO

from ads_bridge.adapters import MCPAdapter
from ads_bridge.config import __version__
from ads_bridge.dispatcher import Dispatcher

from .base import invoke

__all__ = [
    "StdioBinding",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "DEFAULT_PROTOCOL_VERSION",
]

JSONRPC_VERSION = "2.0"
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601

DEFAULT_PROTOCOL_VERSION = "2024-11-05"

_TOOL_METHODS = ("tools/list", "tools/call")


class StdioBinding:
    """
    Serve the generic tool protocol on a pair of text streams.

    Each incoming line is handled as its own task so a slow tool call does
    not hold up the ones behind it. Responses may therefore arrive out of
    order; clients match them by ``id``.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        *,
        adapter: Optional[MCPAdapter] = None,
        server_name: str = "facebook-ads-universal",
        server_version: str = __version__,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.adapter = adapter or MCPAdapter()
        self.server_name = server_name
        self.server_version = server_version
        self.logger = logger or logging.getLogger(__name__)
        self._write_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()

    async def serve(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> None:
        """Read requests until EOF, then wait for in-flight ones to finish."""
        stdin = stdin or sys.stdin
        stdout = stdout or sys.stdout
        lines = self._start_reader(stdin, asyncio.get_running_loop())
        self.logger.info("%s v%s running on stdio", self.server_name, self.server_version)

        while True:
            line = await lines.get()
            if not line:
                break
            task = asyncio.create_task(self._process(line, stdout))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        if self._tasks:
            await asyncio.gather(*self._tasks)
        self.logger.info("stdin closed; stdio server stopped")

    @staticmethod
    def _start_reader(stdin: TextIO, loop: asyncio.AbstractEventLoop) -> asyncio.Queue[str]:
        """
        Pump stdin lines into a queue from a daemon thread; ``""`` marks EOF.

        A blocked ``readline`` never holds up loop or interpreter shutdown,
        so cancelling ``serve`` is enough to stop reading.
        """
        lines: asyncio.Queue[str] = asyncio.Queue()

        def put(line: str) -> bool:
            try:
                loop.call_soon_threadsafe(lines.put_nowait, line)
            except RuntimeError:
                # event loop already closed
                return False
            return True

        def pump() -> None:
            try:
                for line in iter(stdin.readline, ""):
                    if not put(line):
                        return
            finally:
                put("")

        threading.Thread(target=pump, name="stdio-reader", daemon=True).start()
        return lines

    async def handle_line(self, line: str) -> Optional[dict[str, Any]]:
        line = line.strip()
        if not line:
            return None
        try:
            message = json.loads(line)
        except json.JSONDecodeError as exc:
            self.logger.warning("Unparseable message: %s", exc)
            return self._error(None, PARSE_ERROR, f"Parse error: {exc}")
        return await self.handle_message(message)

    async def handle_message(self, message: Any) -> Optional[dict[str, Any]]:
        """Answer one decoded JSON-RPC message; None means no reply is due."""
        if not isinstance(message, dict):
            return self._error(None, INVALID_REQUEST, "Invalid Request")

        method = message.get("method")
        if "id" not in message:
            self.logger.debug("Notification received: %s", method)
            return None

        msg_id = message["id"]
        if not isinstance(method, str):
            return self._error(msg_id, INVALID_REQUEST, "Invalid Request")

        if method == "initialize":
            return self._result(msg_id, self._initialize(message.get("params")))
        if method == "ping":
            return self._result(msg_id, {})
        if method in _TOOL_METHODS:
            payload, status = await invoke(self.adapter, self.dispatcher, message, logger=self.logger)
            if status != 200:
                return {"jsonrpc": JSONRPC_VERSION, "id": msg_id, "error": payload["error"]}
            return self._result(msg_id, payload)

        return self._error(msg_id, METHOD_NOT_FOUND, f"Method not found: {method}")

    def _initialize(self, params: Any) -> dict[str, Any]:
        requested = params.get("protocolVersion") if isinstance(params, dict) else None
        return {
            "protocolVersion": requested or DEFAULT_PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": self.server_name, "version": self.server_version},
        }

    async def _process(self, line: str, stdout: TextIO) -> None:
        response = await self.handle_line(line)
        if response is None:
            return
        data = json.dumps(response, ensure_ascii=False)
        async with self._write_lock:
            stdout.write(data + "\n")
            stdout.flush()

    @staticmethod
    def _result(msg_id: Any, result: Any) -> dict[str, Any]:
        return {"jsonrpc": JSONRPC_VERSION, "id": msg_id, "result": result}

    @staticmethod
    def _error(msg_id: Any, code: int, message: str) -> dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": msg_id,
            "error": {"code": code, "message": message},
        }
