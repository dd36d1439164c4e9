"""Tests for the stdio JSON-RPC binding."""

import asyncio
import io
import json
import os

import pytest

from ads_bridge.adapters import MCPAdapter
from ads_bridge.server.stdio import (
    DEFAULT_PROTOCOL_VERSION,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    StdioBinding,
)


@pytest.fixture
def binding(dispatcher, registry):
    return StdioBinding(
        dispatcher,
        adapter=MCPAdapter(registry.descriptions()),
        server_name="test-server",
        server_version="9.9.9",
    )


def handle(binding, message):
    return asyncio.run(binding.handle_message(message))


class TestStdioBinding:
    def test_initialize(self, binding):
        response = handle(
            binding,
            {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {"protocolVersion": "2025-03-26"}},
        )

        assert response["id"] == 1
        result = response["result"]
        assert result["protocolVersion"] == "2025-03-26"
        assert result["serverInfo"] == {"name": "test-server", "version": "9.9.9"}
        assert "tools" in result["capabilities"]

    def test_initialize_default_version(self, binding):
        response = handle(binding, {"jsonrpc": "2.0", "id": 1, "method": "initialize"})
        assert response["result"]["protocolVersion"] == DEFAULT_PROTOCOL_VERSION

    def test_ping(self, binding):
        assert handle(binding, {"jsonrpc": "2.0", "id": "p", "method": "ping"}) == {
            "jsonrpc": "2.0",
            "id": "p",
            "result": {},
        }

    def test_tools_list(self, binding, registry):
        response = handle(binding, {"jsonrpc": "2.0", "id": 2, "method": "tools/list"})
        tools = response["result"]["tools"]

        assert [tool["name"] for tool in tools] == registry.names()
        assert tools[0]["inputSchema"]["required"] == ["message"]
        assert tools[0]["description"] == "Echo the arguments back"

    def test_tools_call(self, binding):
        response = handle(
            binding,
            {
                "jsonrpc": "2.0",
                "id": 3,
                "method": "tools/call",
                "params": {"name": "echo", "arguments": {"message": "hi"}},
            },
        )
        assert response["result"] == {"content": [{"type": "text", "text": '{"message": "hi"}'}]}

    def test_unknown_tool(self, binding):
        response = handle(
            binding,
            {"jsonrpc": "2.0", "id": 4, "method": "tools/call", "params": {"name": "nope"}},
        )
        assert response["error"] == {"code": -32602, "message": "Unknown tool: nope"}
        assert "result" not in response

    def test_handler_failure_is_internal_error(self, binding):
        response = handle(
            binding,
            {"jsonrpc": "2.0", "id": 5, "method": "tools/call", "params": {"name": "explode"}},
        )
        assert response["error"]["code"] == -32603
        assert response["error"]["message"] == "ValueError: boom"

    def test_unknown_method(self, binding):
        response = handle(binding, {"jsonrpc": "2.0", "id": 6, "method": "resources/list"})
        assert response["error"]["code"] == METHOD_NOT_FOUND

    def test_notifications_get_no_reply(self, binding):
        assert handle(binding, {"jsonrpc": "2.0", "method": "notifications/initialized"}) is None

    def test_parse_error(self, binding):
        response = asyncio.run(binding.handle_line("{not json"))
        assert response["id"] is None
        assert response["error"]["code"] == PARSE_ERROR

    def test_blank_line(self, binding):
        assert asyncio.run(binding.handle_line("   \n")) is None


class TestServe:
    def test_answers_every_request_until_eof(self, binding):
        requests = [
            {"jsonrpc": "2.0", "id": 1, "method": "ping"},
            {"jsonrpc": "2.0", "method": "notifications/initialized"},
            {"jsonrpc": "2.0", "id": 2, "method": "tools/call", "params": {"name": "picture"}},
            {"jsonrpc": "2.0", "id": 3, "method": "tools/list"},
        ]
        stdin = io.StringIO("".join(json.dumps(r) + "\n" for r in requests) + "garbage\n")
        stdout = io.StringIO()

        asyncio.run(binding.serve(stdin, stdout))

        responses = [json.loads(line) for line in stdout.getvalue().splitlines()]
        by_id = {response["id"]: response for response in responses}

        assert len(responses) == 4
        assert by_id[1]["result"] == {}
        assert by_id[2]["result"]["content"][1]["type"] == "image"
        assert len(by_id[3]["result"]["tools"]) == 4
        assert by_id[None]["error"]["code"] == PARSE_ERROR

    def test_cancel_while_stdin_is_silent(self, binding):
        read_fd, write_fd = os.pipe()
        stdin = os.fdopen(read_fd, "r")

        async def serve_then_cancel():
            task = asyncio.create_task(binding.serve(stdin, io.StringIO()))
            await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        try:
            asyncio.run(asyncio.wait_for(serve_then_cancel(), timeout=5))
        finally:
            os.close(write_fd)
