"""Tests for the FastAPI bindings and the shared invoke path."""

import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from ads_bridge.protocols import ToolProtocol
from ads_bridge.server import create_app, invoke


@pytest.fixture
def client(dispatcher, adapters):
    return TestClient(create_app(dispatcher, adapters))


class TestDiscovery:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "protocols": ["mcp", "openai", "gemini"]}

    def test_tools(self, client, registry):
        tools = client.get("/tools").json()["tools"]
        assert [tool["name"] for tool in tools] == registry.names()
        assert tools[0] == {"name": "echo", "description": "Echo the arguments back"}

    @pytest.mark.parametrize("prefix", ["openai", "gemini"])
    def test_definitions_and_alias(self, client, prefix):
        full = client.get(f"/{prefix}/functions/definitions")
        alias = client.get(f"/{prefix}/defs")

        assert full.status_code == alias.status_code == 200
        assert full.json() == alias.json()
        assert len(full.json()["functions"]) == 4

    def test_openai_definitions_shape(self, client):
        first = client.get("/openai/defs").json()["functions"][0]
        assert first["function"]["parameters"]["required"] == ["message"]

    def test_gemini_definitions_shape(self, client):
        first = client.get("/gemini/defs").json()["functions"][0]
        assert first["parameters"]["properties"]["message"]["type"] == "STRING"


class TestOpenAIRoutes:
    def test_tool_call(self, client):
        response = client.post(
            "/openai/functions",
            json={
                "tool_calls": [
                    {"id": "call_1", "function": {"name": "echo", "arguments": '{"message": "hi"}'}}
                ]
            },
        )

        assert response.status_code == 200
        assert response.json() == {
            "role": "tool",
            "tool_call_id": "call_1",
            "content": '{"message": "hi"}',
        }

    def test_alias_route(self, client):
        response = client.post(
            "/openai/call", json={"function_call": {"name": "echo", "arguments": "{}"}}
        )
        assert response.json() == {"role": "function", "content": "{}"}

    def test_images_in_follow_up_message(self, client):
        response = client.post("/openai/call", json={"function_call": {"name": "picture"}})
        messages = response.json()

        assert messages[0]["content"] == "one picture"
        assert messages[1]["content"][1]["image_url"]["url"] == "data:image/png;base64,aGVsbG8="

    def test_unknown_tool(self, client):
        response = client.post("/openai/call", json={"function_call": {"name": "nope"}})

        assert response.status_code == 404
        assert response.json()["content"] == "Error: Unknown tool: nope"

    def test_validation_error(self, client):
        response = client.post("/openai/call", json={"function_call": {"name": "reject"}})

        assert response.status_code == 422
        assert "message: Field required" in response.json()["content"]

    def test_handler_crash(self, client):
        response = client.post("/openai/call", json={"function_call": {"name": "explode"}})

        assert response.status_code == 500
        assert response.json()["content"] == "Error: ValueError: boom"

    def test_malformed_envelope(self, client):
        response = client.post("/openai/call", json={"messages": []})
        assert response.status_code == 400

    def test_body_not_json(self, client):
        response = client.post(
            "/openai/call", content=b"{broken", headers={"content-type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["content"].startswith("Error: Request body is not valid JSON")


class TestGeminiRoutes:
    def test_function_call(self, client):
        response = client.post(
            "/gemini/functions", json={"function_call": {"name": "echo", "args": {"message": "hi"}}}
        )

        assert response.status_code == 200
        parts = response.json()["function_response"]["response"]["parts"]
        assert parts == [{"text": '{"message": "hi"}'}]

    def test_parts_and_images(self, client):
        response = client.post("/gemini/call", json={"parts": [{"functionCall": {"name": "picture"}}]})
        parts = response.json()["function_response"]["response"]["parts"]

        assert parts[0] == {"text": "one picture"}
        assert parts[1] == {"inline_data": {"mime_type": "image/png", "data": "aGVsbG8="}}

    def test_unknown_tool(self, client):
        response = client.post("/gemini/call", json={"function_call": {"name": "nope"}})

        assert response.status_code == 404
        assert response.json() == {
            "function_response": {
                "name": "error",
                "response": {"parts": [{"text": "Error: Unknown tool: nope"}]},
            }
        }


class TestDispatchParity:
    """The same call through every protocol reaches the same handler with the same arguments."""

    def test_same_result_text_everywhere(self, dispatcher, adapters):
        requests = {
            ToolProtocol.MCP: {
                "method": "tools/call",
                "params": {"name": "echo", "arguments": {"message": "same"}},
            },
            ToolProtocol.OPENAI: {
                "function_call": {"name": "echo", "arguments": json.dumps({"message": "same"})}
            },
            ToolProtocol.GEMINI: {"function_call": {"name": "echo", "args": {"message": "same"}}},
        }

        texts = {}
        for protocol, raw in requests.items():
            payload, status = asyncio.run(invoke(adapters[protocol], dispatcher, raw))
            assert status == 200
            if protocol is ToolProtocol.MCP:
                texts[protocol] = payload["content"][0]["text"]
            elif protocol is ToolProtocol.OPENAI:
                texts[protocol] = payload["content"]
            else:
                texts[protocol] = payload["function_response"]["response"]["parts"][0]["text"]

        assert set(texts.values()) == {'{"message": "same"}'}

    def test_invoke_never_raises(self, dispatcher, adapters):
        for adapter in adapters.values():
            payload, status = asyncio.run(invoke(adapter, dispatcher, "not an object"))
            assert status == 400
            assert payload
