"""Shared fixtures: a small registry of fake tools and a Graph client on a mock transport."""

import json

import httpx
import pytest

from ads_bridge._exceptions import ValidationError
from ads_bridge.dispatcher import Dispatcher
from ads_bridge.factory import create_adapters
from ads_bridge.graph_api import GraphAPIClient
from ads_bridge.registry import ToolRegistry
from ads_bridge.types import image_content, text_content, text_result

ECHO_SCHEMA = {
    "type": "object",
    "properties": {"message": {"type": "string", "description": "Text to echo"}},
    "required": ["message"],
}
EMPTY_SCHEMA = {"type": "object", "properties": {}, "required": []}

GRAPH_BASE = "https://graph.test/v18.0"


async def echo(args):
    return text_result(json.dumps(args, sort_keys=True))


async def explode(args):
    raise ValueError("boom")


async def reject(args):
    raise ValidationError(["message: Field required"])


async def picture(args):
    return {"content": [text_content("one picture"), image_content("aGVsbG8=", "image/png")]}


@pytest.fixture
def registry():
    registry = ToolRegistry()
    registry.register("echo", echo, ECHO_SCHEMA, "Echo the arguments back")
    registry.register("explode", explode, EMPTY_SCHEMA, "Always fails")
    registry.register("reject", reject, EMPTY_SCHEMA, "Always rejects its arguments")
    registry.register("picture", picture, EMPTY_SCHEMA, "Returns an image")
    return registry


@pytest.fixture
def dispatcher(registry):
    return Dispatcher(registry)


@pytest.fixture
def adapters(registry):
    return create_adapters(descriptions=registry.descriptions())


@pytest.fixture
def make_graph():
    """Factory for a GraphAPIClient whose requests are answered by *handler*."""

    def factory(handler, *, access_token="test-token", token_store=None):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=GRAPH_BASE)
        return GraphAPIClient.from_client(
            client, access_token=access_token, token_store=token_store
        )

    return factory
