"""Tests for the Graph API client, driven through httpx.MockTransport."""

import asyncio
import json
from urllib.parse import parse_qs

import httpx
import pytest

from ads_bridge._exceptions import UpstreamAPIError, UpstreamTimeoutError
from ads_bridge.graph_api import graph_params
from ads_bridge.token_storage import TokenStore


def run(graph, coro_factory):
    async def main():
        async with graph:
            return await coro_factory(graph)

    return asyncio.run(main())


class TestGraphParams:
    def test_encoding(self):
        assert graph_params(
            {
                "fields": ["spend", "clicks"],
                "time_range": {"since": "2024-01-01", "until": "2024-01-31"},
                "limit": 10,
                "after": None,
                "include": True,
            }
        ) == {
            "fields": "spend,clicks",
            "time_range": '{"since":"2024-01-01","until":"2024-01-31"}',
            "limit": 10,
            "include": "true",
        }

    def test_none(self):
        assert graph_params(None) == {}


class TestGet:
    def test_sends_token_and_encoded_params(self, make_graph):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": []})

        result = run(
            make_graph(handler),
            lambda g: g.get("/act_1/insights", {"fields": ["spend", "actions"], "sort": None}),
        )

        assert result == {"data": []}
        request = seen[0]
        assert request.url.path == "/v18.0/act_1/insights"
        assert request.url.params["access_token"] == "test-token"
        assert request.url.params["fields"] == "spend,actions"
        assert "sort" not in request.url.params

    def test_stored_token_wins(self, tmp_path, make_graph):
        store = TokenStore(tmp_path / "token.json")
        store.store_token("stored-token")
        seen = []

        def handler(request):
            seen.append(request.url.params["access_token"])
            return httpx.Response(200, json={"id": "1"})

        run(make_graph(handler, token_store=store), lambda g: g.get("/me"))
        assert seen == ["stored-token"]

    def test_missing_token(self, make_graph):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(UpstreamAPIError) as exc_info:
            run(make_graph(handler, access_token=None), lambda g: g.get("/me"))
        assert exc_info.value.status == 401

    def test_graph_error_body(self, make_graph):
        def handler(request):
            return httpx.Response(
                400,
                json={"error": {"message": "Invalid OAuth access token.", "code": 190}},
            )

        with pytest.raises(UpstreamAPIError) as exc_info:
            run(make_graph(handler), lambda g: g.get("/me"))

        error = exc_info.value
        assert error.message == "Facebook API Error: Invalid OAuth access token. (Code: 190)"
        assert error.status == 400
        assert error.api_code == 190
        assert error.transient is False

    def test_transient_flag(self, make_graph):
        def handler(request):
            return httpx.Response(
                400, json={"error": {"message": "Try later", "code": 2, "is_transient": True}}
            )

        with pytest.raises(UpstreamAPIError) as exc_info:
            run(make_graph(handler), lambda g: g.get("/me"))
        assert exc_info.value.transient is True

    def test_non_json_server_error(self, make_graph):
        def handler(request):
            return httpx.Response(502, text="<html>bad gateway</html>")

        with pytest.raises(UpstreamAPIError) as exc_info:
            run(make_graph(handler), lambda g: g.get("/me"))
        assert exc_info.value.status == 502
        assert exc_info.value.transient is True

    def test_timeout(self, make_graph):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamTimeoutError, match="took too long"):
            run(make_graph(handler), lambda g: g.get("/me"))

    def test_connection_failure(self, make_graph):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamAPIError) as exc_info:
            run(make_graph(handler), lambda g: g.get("/me"))
        assert exc_info.value.transient is True


class TestPaginationAndBatch:
    def test_get_url_uses_absolute_url(self, make_graph):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, json={"data": [1]})

        url = "https://graph.other/v18.0/act_1/insights?after=abc&access_token=x"
        assert run(make_graph(handler), lambda g: g.get_url(url)) == {"data": [1]}
        assert seen == [url]

    def test_batch_posts_requests(self, make_graph):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[{"code": 200, "body": '{"id": "1"}'}])

        requests = [{"method": "GET", "relative_url": "1?fields=id"}]
        result = run(make_graph(handler), lambda g: g.batch(requests))

        assert result == [{"code": 200, "body": '{"id": "1"}'}]
        request = seen[0]
        assert request.method == "POST"
        form = parse_qs(request.content.decode())
        assert json.loads(form["batch"][0]) == requests
        assert form["access_token"] == ["test-token"]

    def test_batch_rejects_non_list(self, make_graph):
        def handler(request):
            return httpx.Response(200, json={"unexpected": True})

        with pytest.raises(UpstreamAPIError):
            run(make_graph(handler), lambda g: g.batch([]))


class TestDownload:
    def test_returns_bytes_and_mime_type(self, make_graph):
        def handler(request):
            return httpx.Response(
                200, content=b"\x89PNG", headers={"content-type": "image/png; charset=binary"}
            )

        data, mime = run(
            make_graph(handler),
            lambda g: g.download("https://cdn.test/a.png", max_bytes=1024),
        )
        assert data == b"\x89PNG"
        assert mime == "image/png"

    def test_too_large(self, make_graph):
        def handler(request):
            return httpx.Response(200, content=b"x" * 2048)

        with pytest.raises(UpstreamAPIError, match="exceeds"):
            run(make_graph(handler), lambda g: g.download("https://cdn.test/a.jpg", max_bytes=1024))

    def test_http_error(self, make_graph):
        def handler(request):
            return httpx.Response(404)

        with pytest.raises(UpstreamAPIError) as exc_info:
            run(make_graph(handler), lambda g: g.download("https://cdn.test/a.jpg", max_bytes=10))
        assert exc_info.value.status == 404


class TestConstruction:
    def test_from_client_requires_async_client(self):
        from ads_bridge.graph_api import GraphAPIClient

        with pytest.raises(TypeError):
            GraphAPIClient.from_client(httpx.Client())
