"""Tests for settings and the command line parser."""

import asyncio
from pathlib import Path

import pytest

from ads_bridge._exceptions import ConfigurationError
from ads_bridge.cli import build_parser, serve_until_first_exits
from ads_bridge.config import DEFAULT_TOKEN_FILE, Settings


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings.graph_url == "https://graph.facebook.com/v18.0"
        assert settings.request_timeout == 30.0
        assert settings.server_mode == "mcp"
        assert settings.port == 3003
        assert settings.facebook_access_token is None
        assert settings.token_file == DEFAULT_TOKEN_FILE

    def test_environment_overrides(self, tmp_path):
        settings = Settings.from_env(
            {
                "FACEBOOK_BASE_URL": "https://graph.test/",
                "FACEBOOK_API_VERSION": "v20.0",
                "FACEBOOK_ACCESS_TOKEN": "tok",
                "ADS_BRIDGE_TOKEN_FILE": str(tmp_path / "t.json"),
                "REQUEST_TIMEOUT": "5",
                "SERVER_MODE": "BOTH",
                "PORT": "8080",
            }
        )

        assert settings.graph_url == "https://graph.test/v20.0"
        assert settings.facebook_access_token == "tok"
        assert settings.token_file == Path(tmp_path / "t.json")
        assert settings.request_timeout == 5.0
        assert settings.server_mode == "both"
        assert settings.port == 8080

    def test_bad_mode(self):
        with pytest.raises(ConfigurationError, match="SERVER_MODE"):
            Settings.from_env({"SERVER_MODE": "grpc"})

    def test_bad_number(self):
        with pytest.raises(ConfigurationError):
            Settings.from_env({"PORT": "eighty"})


class TestParser:
    def test_overrides(self):
        args = build_parser().parse_args(["--mode", "api", "--port", "9000", "-v"])

        assert args.mode == "api"
        assert args.port == 9000
        assert args.verbose is True
        assert args.host is None

    def test_rejects_unknown_mode(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--mode", "grpc"])


class TestServeUntilFirstExits:
    def test_stopping_one_server_cancels_the_rest(self):
        cancelled = []

        async def forever():
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append(True)
                raise

        async def short():
            await asyncio.sleep(0)

        asyncio.run(asyncio.wait_for(serve_until_first_exits(forever(), short()), timeout=5))
        assert cancelled == [True]

    def test_server_failure_propagates(self):
        async def forever():
            await asyncio.Event().wait()

        async def broken():
            raise OSError("address in use")

        with pytest.raises(OSError, match="address in use"):
            asyncio.run(serve_until_first_exits(forever(), broken()))
