"""
Environment-driven settings.

Every value can be set in the process environment or in a ``.env`` file in
the working directory. Unset values fall back to the defaults below.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Optional

from dotenv import load_dotenv

from ._exceptions import ConfigurationError
from .protocols import ToolProtocol

load_dotenv()

__version__: Final = "2.0.0"

DEFAULT_TOKEN_FILE: Final = Path.home() / ".ads_bridge" / "token.json"

_SERVER_MODES: Final = ("mcp", "api", "both")


@dataclass(frozen=True)
class Settings:
    facebook_base_url: str = "https://graph.facebook.com"
    facebook_api_version: str = "v18.0"
    facebook_access_token: Optional[str] = None
    facebook_ad_account_id: Optional[str] = None
    token_file: Path = DEFAULT_TOKEN_FILE
    request_timeout: float = 30.0
    server_mode: str = "mcp"
    host: str = "127.0.0.1"
    port: int = 3003
    server_name: str = "facebook-ads-universal"
    server_version: str = __version__

    @property
    def graph_url(self) -> str:
        return f"{self.facebook_base_url.rstrip('/')}/{self.facebook_api_version}"

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "Settings":
        """Build settings from *environ* (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ
        defaults = cls()

        mode = env.get("SERVER_MODE", defaults.server_mode).lower()
        if mode not in _SERVER_MODES:
            raise ConfigurationError(
                f"SERVER_MODE must be one of {', '.join(_SERVER_MODES)}; got {mode!r}"
            )

        try:
            port = int(env.get("PORT", defaults.port))
            timeout = float(env.get("REQUEST_TIMEOUT", defaults.request_timeout))
        except ValueError as exc:
            raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc

        token_file = env.get("ADS_BRIDGE_TOKEN_FILE")

        return cls(
            facebook_base_url=env.get("FACEBOOK_BASE_URL", defaults.facebook_base_url),
            facebook_api_version=env.get(
                "FACEBOOK_API_VERSION", defaults.facebook_api_version
            ),
            facebook_access_token=env.get("FACEBOOK_ACCESS_TOKEN") or None,
            facebook_ad_account_id=env.get("FACEBOOK_AD_ACCOUNT_ID") or None,
            token_file=Path(token_file).expanduser() if token_file else defaults.token_file,
            request_timeout=timeout,
            server_mode=mode,
            host=env.get("HOST", defaults.host),
            port=port,
            server_name=env.get("MCP_SERVER_NAME", defaults.server_name),
            server_version=env.get("MCP_SERVER_VERSION", defaults.server_version),
        )


SUPPORTED_PROTOCOLS: Final[tuple[ToolProtocol, ...]] = tuple(ToolProtocol)

__all__ = ["Settings", "SUPPORTED_PROTOCOLS", "DEFAULT_TOKEN_FILE", "__version__"]
