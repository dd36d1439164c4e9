"""
Async client for the Facebook Graph API.

Every outbound call carries a bounded timeout (30 seconds by default). A
timeout surfaces as ``UpstreamTimeoutError``; Graph error bodies surface as
``UpstreamAPIError``. Nothing is retried here.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Self

import httpx

from ._exceptions import UpstreamAPIError, UpstreamTimeoutError
from .config import Settings
from .token_storage import TokenStore

__all__ = ["GraphAPIClient", "graph_params"]

_USER_AGENT = "Mozilla/5.0 (compatible; ads-bridge/2.0)"


def graph_params(params: Optional[dict[str, Any]]) -> dict[str, Any]:
    """
    Encode query parameters the way the Graph API expects them.

    ``None`` values are dropped, lists are comma-joined and objects (such as
    ``time_range``) are sent as JSON.
    """
    encoded: dict[str, Any] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            encoded[key] = ",".join(str(item) for item in value)
        elif isinstance(value, dict):
            encoded[key] = json.dumps(value, separators=(",", ":"))
        elif isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        else:
            encoded[key] = value
    return encoded


class GraphAPIClient:
    """
    Thin wrapper over ``httpx.AsyncClient`` bound to one Graph API version.

    Use ``GraphAPIClient.from_client`` when you already have an ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        access_token: Optional[str] = None,
        token_store: Optional[TokenStore] = None,
        timeout: float = 30.0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._access_token = access_token
        self._token_store = token_store
        self.logger = logger or logging.getLogger(__name__)

    # Alternate constructors
    @classmethod
    def from_client(
        cls,
        client: httpx.AsyncClient,
        *,
        access_token: Optional[str] = None,
        token_store: Optional[TokenStore] = None,
        logger: Optional[logging.Logger] = None,
    ) -> Self:
        """Build a ``GraphAPIClient`` around an already-configured ``httpx.AsyncClient``."""
        if not isinstance(client, httpx.AsyncClient):
            raise TypeError(
                f"GraphAPIClient.from_client expects httpx.AsyncClient; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        self._client = client
        self._access_token = access_token
        self._token_store = token_store
        self.logger = logger or logging.getLogger(__name__)
        return self

    @classmethod
    def from_settings(cls, settings: Settings, token_store: Optional[TokenStore] = None) -> Self:
        return cls(
            settings.graph_url,
            access_token=settings.facebook_access_token,
            token_store=token_store,
            timeout=settings.request_timeout,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------ API

    def access_token(self) -> str:
        """Stored login token first, then the configured token."""
        token = self._token_store.get_token() if self._token_store else None
        token = token or self._access_token
        if not token:
            raise UpstreamAPIError(
                "No Facebook access token available. Log in or set FACEBOOK_ACCESS_TOKEN.",
                status=401,
            )
        return token

    async def get(self, endpoint: str, params: Optional[dict[str, Any]] = None) -> Any:
        query = {"access_token": self.access_token(), **graph_params(params)}
        self.logger.info("Graph API GET %s", endpoint)
        return await self._send("GET", endpoint, params=query)

    async def get_url(self, url: str) -> Any:
        """GET an absolute URL, e.g. a ``paging.next`` link, which carries its own token."""
        self.logger.info("Graph API GET %s", url.split("?", 1)[0])
        return await self._send("GET", url)

    async def batch(self, requests: list[dict[str, Any]]) -> list[Optional[dict[str, Any]]]:
        """
        Run several relative requests in one Graph batch call.

        Returns one ``{"code": int, "body": str}`` entry per request (``None``
        for requests Facebook could not run).
        """
        data = {
            "access_token": self.access_token(),
            "batch": json.dumps(requests),
            "include_headers": "false",
        }
        self.logger.info("Graph API batch of %d requests", len(requests))
        payload = await self._send("POST", "/", data=data)
        if not isinstance(payload, list):
            raise UpstreamAPIError("Unexpected batch response from Facebook API")
        return payload

    async def download(
        self,
        url: str,
        *,
        max_bytes: int,
        timeout: float = 15.0,
    ) -> tuple[bytes, str]:
        """Fetch a binary resource, refusing anything larger than *max_bytes*."""
        try:
            async with self._client.stream(
                "GET", url, timeout=timeout, headers={"User-Agent": _USER_AGENT}
            ) as response:
                response.raise_for_status()
                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) > max_bytes:
                        raise UpstreamAPIError(f"Resource exceeds {max_bytes} bytes: {url}")
                content_type = response.headers.get("content-type", "")
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError(f"Download timed out: {url}", original_exc=exc) from exc
        except httpx.HTTPStatusError as exc:
            raise UpstreamAPIError(
                f"Download failed ({exc.response.status_code}): {url}",
                status=exc.response.status_code,
                original_exc=exc,
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamAPIError(
                f"Download failed: {exc}", transient=True, original_exc=exc
            ) from exc

        return bytes(body), content_type.split(";", 1)[0].strip()

    # ------------------------------------------------------------------ internals

    async def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError(
                "Request timeout - Facebook API took too long to respond",
                original_exc=exc,
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamAPIError(
                f"API Request failed: {exc}", transient=True, original_exc=exc
            ) from exc

        return self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict):
            raise UpstreamAPIError(
                f"Facebook API Error: {error.get('message', 'unknown error')} (Code: {error.get('code')})",
                status=response.status_code,
                api_code=error.get("code"),
                transient=bool(error.get("is_transient")) or response.status_code >= 500,
            )

        if response.is_error:
            raise UpstreamAPIError(
                f"API Request failed with status {response.status_code}",
                status=response.status_code,
                transient=response.status_code >= 500,
            )

        if payload is None:
            raise UpstreamAPIError(
                "Facebook API returned a non-JSON response", status=response.status_code
            )
        return payload
