"""
Translate noisy handler and HTTP tracebacks into a small ``AdsBridgeError``
taxonomy, while preserving the original exception for full tracebacks.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

__all__: tuple[str, ...] = (
    "AdsBridgeError",
    "MalformedRequestError",
    "ValidationError",
    "UnknownToolError",
    "UpstreamAPIError",
    "UpstreamTimeoutError",
    "InternalError",
    "ConfigurationError",
    "classify_error",
)


class AdsBridgeError(RuntimeError):
    """Public bridge-level exception.

    Attributes:
        message: Human-readable description, always present.
        code: JSON-RPC error code used by the generic tool protocol.
        status_code: HTTP status used by the HTTP bindings.
        original_exc: The underlying exception, if any.
    """

    code: int = -32603
    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[int] = None,
        original_exc: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.original_exc = original_exc
        if original_exc is not None:
            self.__cause__ = original_exc


class MalformedRequestError(AdsBridgeError):
    """The protocol envelope could not be located in the request."""

    code = -32600
    status_code = 400


class ValidationError(AdsBridgeError):
    """Tool arguments failed schema checks."""

    code = -32602
    status_code = 422

    def __init__(self, errors: list[str], **kwargs) -> None:
        self.errors = list(errors)
        super().__init__(f"Validation error: {', '.join(self.errors)}", **kwargs)


class UnknownToolError(AdsBridgeError):
    """No handler is registered under the requested tool name."""

    code = -32602
    status_code = 404

    def __init__(self, tool_name: str, **kwargs) -> None:
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}", **kwargs)


class UpstreamAPIError(AdsBridgeError):
    """The advertising platform answered with an error."""

    code = -32000
    status_code = 502

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        api_code: Optional[int] = None,
        transient: bool = False,
        **kwargs,
    ) -> None:
        super().__init__(message, **kwargs)
        self.status = status
        self.api_code = api_code
        self.transient = transient


class UpstreamTimeoutError(AdsBridgeError, TimeoutError):
    """An outbound call exceeded its timeout."""

    code = -32001
    status_code = 504


class InternalError(AdsBridgeError):
    """Anything unanticipated."""


class ConfigurationError(AdsBridgeError):
    """Tool tables disagree, or a required setting is missing."""


def classify_error(
    exc: BaseException,
    logger: Optional[logging.Logger] = None,
) -> AdsBridgeError:
    """Wrap any exception in an AdsBridgeError with a friendly, concise message."""
    log = logger or logging.getLogger("ads_bridge.exceptions")

    if isinstance(exc, AdsBridgeError):
        return exc

    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        log.warning("Wrapping timeout", extra={"exc": exc})
        return UpstreamTimeoutError(
            f"Request timeout - upstream API took too long to respond: {exc}",
            original_exc=exc,
        )

    if isinstance(exc, httpx.HTTPError):
        log.warning("Wrapping HTTP exception", extra={"exc": exc})
        status = None
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
        return UpstreamAPIError(
            f"API request failed: {exc}",
            status=status,
            transient=status is None or status >= 500,
            original_exc=exc,
        )

    log.exception("Unexpected %s", exc.__class__.__name__, exc_info=exc)
    return InternalError(f"{exc.__class__.__name__}: {exc}", original_exc=exc)
