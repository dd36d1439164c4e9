"""
File-backed storage for the Facebook access token.

Tokens are written by the (out of band) login flow and read by every tool
call. Reads never modify the file except to drop an expired token.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .config import DEFAULT_TOKEN_FILE

__all__ = ["TokenStore"]

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _iso(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).isoformat()


class TokenStore:
    def __init__(self, path: Path | str = DEFAULT_TOKEN_FILE) -> None:
        self.path = Path(path)

    def store_token(self, access_token: str, expires_in: Optional[int] = None) -> None:
        """Persist *access_token*; *expires_in* is in seconds."""
        now = _now_ms()
        data = {
            "accessToken": access_token,
            "expiresAt": now + expires_in * 1000 if expires_in else None,
            "storedAt": now,
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")
        self.path.chmod(0o600)
        logger.info("Facebook token stored at %s", self.path)

    def get_token(self) -> Optional[str]:
        """Return the stored token, or None if absent or expired."""
        data = self._read()
        if data is None:
            return None
        if self._is_expired(data):
            logger.warning("Stored token has expired")
            self.clear_token()
            return None
        return data.get("accessToken") or None

    def clear_token(self) -> bool:
        """Remove the stored token. Returns False if there was nothing to remove."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        logger.info("Facebook token cleared")
        return True

    def has_valid_token(self) -> bool:
        return self.get_token() is not None

    def token_info(self) -> dict[str, Any]:
        data = self._read()
        if data is None:
            return {"hasToken": False}
        expires_at = data.get("expiresAt")
        return {
            "hasToken": True,
            "isExpired": self._is_expired(data),
            "storedAt": _iso(data["storedAt"]) if data.get("storedAt") else "Unknown",
            "expiresAt": _iso(expires_at) if expires_at else "Never",
        }

    def _read(self) -> Optional[dict[str, Any]]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable token file %s", self.path)
            return None
        return data if isinstance(data, dict) else None

    @staticmethod
    def _is_expired(data: dict[str, Any]) -> bool:
        expires_at = data.get("expiresAt")
        return bool(expires_at) and _now_ms() > expires_at
