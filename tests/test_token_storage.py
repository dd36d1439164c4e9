"""Tests for the file-backed token store."""

import json
import stat

import pytest

from ads_bridge.token_storage import TokenStore


@pytest.fixture
def store(tmp_path):
    return TokenStore(tmp_path / "nested" / "token.json")


class TestTokenStore:
    def test_empty(self, store):
        assert store.get_token() is None
        assert store.has_valid_token() is False
        assert store.token_info() == {"hasToken": False}
        assert store.clear_token() is False

    def test_store_and_read(self, store):
        store.store_token("abc", expires_in=3600)

        assert store.get_token() == "abc"
        assert store.has_valid_token() is True
        data = json.loads(store.path.read_text())
        assert data["accessToken"] == "abc"
        assert data["expiresAt"] - data["storedAt"] == 3600 * 1000

    def test_file_is_private(self, store):
        store.store_token("abc")
        assert stat.S_IMODE(store.path.stat().st_mode) == 0o600

    def test_token_without_expiry(self, store):
        store.store_token("abc")
        info = store.token_info()

        assert info["hasToken"] is True
        assert info["isExpired"] is False
        assert info["expiresAt"] == "Never"

    def test_expired_token_is_cleared(self, store):
        store.store_token("abc", expires_in=60)
        data = json.loads(store.path.read_text())
        data["expiresAt"] = data["storedAt"] - 1
        store.path.write_text(json.dumps(data))

        assert store.token_info()["isExpired"] is True
        assert store.get_token() is None
        assert not store.path.exists()

    def test_clear(self, store):
        store.store_token("abc")
        assert store.clear_token() is True
        assert store.get_token() is None

    def test_unreadable_file(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{not json")
        assert store.get_token() is None
