"""Unit tests for the credential store."""

from collections.abc import Iterator
from pathlib import Path

import pytest
from pydantic import BaseModel

from webrepo.credentials import (
    CredentialDecodeError,
    CredentialStore,
    StoreNotConnectedError,
    bearer_headers,
)


class OAuthToken(BaseModel):
    access_token: str
    expires_in: int


@pytest.fixture
def store(tmp_path: Path) -> Iterator[CredentialStore]:
    """Connected credential store in a temporary directory."""
    credential_store = CredentialStore(tmp_path / "nested" / "credentials.db")
    credential_store.connect()
    yield credential_store
    credential_store.close()


class TestCredentialStore:
    """Tests for save, read and delete."""

    def test_bytes_round_trip(self, store: CredentialStore) -> None:
        """Test storing raw bytes."""
        store.save(b"\x00secret", "api", "alice")

        assert store.read("api", "alice") == b"\x00secret"

    def test_str_value(self, store: CredentialStore) -> None:
        """Test storing a string."""
        store.save("token-1", "api", "alice")

        assert store.read("api", "alice", str) == "token-1"

    def test_model_value(self, store: CredentialStore) -> None:
        """Test storing a pydantic model as JSON."""
        store.save(OAuthToken(access_token="abc", expires_in=60), "oauth", "bob")

        token = store.read("oauth", "bob", OAuthToken)

        assert token == OAuthToken(access_token="abc", expires_in=60)

    def test_save_overwrites(self, store: CredentialStore) -> None:
        """Test that saving again replaces the value."""
        store.save("old", "api", "alice")
        store.save("new", "api", "alice")

        assert store.read("api", "alice", str) == "new"

    def test_missing_returns_none(self, store: CredentialStore) -> None:
        """Test reading an absent credential."""
        assert store.read("api", "nobody") is None

    def test_accounts_are_separate(self, store: CredentialStore) -> None:
        """Test that service and account both key the secret."""
        store.save("a", "api", "alice")
        store.save("b", "other", "alice")

        assert store.read("api", "alice", str) == "a"
        assert store.read("other", "alice", str) == "b"

    def test_delete(self, store: CredentialStore) -> None:
        """Test deleting a credential."""
        store.save("token", "api", "alice")

        assert store.delete("api", "alice") is True
        assert store.delete("api", "alice") is False
        assert store.read("api", "alice") is None

    def test_decode_error(self, store: CredentialStore) -> None:
        """Test reading a secret as an incompatible type."""
        store.save("not json", "api", "alice")

        with pytest.raises(CredentialDecodeError):
            store.read("api", "alice", OAuthToken)

    def test_persists_across_connections(self, tmp_path: Path) -> None:
        """Test that secrets survive reconnecting."""
        db_path = tmp_path / "credentials.db"
        with CredentialStore(db_path) as first:
            first.save("kept", "api", "alice")

        with CredentialStore(db_path) as second:
            assert second.read("api", "alice", str) == "kept"

    def test_not_connected(self, tmp_path: Path) -> None:
        """Test that use before connect fails."""
        credential_store = CredentialStore(tmp_path / "credentials.db")

        assert not credential_store.is_connected
        with pytest.raises(StoreNotConnectedError):
            credential_store.read("api", "alice")


class TestBearerHeaders:
    """Tests for bearer_headers."""

    def test_builds_authorization(self, store: CredentialStore) -> None:
        """Test header construction from a stored token."""
        store.save("tok", "api", "alice")

        assert bearer_headers(store, "api", "alice") == {"Authorization": "Bearer tok"}

    def test_empty_when_missing(self, store: CredentialStore) -> None:
        """Test that a missing token yields no header."""
        assert bearer_headers(store, "api", "nobody") == {}
