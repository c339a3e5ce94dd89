"""Persistent credential storage, injected where calls need secrets."""

from webrepo.credentials.errors import (
    CredentialDecodeError,
    CredentialStoreError,
    StoreNotConnectedError,
)
from webrepo.credentials.store import CredentialStore, bearer_headers


__all__ = [
    "CredentialDecodeError",
    "CredentialStore",
    "CredentialStoreError",
    "StoreNotConnectedError",
    "bearer_headers",
]
