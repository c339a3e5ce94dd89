"""Exceptions for the credential store."""


class CredentialStoreError(Exception):
    """Base exception for all credential store errors."""


class StoreNotConnectedError(CredentialStoreError):
    """Raised when the store is used before ``connect`` or after ``close``."""

    def __init__(self, message: str = "Credential store not connected") -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)


class CredentialDecodeError(CredentialStoreError):
    """Raised when a stored secret cannot be read back as the requested type."""

    def __init__(self, service: str, account: str, detail: str) -> None:
        """Initialize the error.

        Args:
            service: Service of the credential.
            account: Account of the credential.
            detail: Why decoding failed.
        """
        self.service = service
        self.account = account
        super().__init__(f"Cannot decode credential {service}/{account}: {detail}")
