"""Base classes and protocols for secret storage.

This module defines the exception hierarchy, the SecretValue container
used for plaintext material in transit, and the VersionLabelStore
protocol consumed by the cleanup executor.

Design Principles:
    1. Protocol-based: any object with the right methods is a store
    2. Secure by default: plaintext is redacted in repr/str
    3. Errors map to one hierarchy regardless of backend
"""

from __future__ import annotations

import hmac
from abc import ABC, abstractmethod
from typing import Callable, Protocol, runtime_checkable


# =============================================================================
# Exceptions
# =============================================================================


class SecretError(Exception):
    """Base exception for secret-related errors."""

    pass


class SecretNotFoundError(SecretError):
    """Raised when a secret is not found."""

    def __init__(self, key: str, provider: str | None = None) -> None:
        self.key = key
        self.provider = provider
        msg = f"Secret not found: {key}"
        if provider:
            msg += f" (provider: {provider})"
        super().__init__(msg)


class SecretAccessError(SecretError):
    """Raised when access to a secret is denied."""

    def __init__(
        self, key: str, reason: str, provider: str | None = None
    ) -> None:
        self.key = key
        self.reason = reason
        self.provider = provider
        msg = f"Access denied for secret '{key}': {reason}"
        if provider:
            msg += f" (provider: {provider})"
        super().__init__(msg)


class SecretProviderError(SecretError):
    """Raised when a secret backend encounters an error."""

    def __init__(
        self, provider: str, message: str, cause: Exception | None = None
    ) -> None:
        self.provider = provider
        self.cause = cause
        super().__init__(f"Provider '{provider}' error: {message}")
        if cause:
            self.__cause__ = cause


class SecretEncryptionError(SecretError):
    """Raised when encrypting or decrypting with the key service fails."""

    def __init__(self, key_id: str, message: str) -> None:
        self.key_id = key_id
        super().__init__(f"Encryption with '{key_id}' failed: {message}")


class TokenGenerationError(SecretError):
    """Raised when a client secret or key pair cannot be produced."""

    pass


# =============================================================================
# Secret Value
# =============================================================================


class SecretValue:
    """Immutable container for plaintext secret material.

    The value is never exposed through repr/str, and comparison is
    constant-time.

    Example:
        >>> secret = SecretValue("client-secret", provider="env", key="GOOGLE_SECRET")
        >>> str(secret)
        '***'
        >>> secret.get_value()
        'client-secret'
    """

    __slots__ = ("_value", "_provider", "_key")

    def __init__(self, value: str, *, provider: str = "unknown", key: str = "") -> None:
        self._value = value
        self._provider = provider
        self._key = key

    def get_value(self) -> str:
        """Get the actual secret value.

        This is the only way to access the underlying secret.
        """
        return self._value

    @property
    def provider(self) -> str:
        return self._provider

    @property
    def key(self) -> str:
        return self._key

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SecretValue):
            other_value = other._value
        elif isinstance(other, str):
            other_value = other
        else:
            return NotImplemented
        return hmac.compare_digest(self._value.encode(), other_value.encode())

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"SecretValue(key={self._key!r}, provider={self._provider!r})"

    def __str__(self) -> str:
        return "***"

    def __len__(self) -> int:
        return len(self._value)

    def __bool__(self) -> bool:
        return bool(self._value)


# =============================================================================
# Store Protocol
# =============================================================================


@runtime_checkable
class VersionLabelStore(Protocol):
    """Protocol for stores that keep labeled secret versions.

    Example:
        >>> class InMemoryStore:
        ...     def fetch_label_map(self, secret_id):
        ...         return {"v1": ["AWSCURRENT"]}
        ...
        ...     def remove_label(self, secret_id, version_id, label):
        ...         pass
    """

    def fetch_label_map(self, secret_id: str) -> dict[str, list[str]]:
        """Read the current version id to labels snapshot.

        Raises:
            SecretError: If the snapshot cannot be read.
        """
        ...

    def remove_label(self, secret_id: str, version_id: str, label: str) -> None:
        """Remove a label from a version. Removing an absent label is not an error.

        Raises:
            SecretError: If the store rejects the removal.
        """
        ...


# =============================================================================
# Base Provider Implementation
# =============================================================================


class BaseSecretProvider(ABC):
    """Abstract base class for read-only secret providers.

    Subclasses implement _fetch() and the name property; get() wraps the
    result in a SecretValue and reports to the audit callback.
    """

    def __init__(
        self,
        *,
        audit_callback: Callable[[str, str, bool], None] | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            audit_callback: Callback for audit logging (key, action, success).
        """
        self._audit_callback = audit_callback

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for identification."""
        pass

    @abstractmethod
    def _fetch(self, key: str) -> str:
        """Fetch a value from the backend.

        Raises:
            SecretNotFoundError: If not found.
        """
        pass

    def get(self, key: str) -> SecretValue:
        """Retrieve a secret.

        Args:
            key: Secret key.

        Returns:
            SecretValue containing the secret.
        """
        try:
            value = self._fetch(key)
        except SecretError:
            self._audit("fetch", key, False)
            raise
        except Exception as e:
            self._audit("fetch", key, False)
            raise SecretProviderError(self.name, str(e), e) from e

        self._audit("fetch", key, True)
        return SecretValue(value, provider=self.name, key=key)

    def get_many(self, keys: list[str]) -> dict[str, SecretValue]:
        """Retrieve several secrets, reporting every missing key at once.

        Raises:
            SecretNotFoundError: Naming all keys that are missing.
        """
        found: dict[str, SecretValue] = {}
        missing: list[str] = []
        for key in keys:
            try:
                found[key] = self.get(key)
            except SecretNotFoundError:
                missing.append(key)
        if missing:
            raise SecretNotFoundError(", ".join(missing), self.name)
        return found

    def supports_key(self, key: str) -> bool:
        """Check if this provider can handle the given key."""
        return True

    def _audit(self, action: str, key: str, success: bool) -> None:
        if self._audit_callback:
            self._audit_callback(key, action, success)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
