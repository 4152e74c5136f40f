"""Secret storage for secret-rotation.

This package wraps the services rotation talks to:

    - AWS Secrets Manager (JSON values and version staging labels)
    - AWS KMS (encryption of rotated material)
    - Environment / .env providers (batch rotation inputs)

Usage:
    >>> from secret_rotation.secrets import AWSSecretsManagerStore, SecretUpdater
    >>>
    >>> store = AWSSecretsManagerStore(region_name="us-east-2")
    >>> updater = SecretUpdater(store)
    >>> result = updater.update("dev/web3-auth/auth-service-api", {"JWT_PUB": "..."})
    >>> result.timestamp_label
    '20250709_143530'
"""

from secret_rotation.secrets.base import (
    # Protocol and ABC
    VersionLabelStore,
    BaseSecretProvider,
    # Value container
    SecretValue,
    # Exceptions
    SecretError,
    SecretNotFoundError,
    SecretAccessError,
    SecretProviderError,
    SecretEncryptionError,
    TokenGenerationError,
)
from secret_rotation.secrets.providers import (
    EnvironmentProvider,
    DotEnvProvider,
    ChainedProvider,
)


# Lazy imports for boto3-backed classes
def __getattr__(name: str):
    """Lazy import AWS-backed classes."""
    lazy = {
        "AWSSecretsManagerStore": "secret_rotation.secrets.cloud",
        "KmsEncryptor": "secret_rotation.secrets.kms",
        "SecretUpdater": "secret_rotation.secrets.manager",
        "UpdateResult": "secret_rotation.secrets.manager",
    }
    if name in lazy:
        import importlib

        return getattr(importlib.import_module(lazy[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "VersionLabelStore",
    "BaseSecretProvider",
    "SecretValue",
    "SecretError",
    "SecretNotFoundError",
    "SecretAccessError",
    "SecretProviderError",
    "SecretEncryptionError",
    "TokenGenerationError",
    "EnvironmentProvider",
    "DotEnvProvider",
    "ChainedProvider",
    # Lazy loaded
    "AWSSecretsManagerStore",
    "KmsEncryptor",
    "SecretUpdater",
    "UpdateResult",
]
