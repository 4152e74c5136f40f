"""Rotation workflows.

Each workflow produces new secret material, encrypts what must not be
stored in the clear with the environment's KMS key, and writes everything
it produced as one new version of the environment's auth-service secret:

    generate ---> KmsEncryptor.encrypt ---> SecretUpdater.update
                                               |
                                               +---> tag AWSPREVIOUS with a timestamp

Workflows:
    - rotate_apple_client_secret: <APP>_APPLE_CLIENT_SECRET
    - rotate_apple_client_secrets_from_env: every app's Apple secret in one version
    - rotate_google_client_secret: <APP>_GOOGLE_WEB_CLIENT_SECRET (own KMS alias)
    - rotate_jwt_keys: JWT_PRIV (encrypted) and JWT_PUB

Plaintext tokens never leave the workflow: results carry key names,
version ids and non-secret metadata only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from secret_rotation.config import RotationConfig, get_config
from secret_rotation.secrets.base import BaseSecretProvider
from secret_rotation.secrets.cloud import AWSSecretsManagerStore
from secret_rotation.secrets.kms import KmsEncryptor
from secret_rotation.secrets.manager import SecretUpdater, UpdateResult
from secret_rotation.secrets.providers import (
    ChainedProvider,
    DotEnvProvider,
    EnvironmentProvider,
)
from secret_rotation.tokens.apple import (
    DEFAULT_LIFETIME,
    AppleClientSecretConfig,
    generate_apple_client_secret,
)
from secret_rotation.tokens.keys import generate_ec_key_pair

logger = logging.getLogger(__name__)

APPLE_CLIENT_SECRET_KEY = "APPLE_CLIENT_SECRET"
GOOGLE_CLIENT_SECRET_KEY = "GOOGLE_WEB_CLIENT_SECRET"
JWT_PRIVATE_KEY = "JWT_PRIV"
JWT_PUBLIC_KEY = "JWT_PUB"

# Suffixes of the per-app variables read by batch Apple rotation
APPLE_ENV_FIELDS = {
    "client_id": "APPLE_CLIENT_ID",
    "team_id": "APPLE_TEAM_ID",
    "key_path": "APPLE_KEY_PATH",
    "key_id": "APPLE_KEY_ID",
}


# =============================================================================
# Targets and Results
# =============================================================================


@dataclass(frozen=True)
class RotationTarget:
    """Where a rotation writes.

    Attributes:
        environment: Deployment environment (dev, uat, prd).
        app: Application owning the secret, for per-app keys.
        config: Settings to resolve names from (defaults to get_config()).

    Example:
        >>> target = RotationTarget("dev", "main")
        >>> target.secret_name
        'dev/web3-auth/auth-service-api'
        >>> target.secret_key("APPLE_CLIENT_SECRET")
        'MAIN_APPLE_CLIENT_SECRET'
    """

    environment: str
    app: str | None = None
    config: RotationConfig | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        settings = self.settings
        if self.environment not in settings.environments:
            raise ValueError(
                f"Unknown environment '{self.environment}'. "
                f"Expected one of: {', '.join(settings.environments)}"
            )
        if self.app is not None and self.app not in settings.apps:
            raise ValueError(
                f"Unknown app '{self.app}'. Expected one of: {', '.join(settings.apps)}"
            )

    @property
    def settings(self) -> RotationConfig:
        return self.config or get_config()

    @property
    def secret_name(self) -> str:
        return self.settings.secret_name(self.environment)

    @property
    def kms_alias(self) -> str:
        return self.settings.kms_alias(self.environment)

    @property
    def google_kms_alias(self) -> str:
        return self.settings.google_kms_alias(self.environment)

    def secret_key(self, suffix: str) -> str:
        """Key inside the secret for this target's app."""
        if self.app is None:
            raise ValueError(f"An app is required for {suffix}")
        return f"{self.app.upper()}_{suffix}"


@dataclass
class RotationResult:
    """Outcome of a rotation workflow.

    Attributes:
        environment: Environment rotated.
        app: App rotated, or None for environment-wide material.
        secret_name: Secret that received the new version.
        secret_keys: Keys written.
        kms_alias: Key used for encryption.
        version_id: New AWSCURRENT version.
        timestamp_label: Label attached to the retired version, if any.
        metadata: Non-secret facts about the generated material.
    """

    environment: str
    app: str | None
    secret_name: str
    secret_keys: list[str]
    kms_alias: str
    version_id: str
    timestamp_label: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "environment": self.environment,
            "app": self.app,
            "secret_name": self.secret_name,
            "secret_keys": self.secret_keys,
            "kms_alias": self.kms_alias,
            "version_id": self.version_id,
            "timestamp_label": self.timestamp_label,
            "metadata": self.metadata,
        }


def _result(
    target: RotationTarget,
    update: UpdateResult,
    *,
    kms_alias: str | None = None,
    **metadata: Any,
) -> RotationResult:
    result = RotationResult(
        environment=target.environment,
        app=target.app,
        secret_name=update.secret_id,
        secret_keys=list(update.updated_keys),
        kms_alias=kms_alias or target.kms_alias,
        version_id=update.version_id,
        timestamp_label=update.timestamp_label,
        metadata=metadata,
    )
    logger.info(
        "Rotated %s in %s (version %s)",
        ", ".join(result.secret_keys),
        result.secret_name,
        result.version_id,
    )
    return result


def _services(
    settings: RotationConfig,
    encryptor: KmsEncryptor | None,
    updater: SecretUpdater | None,
) -> tuple[KmsEncryptor, SecretUpdater]:
    if encryptor is None:
        encryptor = KmsEncryptor(region_name=settings.region)
    if updater is None:
        updater = SecretUpdater(
            AWSSecretsManagerStore(region_name=settings.region),
            label_limit=settings.label_limit,
        )
    return encryptor, updater


def _apple_metadata(
    apple_config: AppleClientSecretConfig, issued: datetime, lifetime: timedelta
) -> dict[str, Any]:
    return {
        "client_id": apple_config.client_id,
        "team_id": apple_config.team_id,
        "key_id": apple_config.key_id,
        "issued_at": issued.isoformat(),
        "expires_at": (issued + lifetime).isoformat(),
    }


# =============================================================================
# Workflows
# =============================================================================


def rotate_apple_client_secret(
    target: RotationTarget,
    apple_config: AppleClientSecretConfig,
    *,
    encryptor: KmsEncryptor | None = None,
    updater: SecretUpdater | None = None,
    now: datetime | None = None,
    lifetime: timedelta = DEFAULT_LIFETIME,
) -> RotationResult:
    """Generate, encrypt and store one app's Apple client secret.

    Raises:
        ValueError: If the target has no app.
        TokenGenerationError: If the secret cannot be signed.
        SecretError: If encryption or the write fails.
    """
    key = target.secret_key(APPLE_CLIENT_SECRET_KEY)
    encryptor, updater = _services(target.settings, encryptor, updater)
    issued = now or datetime.now(timezone.utc)

    token = generate_apple_client_secret(apple_config, now=issued, lifetime=lifetime)
    encrypted = encryptor.encrypt(token, target.kms_alias)
    update = updater.update(target.secret_name, {key: encrypted})
    return _result(target, update, **_apple_metadata(apple_config, issued, lifetime))


def apple_configs_from_provider(
    provider: BaseSecretProvider, apps: list[str]
) -> dict[str, AppleClientSecretConfig]:
    """Read every app's Apple settings, e.g. MAIN_APPLE_CLIENT_ID.

    Raises:
        SecretNotFoundError: Naming every variable that is missing.
    """
    names = {
        app: {attr: f"{app.upper()}_{suffix}" for attr, suffix in APPLE_ENV_FIELDS.items()}
        for app in apps
    }
    values = provider.get_many([name for per_app in names.values() for name in per_app.values()])
    return {
        app: AppleClientSecretConfig(
            **{attr: values[name].get_value() for attr, name in per_app.items()}
        )
        for app, per_app in names.items()
    }


def rotate_apple_client_secrets_from_env(
    environment: str,
    *,
    provider: BaseSecretProvider | None = None,
    env_file: str | None = None,
    config: RotationConfig | None = None,
    encryptor: KmsEncryptor | None = None,
    updater: SecretUpdater | None = None,
    now: datetime | None = None,
    lifetime: timedelta = DEFAULT_LIFETIME,
) -> RotationResult:
    """Rotate the Apple client secret of every configured app in one version.

    Args:
        environment: Environment to rotate.
        provider: Source of the <APP>_APPLE_* variables. Defaults to the
            process environment, then env_file (or ./.env).
        env_file: .env file used by the default provider.

    Raises:
        SecretNotFoundError: If any required variable is missing.
        TokenGenerationError: If a secret cannot be signed.
        SecretError: If encryption or the write fails.
    """
    target = RotationTarget(environment, config=config)
    settings = target.settings
    if provider is None:
        provider = ChainedProvider([EnvironmentProvider(), DotEnvProvider(env_file)])

    apple_configs = apple_configs_from_provider(provider, settings.apps)
    encryptor, updater = _services(settings, encryptor, updater)
    issued = now or datetime.now(timezone.utc)

    updates: dict[str, str] = {}
    for app, apple_config in apple_configs.items():
        token = generate_apple_client_secret(apple_config, now=issued, lifetime=lifetime)
        key = f"{app.upper()}_{APPLE_CLIENT_SECRET_KEY}"
        updates[key] = encryptor.encrypt(token, target.kms_alias)
        logger.info("Prepared %s", key)

    update = updater.update(target.secret_name, updates)
    return _result(
        target,
        update,
        apps={app: _apple_metadata(c, issued, lifetime) for app, c in apple_configs.items()},
    )


def rotate_google_client_secret(
    target: RotationTarget,
    web_client_secret: str,
    *,
    encryptor: KmsEncryptor | None = None,
    updater: SecretUpdater | None = None,
) -> RotationResult:
    """Encrypt and store a Google web client secret issued by the console.

    Raises:
        ValueError: If the secret is empty or the target has no app.
        SecretError: If encryption or the write fails.
    """
    key = target.secret_key(GOOGLE_CLIENT_SECRET_KEY)
    web_client_secret = web_client_secret.strip()
    if not web_client_secret:
        raise ValueError("Google web client secret must not be empty")

    encryptor, updater = _services(target.settings, encryptor, updater)
    kms_alias = target.google_kms_alias
    encrypted = encryptor.encrypt(web_client_secret, kms_alias)
    update = updater.update(target.secret_name, {key: encrypted})
    return _result(target, update, kms_alias=kms_alias)


def rotate_jwt_keys(
    environment: str,
    *,
    config: RotationConfig | None = None,
    encryptor: KmsEncryptor | None = None,
    updater: SecretUpdater | None = None,
    now: datetime | None = None,
) -> RotationResult:
    """Generate a new ES256 signing key pair for the auth service.

    The private key is stored KMS-encrypted, the public key in the clear,
    both in the same version so they never disagree.

    Raises:
        SecretError: If encryption or the write fails.
    """
    target = RotationTarget(environment, config=config)
    encryptor, updater = _services(target.settings, encryptor, updater)

    pair = generate_ec_key_pair(now=now)
    updates = {
        JWT_PRIVATE_KEY: encryptor.encrypt(pair.private_key_base64, target.kms_alias),
        JWT_PUBLIC_KEY: pair.public_key_base64,
    }
    update = updater.update(target.secret_name, updates)
    return _result(target, update, **pair.metadata())
