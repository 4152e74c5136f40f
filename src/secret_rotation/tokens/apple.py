"""Sign in with Apple client secrets.

Apple does not issue a static client secret. The service presents a JWT
signed with the team's private key (.p8, ES256) instead, and Apple caps
its lifetime at six months, so it has to be regenerated and rotated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from secret_rotation.secrets.base import TokenGenerationError

logger = logging.getLogger(__name__)

APPLE_AUDIENCE = "https://appleid.apple.com"
DEFAULT_LIFETIME = timedelta(days=180)
# Apple rejects client secrets that expire more than 15777000 seconds out
MAX_LIFETIME = timedelta(seconds=15777000)


@dataclass(frozen=True)
class AppleClientSecretConfig:
    """Inputs for one Apple client secret.

    Attributes:
        client_id: Services ID (the JWT subject).
        team_id: Apple Developer team id (the JWT issuer).
        key_id: Id of the signing key, sent as the ``kid`` header.
        key_path: Path to the .p8 private key.
    """

    client_id: str
    team_id: str
    key_id: str
    key_path: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "client_id": self.client_id,
            "team_id": self.team_id,
            "key_id": self.key_id,
            "key_path": self.key_path,
        }


def build_apple_claims(
    config: AppleClientSecretConfig,
    now: datetime,
    lifetime: timedelta = DEFAULT_LIFETIME,
) -> dict[str, Any]:
    """Build the claim set Apple expects in a client secret."""
    issued_at = int(now.timestamp())
    return {
        "iss": config.team_id,
        "iat": issued_at,
        "exp": issued_at + int(lifetime.total_seconds()),
        "aud": APPLE_AUDIENCE,
        "sub": config.client_id,
    }


def load_signing_key(key_path: str | Path) -> ec.EllipticCurvePrivateKey:
    """Read an EC private key from a PEM (.p8) file.

    Raises:
        TokenGenerationError: If the file is missing or not an EC private key.
    """
    path = Path(key_path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise TokenGenerationError(f"Cannot read private key file {path}: {e}") from e

    try:
        key = serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError) as e:
        raise TokenGenerationError(f"Invalid private key in {path}: {e}") from e
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise TokenGenerationError(f"Private key in {path} is not an EC key")
    return key


def generate_apple_client_secret(
    config: AppleClientSecretConfig,
    *,
    now: datetime | None = None,
    lifetime: timedelta = DEFAULT_LIFETIME,
) -> str:
    """Generate a signed Apple client secret.

    Args:
        config: Apple identifiers and key location.
        now: Issue time (defaults to the current time).
        lifetime: How long the secret stays valid.

    Returns:
        Compact ES256 JWT.

    Raises:
        ValueError: If lifetime is not positive or exceeds six months.
        TokenGenerationError: If the key cannot be loaded or signing fails.

    Example:
        >>> config = AppleClientSecretConfig(
        ...     client_id="com.example.web",
        ...     team_id="TEAM123456",
        ...     key_id="KEY1234567",
        ...     key_path="AuthKey_KEY1234567.p8",
        ... )
        >>> token = generate_apple_client_secret(config)
    """
    if lifetime <= timedelta(0):
        raise ValueError("lifetime must be positive")
    if lifetime > MAX_LIFETIME:
        raise ValueError("Apple client secrets cannot be valid for more than 6 months")

    issued = now or datetime.now(timezone.utc)
    claims = build_apple_claims(config, issued, lifetime)
    key = load_signing_key(config.key_path)
    try:
        token = jwt.encode(claims, key, algorithm="ES256", headers={"kid": config.key_id})
    except jwt.PyJWTError as e:
        raise TokenGenerationError(f"Failed to sign Apple client secret: {e}") from e

    logger.info(
        "Generated Apple client secret for %s (expires %s)",
        config.client_id,
        datetime.fromtimestamp(claims["exp"], tz=timezone.utc).isoformat(),
    )
    return token
