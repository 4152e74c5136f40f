"""Token and key material generated during rotation."""

from secret_rotation.tokens.apple import (
    APPLE_AUDIENCE,
    DEFAULT_LIFETIME,
    MAX_LIFETIME,
    AppleClientSecretConfig,
    build_apple_claims,
    generate_apple_client_secret,
    load_signing_key,
)
from secret_rotation.tokens.keys import (
    ALGORITHM,
    KEY_TYPE,
    EcKeyPair,
    generate_ec_key_pair,
    pem_body,
)

__all__ = [
    "APPLE_AUDIENCE",
    "DEFAULT_LIFETIME",
    "MAX_LIFETIME",
    "AppleClientSecretConfig",
    "build_apple_claims",
    "generate_apple_client_secret",
    "load_signing_key",
    "ALGORITHM",
    "KEY_TYPE",
    "EcKeyPair",
    "generate_ec_key_pair",
    "pem_body",
]
