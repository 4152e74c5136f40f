"""Construct the AWS-backed services a command needs from configuration."""

from __future__ import annotations

from secret_rotation.config import RotationConfig, get_config
from secret_rotation.secrets.cloud import AWSSecretsManagerStore


def secret_store(config: RotationConfig | None = None) -> AWSSecretsManagerStore:
    """Secrets Manager store for the configured region."""
    config = config or get_config()
    return AWSSecretsManagerStore(region_name=config.region)
