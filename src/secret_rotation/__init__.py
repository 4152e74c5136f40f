"""secret-rotation: rotate auth-service secrets stored in AWS Secrets Manager.

Rotation writes new material (Apple and Google client secrets, JWT signing
keys) as a new secret version and tags the retired version with a
timestamp label. Retention cleanup keeps those labels under the store's
limit of 20 per secret.

Usage:
    >>> from secret_rotation import RotationTarget, rotate_jwt_keys
    >>> result = rotate_jwt_keys("dev")
    >>> result.secret_keys
    ['JWT_PRIV', 'JWT_PUB']

    >>> from secret_rotation import CleanupExecutor, RetentionPolicy
    >>> from secret_rotation.secrets import AWSSecretsManagerStore
    >>> executor = CleanupExecutor(AWSSecretsManagerStore())
    >>> executor.run("dev/web3-auth/auth-service-api", RetentionPolicy(), dry_run=True)
"""

from secret_rotation.config import (
    ConfigError,
    ConfigValidationError,
    RotationConfig,
    get_config,
    load_config,
    reset_config,
    set_config,
)
from secret_rotation.retention import (
    CleanupExecutor,
    CleanupPlan,
    CleanupResult,
    CleanupStatus,
    LabelRemoval,
    RetentionPolicy,
    plan,
)
from secret_rotation.rotation import (
    RotationResult,
    RotationTarget,
    rotate_apple_client_secret,
    rotate_apple_client_secrets_from_env,
    rotate_google_client_secret,
    rotate_jwt_keys,
)

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "ConfigError",
    "ConfigValidationError",
    "RotationConfig",
    "get_config",
    "load_config",
    "reset_config",
    "set_config",
    "CleanupExecutor",
    "CleanupPlan",
    "CleanupResult",
    "CleanupStatus",
    "LabelRemoval",
    "RetentionPolicy",
    "plan",
    "RotationResult",
    "RotationTarget",
    "rotate_apple_client_secret",
    "rotate_apple_client_secrets_from_env",
    "rotate_google_client_secret",
    "rotate_jwt_keys",
]
