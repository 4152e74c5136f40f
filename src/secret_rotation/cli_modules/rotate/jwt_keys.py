"""JWT signing key rotation command."""

from __future__ import annotations

from secret_rotation.cli_modules.common.errors import error_boundary
from secret_rotation.cli_modules.common.options import EnvironmentOpt, YesOpt
from secret_rotation.cli_modules.common.output import print_rotation_result
from secret_rotation.cli_modules.rotate.common import (
    confirm_rotation,
    resolve_target,
    show_versions,
)
from secret_rotation.config import get_config
from secret_rotation.rotation import JWT_PRIVATE_KEY, JWT_PUBLIC_KEY, rotate_jwt_keys


@error_boundary
def jwt_keys_cmd(
    environment: EnvironmentOpt = None,
    yes: YesOpt = False,
) -> None:
    """Generate a new ES256 key pair for the auth service.

    Tokens signed with the old key stop verifying once the service reloads
    the secret.

    Examples:
        secret-rotation rotate jwt-keys -e dev
    """
    config = get_config()
    target = resolve_target(config, environment)

    confirm_rotation(target, [JWT_PRIVATE_KEY, JWT_PUBLIC_KEY], yes=yes)
    result = rotate_jwt_keys(target.environment, config=config)
    print_rotation_result(result)
    show_versions(config, result.secret_name)
