"""Google web client secret rotation command."""

from __future__ import annotations

from secret_rotation.cli_modules.common.errors import error_boundary
from secret_rotation.cli_modules.common.options import AppOpt, EnvironmentOpt, YesOpt, prompt_text
from secret_rotation.cli_modules.common.output import print_rotation_result
from secret_rotation.cli_modules.rotate.common import (
    confirm_rotation,
    resolve_target,
    show_versions,
)
from secret_rotation.config import get_config
from secret_rotation.rotation import GOOGLE_CLIENT_SECRET_KEY, rotate_google_client_secret


@error_boundary
def google_cmd(
    environment: EnvironmentOpt = None,
    app: AppOpt = None,
    yes: YesOpt = False,
) -> None:
    """Store a Google web client secret issued in the Google Cloud console.

    The secret is read with a hidden prompt so it never lands in shell history.

    Examples:
        secret-rotation rotate google -e dev -a main
    """
    config = get_config()
    target = resolve_target(config, environment, app, needs_app=True)
    secret = prompt_text("Google web client secret", hide_input=True)

    confirm_rotation(
        target,
        [target.secret_key(GOOGLE_CLIENT_SECRET_KEY)],
        yes=yes,
        kms_alias=target.google_kms_alias,
    )
    result = rotate_google_client_secret(target, secret)
    print_rotation_result(result)
    show_versions(config, result.secret_name)
