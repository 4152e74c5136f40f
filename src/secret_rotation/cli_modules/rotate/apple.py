"""Apple client secret rotation commands.

Implements `secret-rotation rotate apple` (one app, values from options or
prompts) and `secret-rotation rotate apple-batch` (every app, values from
the environment or a .env file).
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer

from secret_rotation.cli_modules.common.errors import error_boundary, require_file
from secret_rotation.cli_modules.common.options import AppOpt, EnvironmentOpt, YesOpt, prompt_text
from secret_rotation.cli_modules.common.output import print_rotation_result
from secret_rotation.cli_modules.rotate.common import (
    confirm_rotation,
    resolve_target,
    show_versions,
)
from secret_rotation.config import get_config
from secret_rotation.rotation import (
    APPLE_CLIENT_SECRET_KEY,
    rotate_apple_client_secret,
    rotate_apple_client_secrets_from_env,
)
from secret_rotation.secrets.providers import (
    ChainedProvider,
    DotEnvProvider,
    EnvironmentProvider,
)
from secret_rotation.tokens.apple import AppleClientSecretConfig


@error_boundary
def apple_cmd(
    environment: EnvironmentOpt = None,
    app: AppOpt = None,
    client_id: Annotated[
        Optional[str],
        typer.Option("--client-id", help="Apple Services ID"),
    ] = None,
    team_id: Annotated[
        Optional[str],
        typer.Option("--team-id", help="Apple Developer team id"),
    ] = None,
    key_path: Annotated[
        Optional[Path],
        typer.Option("--key-path", help="Path to the AuthKey .p8 private key"),
    ] = None,
    key_id: Annotated[
        Optional[str],
        typer.Option("--key-id", help="Id of the signing key"),
    ] = None,
    yes: YesOpt = False,
) -> None:
    """Generate and store a new Apple client secret for one app.

    Examples:
        secret-rotation rotate apple
        secret-rotation rotate apple -e dev -a main --client-id com.example.web \\
            --team-id TEAM123456 --key-id KEY1234567 --key-path AuthKey_KEY1234567.p8
    """
    config = get_config()
    target = resolve_target(config, environment, app, needs_app=True)

    apple_config = AppleClientSecretConfig(
        client_id=client_id or prompt_text("Apple client id"),
        team_id=team_id or prompt_text("Apple team id"),
        key_id=key_id or prompt_text("Apple key id"),
        key_path=str(require_file(key_path or Path(prompt_text("Path to .p8 key")), "Key file")),
    )

    confirm_rotation(target, [target.secret_key(APPLE_CLIENT_SECRET_KEY)], yes=yes)
    result = rotate_apple_client_secret(target, apple_config)
    print_rotation_result(result)
    show_versions(config, result.secret_name)


@error_boundary
def apple_batch_cmd(
    environment: EnvironmentOpt = None,
    env_file: Annotated[
        Optional[Path],
        typer.Option("--env-file", help="Read <APP>_APPLE_* variables from this .env file"),
    ] = None,
    yes: YesOpt = False,
) -> None:
    """Rotate every app's Apple client secret in one version.

    Reads MAIN_APPLE_CLIENT_ID, MAIN_APPLE_TEAM_ID, MAIN_APPLE_KEY_PATH,
    MAIN_APPLE_KEY_ID and the same variables for every other app.

    Examples:
        secret-rotation rotate apple-batch -e prd
        secret-rotation rotate apple-batch -e uat --env-file .env.uat --yes
    """
    config = get_config()
    target = resolve_target(config, environment)
    if env_file is not None:
        require_file(env_file, ".env file")

    provider = ChainedProvider([EnvironmentProvider(), DotEnvProvider(env_file)])
    keys = [f"{app.upper()}_{APPLE_CLIENT_SECRET_KEY}" for app in config.apps]
    confirm_rotation(target, keys, yes=yes)

    result = rotate_apple_client_secrets_from_env(
        target.environment, provider=provider, config=config
    )
    print_rotation_result(result)
    show_versions(config, result.secret_name)
