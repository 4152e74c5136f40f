"""Prompting and confirmation shared by the rotate commands."""

from __future__ import annotations

import typer

from secret_rotation.cli_modules.common.options import prompt_choice
from secret_rotation.cli_modules.common.output import print_label_map
from secret_rotation.cli_modules.common.services import secret_store
from secret_rotation.config import RotationConfig
from secret_rotation.retention.base import summarize_labels
from secret_rotation.rotation import RotationTarget


def resolve_target(
    config: RotationConfig,
    environment: str | None,
    app: str | None = None,
    *,
    needs_app: bool = False,
) -> RotationTarget:
    """Build a target, prompting for whatever was not given on the command line."""
    if environment is None:
        environment = prompt_choice("Environment", config.environments)
    if needs_app and app is None:
        app = prompt_choice("App", config.apps)
    return RotationTarget(environment, app, config=config)


def confirm_rotation(
    target: RotationTarget,
    keys: list[str],
    *,
    yes: bool,
    kms_alias: str | None = None,
) -> None:
    """Show what will be written and ask before writing it."""
    typer.echo(f"Environment: {target.environment}")
    if target.app:
        typer.echo(f"App:         {target.app}")
    typer.echo(f"Secret:      {target.secret_name}")
    typer.echo(f"KMS key:     {kms_alias or target.kms_alias}")
    typer.echo(f"Keys:        {', '.join(keys)}")
    if not yes:
        typer.confirm("Proceed with rotation?", abort=True)


def show_versions(config: RotationConfig, secret_name: str) -> None:
    """List the secret's versions after a rotation wrote a new one."""
    label_map = secret_store(config).fetch_label_map(secret_name)
    usage = summarize_labels(
        label_map,
        limit=config.label_limit,
        warning_threshold=config.label_warning_threshold,
    )
    print_label_map(secret_name, label_map, usage)
