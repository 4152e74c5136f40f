"""Rotation CLI commands for secret-rotation.

This package contains the rotation commands:
    - apple: Rotate one app's Apple client secret
    - apple-batch: Rotate every app's Apple client secret from the environment
    - google: Store a new Google web client secret
    - jwt-keys: Generate a new JWT signing key pair
"""

import typer

from secret_rotation.cli_modules.rotate.apple import apple_batch_cmd, apple_cmd
from secret_rotation.cli_modules.rotate.google import google_cmd
from secret_rotation.cli_modules.rotate.jwt_keys import jwt_keys_cmd

# Rotate app for subcommands
app = typer.Typer(
    name="rotate",
    help="Rotate client secrets and signing keys",
    no_args_is_help=True,
)

# Register subcommands
app.command(name="apple")(apple_cmd)
app.command(name="apple-batch")(apple_batch_cmd)
app.command(name="google")(google_cmd)
app.command(name="jwt-keys")(jwt_keys_cmd)


def register_commands(parent_app: typer.Typer) -> None:
    """Register rotate commands with the parent app.

    Args:
        parent_app: Parent Typer app to register commands to
    """
    parent_app.add_typer(app, name="rotate")


__all__ = [
    "app",
    "register_commands",
    "apple_cmd",
    "apple_batch_cmd",
    "google_cmd",
    "jwt_keys_cmd",
]
