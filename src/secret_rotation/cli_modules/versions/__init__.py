"""Version label CLI commands for secret-rotation.

This package contains the label inspection and cleanup commands:
    - list: Show versions and their labels
    - count: Show label usage against the limit
    - cleanup: Remove old timestamp labels

The same app is installed as the standalone ``secret-versions`` script.
"""

import typer

from secret_rotation.cli_modules.versions.list import list_cmd
from secret_rotation.cli_modules.versions.count import count_cmd
from secret_rotation.cli_modules.versions.cleanup import cleanup_cmd

# Versions app for subcommands
app = typer.Typer(
    name="versions",
    help="Inspect and clean up secret version labels",
    no_args_is_help=True,
)

# Register subcommands
app.command(name="list")(list_cmd)
app.command(name="count")(count_cmd)
app.command(name="cleanup")(cleanup_cmd)


def register_commands(parent_app: typer.Typer) -> None:
    """Register versions commands with the parent app.

    Args:
        parent_app: Parent Typer app to register commands to
    """
    parent_app.add_typer(app, name="versions")


__all__ = [
    "app",
    "register_commands",
    "list_cmd",
    "count_cmd",
    "cleanup_cmd",
]
