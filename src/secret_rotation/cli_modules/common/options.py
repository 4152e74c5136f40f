"""Reusable CLI options and arguments.

This module provides standardized, reusable CLI options using Typer's
Annotated type pattern for consistency across all commands.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import click
import typer


class OutputFormat(str, Enum):
    """Output formats for read-only commands."""

    CONSOLE = "console"
    JSON = "json"


class LogFormat(str, Enum):
    """Log record formats."""

    CONSOLE = "console"
    JSON = "json"


def prompt_choice(label: str, choices: list[str]) -> str:
    """Ask for one of a fixed set of values."""
    return typer.prompt(label, type=click.Choice(choices))


def prompt_text(label: str, *, hide_input: bool = False) -> str:
    """Ask for a non-empty value."""
    while True:
        value = typer.prompt(label, hide_input=hide_input).strip()
        if value:
            return value
        typer.echo(f"{label} is required.", err=True)


# =============================================================================
# Common Arguments
# =============================================================================


# Secret name or ARN
SecretArg = Annotated[
    str,
    typer.Argument(help="Secret name or ARN (e.g. dev/web3-auth/auth-service-api)"),
]


# =============================================================================
# Common Options
# =============================================================================


# Output format
FormatOpt = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format (console, json)",
        case_sensitive=False,
    ),
]

# Deployment environment
EnvironmentOpt = Annotated[
    Optional[str],
    typer.Option(
        "--environment",
        "-e",
        help="Deployment environment (prompted when omitted)",
    ),
]

# Application
AppOpt = Annotated[
    Optional[str],
    typer.Option(
        "--app",
        "-a",
        help="Application owning the secret (prompted when omitted)",
    ),
]

# Skip confirmation
YesOpt = Annotated[
    bool,
    typer.Option(
        "--yes",
        "-y",
        help="Skip the confirmation prompt",
    ),
]

# Configuration file
ConfigOpt = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="Configuration file (YAML/JSON)",
        file_okay=True,
        dir_okay=False,
    ),
]

# Verbose mode
VerboseOpt = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
]
