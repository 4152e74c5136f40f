"""Command-line interface for secret-rotation."""

from __future__ import annotations

import dataclasses
from typing import Annotated, Optional

import typer

from secret_rotation import __version__
from secret_rotation.cli_modules import rotate, versions
from secret_rotation.cli_modules.common.errors import error_boundary
from secret_rotation.cli_modules.common.options import ConfigOpt, LogFormat, VerboseOpt
from secret_rotation.config import load_config, set_config
from secret_rotation.observability import configure_logging

app = typer.Typer(
    name="secret-rotation",
    help="Rotate auth-service secrets and manage their version labels",
    add_completion=False,
    no_args_is_help=True,
)

versions.register_commands(app)
rotate.register_commands(app)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"secret-rotation {__version__}")
        raise typer.Exit()


@app.callback()
@error_boundary
def main(
    config_file: ConfigOpt = None,
    verbose: VerboseOpt = False,
    log_format: Annotated[
        Optional[LogFormat],
        typer.Option("--log-format", help="Log format (console, json)", case_sensitive=False),
    ] = None,
    region: Annotated[
        Optional[str],
        typer.Option("--region", "-r", help="AWS region (default us-east-2)"),
    ] = None,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """secret-rotation: rotate secrets and keep their labels under the limit."""
    config = load_config(config_file)
    if region:
        config = dataclasses.replace(config, region=region)
    set_config(config)

    configure_logging(
        level="DEBUG" if verbose else config.log_level,
        format=log_format.value if log_format else config.log_format,
    )


if __name__ == "__main__":
    app()
