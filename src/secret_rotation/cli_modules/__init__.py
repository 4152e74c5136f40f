"""CLI modules for secret-rotation.

This package provides the command groups mounted on the root app:
    - common: Shared infrastructure (options, output, errors)
    - versions: Inspect and clean up secret version labels
    - rotate: Rotate Apple, Google and JWT secrets

Usage:
    from secret_rotation.cli_modules import rotate, versions

    app = typer.Typer()
    versions.register_commands(app)
    rotate.register_commands(app)
"""
