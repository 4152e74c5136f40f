"""Versions cleanup command.

This module implements the `secret-rotation versions cleanup` command,
which removes old timestamp labels so the secret stays under the label
limit. Versions left without labels are deprecated and AWS deletes them
on its own schedule.
"""

from __future__ import annotations

from typing import Annotated, Optional

import typer

from secret_rotation.cli_modules.common.errors import (
    PartialFailureError,
    UsageError,
    error_boundary,
)
from secret_rotation.cli_modules.common.options import FormatOpt, OutputFormat, SecretArg
from secret_rotation.cli_modules.common.output import (
    echo_json,
    print_cleanup_result,
    print_plan,
)
from secret_rotation.cli_modules.common.services import secret_store
from secret_rotation.config import get_config
from secret_rotation.retention.base import CleanupPlan, RetentionPolicy
from secret_rotation.retention.executor import CleanupExecutor


@error_boundary
def cleanup_cmd(
    secret: SecretArg,
    keep: Annotated[
        Optional[int],
        typer.Option("--keep", "-k", help="Timestamp labels to keep (default from config: 10)"),
    ] = None,
    days: Annotated[
        Optional[int],
        typer.Option("--days", "-d", help="Also keep labels newer than this many days (default 7, 0 disables)"),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Keep exactly --keep labels, ignoring --days"),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show the plan without removing anything"),
    ] = False,
    force: Annotated[
        bool,
        typer.Option("--force", help="Remove without asking for confirmation"),
    ] = False,
    format: FormatOpt = OutputFormat.CONSOLE,
) -> None:
    """Remove old timestamp labels from a secret.

    AWSCURRENT and AWSPREVIOUS versions are never touched, and labels that
    are not timestamps are left alone.

    Examples:
        secret-rotation versions cleanup dev/web3-auth/auth-service-api --dry-run
        secret-rotation versions cleanup dev/web3-auth/auth-service-api --keep 5 --days 0 --force
        secret-rotation versions cleanup prd/web3-auth/auth-service-api --keep 3 --strict
    """
    config = get_config()
    try:
        policy = RetentionPolicy(
            keep_count=config.keep_count if keep is None else keep,
            keep_days=config.keep_days if days is None else days,
            strict=strict,
        )
    except ValueError as e:
        raise UsageError(str(e), hint="--keep and --days must be zero or greater.") from e

    as_json = format is OutputFormat.JSON

    def confirm(plan: CleanupPlan) -> bool:
        return typer.confirm(
            f"Remove {len(plan.labels_to_remove)} labels from {secret}?",
            err=as_json,
        )

    executor = CleanupExecutor(secret_store(config), max_workers=config.max_workers)
    result = executor.run(
        secret,
        policy,
        dry_run=dry_run,
        force=force,
        confirm=confirm,
        on_plan=None if as_json else print_plan,
    )

    if as_json:
        echo_json(result.to_dict())
    else:
        print_cleanup_result(result)

    if result.failed:
        raise PartialFailureError(len(result.failed), len(result.removals))
