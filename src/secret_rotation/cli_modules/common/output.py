"""Output rendering for CLI commands.

Console output uses rich tables; JSON output is a single document on
stdout so it can be piped.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from secret_rotation.retention.base import (
    CURRENT_LABEL,
    PREVIOUS_LABEL,
    CleanupPlan,
    LabelUsage,
    parse_timestamp_label,
    version_status,
)
from secret_rotation.retention.executor import CleanupResult, CleanupStatus
from secret_rotation.rotation import RotationResult

STATUS_STYLES = {
    "CURRENT": "green",
    "PREVIOUS": "yellow",
    "TIMESTAMPED": "cyan",
    "LABELED": "white",
    "UNLABELED": "dim",
}


def _console() -> Console:
    return Console(highlight=False)


def echo_json(data: Any) -> None:
    """Write one JSON document to stdout."""
    typer.echo(json.dumps(data, indent=2, default=str))


def _newest_timestamp(labels: Sequence[str]) -> datetime | None:
    stamps = [s for s in (parse_timestamp_label(label) for label in labels) if s is not None]
    return max(stamps) if stamps else None


def sort_versions(label_map: Mapping[str, Sequence[str]]) -> list[tuple[str, list[str]]]:
    """Order versions for display: current, previous, newest timestamp first, rest."""

    def rank(item: tuple[str, Sequence[str]]) -> tuple[int, float, str]:
        version_id, labels = item
        if CURRENT_LABEL in labels:
            return (0, 0.0, version_id)
        if PREVIOUS_LABEL in labels:
            return (1, 0.0, version_id)
        newest = _newest_timestamp(labels)
        if newest is not None:
            return (2, -newest.timestamp(), version_id)
        return (3 if labels else 4, 0.0, version_id)

    return [(v, list(labels)) for v, labels in sorted(label_map.items(), key=rank)]


def print_usage(secret_id: str, usage: LabelUsage) -> None:
    console = _console()
    console.print(f"[bold]{escape(secret_id)}[/bold]")
    console.print(f"  Versions:         {usage.version_count}")
    console.print(f"  Labels:           {usage.total_labels}/{usage.limit}")
    console.print(f"  Timestamp labels: {usage.timestamp_labels}")
    console.print(f"  Available slots:  {usage.available_slots}")
    if usage.at_limit:
        console.print(
            f"[red]Label limit reached ({usage.total_labels}/{usage.limit}). "
            "Run 'versions cleanup' before the next rotation.[/red]"
        )
    elif usage.near_limit:
        console.print(
            f"[yellow]Approaching label limit ({usage.total_labels}/{usage.limit}). "
            "Consider running 'versions cleanup'.[/yellow]"
        )


def print_label_map(
    secret_id: str,
    label_map: Mapping[str, Sequence[str]],
    usage: LabelUsage,
) -> None:
    console = _console()
    if not label_map:
        console.print(f"No versions found for {escape(secret_id)}")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Version ID", style="cyan", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Labels", style="white")
    table.add_column("Timestamp")

    for version_id, labels in sort_versions(label_map):
        status = version_status(labels)
        newest = _newest_timestamp(labels)
        stamp = newest.strftime("%Y-%m-%d %H:%M:%S") if newest else ""
        table.add_row(
            escape(version_id),
            f"[{STATUS_STYLES[status]}]{status}[/{STATUS_STYLES[status]}]",
            escape(", ".join(labels)) or "-",
            stamp,
        )

    console.print(table)
    print_usage(secret_id, usage)


def print_plan(plan: CleanupPlan) -> None:
    console = _console()
    console.print(f"[bold]Cleanup plan[/bold] ({plan.policy.description})")
    if not plan.has_removals:
        console.print("[green]Nothing to remove[/green]")
        _print_unlabeled(console, plan)
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Version ID", style="cyan", no_wrap=True)
    table.add_column("Label to remove")
    for removal in plan.labels_to_remove:
        table.add_row(escape(removal.version_id), escape(removal.label))
    console.print(table)

    console.print(f"  Labels to remove:      {len(plan.labels_to_remove)}")
    console.print(f"  Timestamp labels kept: {len(plan.retained) + len(plan.exempted)}")
    if plan.exempted:
        console.print(f"  Kept by age window:    {len(plan.exempted)}")
    _print_unlabeled(console, plan)


def _print_unlabeled(console: Console, plan: CleanupPlan) -> None:
    if not plan.versions_becoming_unlabeled:
        return
    console.print(
        f"  Versions left unlabeled (eligible for deletion by AWS): "
        f"{len(plan.versions_becoming_unlabeled)}"
    )
    for version_id in plan.versions_becoming_unlabeled:
        console.print(f"    {escape(version_id)}")


def print_cleanup_result(result: CleanupResult) -> None:
    console = _console()
    if result.status is CleanupStatus.NOTHING_TO_DO:
        console.print("[green]No cleanup needed[/green]")
    elif result.status is CleanupStatus.DRY_RUN:
        console.print("[yellow]Dry run: no labels were removed[/yellow]")
    elif result.status is CleanupStatus.CANCELLED:
        console.print("Cleanup cancelled")
    else:
        console.print(f"[green]Removed {len(result.succeeded)} labels[/green]")
        for failure in result.failed:
            console.print(
                f"[red]Failed: {escape(failure.removal.label)} on "
                f"{escape(failure.removal.version_id)}: {escape(failure.error or '')}[/red]"
            )
        if result.skipped:
            console.print(f"[yellow]Skipped {len(result.skipped)} removals[/yellow]")


def print_rotation_result(result: RotationResult) -> None:
    console = _console()
    console.print("[green]Rotation complete[/green]")
    console.print(f"  Secret:          {escape(result.secret_name)}")
    console.print(f"  Keys:            {', '.join(result.secret_keys)}")
    console.print(f"  KMS key:         {result.kms_alias}")
    console.print(f"  Version:         {escape(result.version_id)}")
    if result.timestamp_label:
        console.print(f"  Previous tagged: {result.timestamp_label}")
    else:
        console.print("  Previous tagged: [yellow]no timestamp label added[/yellow]")
    for key, value in result.metadata.items():
        if isinstance(value, dict):
            continue
        console.print(f"  {key}: {escape(str(value))}")
