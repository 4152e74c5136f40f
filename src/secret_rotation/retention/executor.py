"""Cleanup executor for staging-label retention.

The executor is the only part of retention that talks to the store. It
fetches a label-map snapshot, asks the planner for a plan, and applies
the plan one removal per (version, label) pair.

Removals are independent, so they run on a small thread pool. A failure
on one pair is recorded and the rest still run; the caller gets one
RemovalResult per pair instead of a single aggregate exception.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from secret_rotation.retention.base import (
    CleanupPlan,
    LabelRemoval,
    RetentionPolicy,
)
from secret_rotation.retention.planner import plan as plan_cleanup
from secret_rotation.secrets.base import VersionLabelStore

logger = logging.getLogger(__name__)


# =============================================================================
# Results
# =============================================================================


class CleanupStatus(Enum):
    """How a cleanup run ended."""

    NOTHING_TO_DO = "nothing_to_do"
    DRY_RUN = "dry_run"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    PARTIAL = "partial"


@dataclass(frozen=True)
class RemovalResult:
    """Outcome of one label removal.

    Attributes:
        removal: The (version, label) pair.
        success: Whether the store accepted the removal.
        skipped: True when the call was never issued (cancelled).
        error: Error message on failure.
    """

    removal: LabelRemoval
    success: bool
    skipped: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.removal.to_dict(),
            "success": self.success,
            "skipped": self.skipped,
            "error": self.error,
        }


@dataclass
class CleanupResult:
    """Result of a cleanup run.

    Attributes:
        secret_id: Secret that was cleaned.
        plan: Plan computed for the run.
        status: How the run ended.
        removals: Per-pair results (empty unless removals were issued).
        final_label_map: Label map re-fetched after execution.
        start_time: When the run started.
        end_time: When the run finished.
    """

    secret_id: str
    plan: CleanupPlan
    status: CleanupStatus
    removals: list[RemovalResult] = field(default_factory=list)
    final_label_map: dict[str, list[str]] | None = None
    start_time: datetime = field(default_factory=datetime.now)
    end_time: datetime | None = None

    @property
    def succeeded(self) -> list[RemovalResult]:
        return [r for r in self.removals if r.success]

    @property
    def failed(self) -> list[RemovalResult]:
        return [r for r in self.removals if not r.success and not r.skipped]

    @property
    def skipped(self) -> list[RemovalResult]:
        return [r for r in self.removals if r.skipped]

    @property
    def executed(self) -> bool:
        """True when at least one removal call was issued."""
        return any(not r.skipped for r in self.removals)

    @property
    def duration_seconds(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "secret_id": self.secret_id,
            "status": self.status.value,
            "plan": self.plan.to_dict(),
            "removals": [r.to_dict() for r in self.removals],
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "skipped": len(self.skipped),
            "final_label_map": self.final_label_map,
            "duration_seconds": self.duration_seconds,
        }


# =============================================================================
# Executor
# =============================================================================


class CleanupExecutor:
    """Apply retention plans to a VersionLabelStore.

    Example:
        >>> executor = CleanupExecutor(AWSSecretsManagerStore())
        >>> result = executor.run(
        ...     "dev/web3-auth/auth-service-api",
        ...     RetentionPolicy(keep_count=5),
        ...     dry_run=True,
        ... )
        >>> result.status
        <CleanupStatus.DRY_RUN: 'dry_run'>
    """

    def __init__(self, store: VersionLabelStore, *, max_workers: int = 4) -> None:
        """Initialize the executor.

        Args:
            store: Store to read snapshots from and issue removals against.
            max_workers: Concurrent removal calls.
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._store = store
        self._max_workers = max_workers

    def run(
        self,
        secret_id: str,
        policy: RetentionPolicy,
        *,
        now: datetime | None = None,
        dry_run: bool = False,
        force: bool = False,
        confirm: Callable[[CleanupPlan], bool] | None = None,
        on_plan: Callable[[CleanupPlan], None] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> CleanupResult:
        """Plan and, unless told otherwise, execute a cleanup.

        Args:
            secret_id: Secret to clean.
            policy: Retention policy.
            now: Reference time for the days filter (defaults to the clock).
            dry_run: Compute the plan without issuing removals.
            force: Skip the confirmation step.
            confirm: Asked before executing; returning False cancels.
            on_plan: Called with the plan as soon as it is computed.
            cancel_event: Set to stop issuing further removals.

        Returns:
            CleanupResult for the run.

        Raises:
            SecretError: If the label map cannot be fetched.
        """
        start_time = datetime.now()
        label_map = self._store.fetch_label_map(secret_id)
        plan = plan_cleanup(label_map, policy, now=now or start_time)
        logger.info(
            "Cleanup plan for %s: %d labels to remove, %d versions unlabeled",
            secret_id,
            len(plan.labels_to_remove),
            len(plan.versions_becoming_unlabeled),
        )
        if on_plan is not None:
            on_plan(plan)

        result = CleanupResult(secret_id, plan, CleanupStatus.NOTHING_TO_DO, start_time=start_time)

        if not plan.has_removals:
            logger.info("No cleanup needed for %s", secret_id)
        elif dry_run:
            result.status = CleanupStatus.DRY_RUN
        elif not force and confirm is not None and not confirm(plan):
            logger.info("Cleanup of %s cancelled", secret_id)
            result.status = CleanupStatus.CANCELLED
        else:
            result.removals = self.execute(secret_id, plan, cancel_event=cancel_event)
            if result.failed:
                result.status = CleanupStatus.PARTIAL
            elif result.skipped:
                result.status = CleanupStatus.CANCELLED
            else:
                result.status = CleanupStatus.COMPLETED
            result.final_label_map = self._store.fetch_label_map(secret_id)

        result.end_time = datetime.now()
        return result

    def execute(
        self,
        secret_id: str,
        plan: CleanupPlan,
        *,
        cancel_event: threading.Event | None = None,
    ) -> list[RemovalResult]:
        """Issue every removal in a plan.

        Args:
            secret_id: Secret the plan was computed for.
            plan: Plan to apply.
            cancel_event: Set to stop issuing further removals.

        Returns:
            One RemovalResult per removal, in plan order.
        """
        if not plan.labels_to_remove:
            return []

        workers = min(self._max_workers, len(plan.labels_to_remove))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="label-cleanup") as pool:
            futures = [
                pool.submit(self._remove, secret_id, removal, cancel_event)
                for removal in plan.labels_to_remove
            ]
            results = [future.result() for future in futures]

        failed = sum(1 for r in results if not r.success and not r.skipped)
        if failed:
            logger.warning("%d of %d label removals failed for %s", failed, len(results), secret_id)
        return results

    def _remove(
        self,
        secret_id: str,
        removal: LabelRemoval,
        cancel_event: threading.Event | None,
    ) -> RemovalResult:
        if cancel_event is not None and cancel_event.is_set():
            return RemovalResult(removal, success=False, skipped=True)
        try:
            self._store.remove_label(secret_id, removal.version_id, removal.label)
        except Exception as e:
            logger.error(
                "Failed to remove label %s from version %s: %s",
                removal.label,
                removal.version_id,
                e,
            )
            return RemovalResult(removal, success=False, error=str(e))
        return RemovalResult(removal, success=True)
