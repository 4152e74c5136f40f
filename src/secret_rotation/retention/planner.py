"""Retention planner for timestamp staging labels.

The planner is a pure function over a label-map snapshot. It never reads
the clock and never talks to the store; ``now`` is passed in and the
result is a CleanupPlan that the executor applies.

Example:
    >>> from datetime import datetime
    >>> label_map = {
    ...     "v3": ["AWSCURRENT"],
    ...     "v2": ["AWSPREVIOUS", "20250709_143530"],
    ...     "v1": ["20250601_090000"],
    ... }
    >>> result = plan(label_map, RetentionPolicy(keep_count=0, strict=True), now=datetime.now())
    >>> [r.label for r in result.labels_to_remove]
    ['20250601_090000']
    >>> result.versions_becoming_unlabeled
    ('v1',)
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from secret_rotation.retention.base import (
    CleanupPlan,
    LabelMap,
    LabelRemoval,
    RetentionPolicy,
    TimestampLabel,
    has_reserved_label,
    parse_timestamp_label,
)

logger = logging.getLogger(__name__)


def collect_timestamp_labels(
    label_map: LabelMap,
) -> tuple[list[TimestampLabel], list[str]]:
    """Split a label map into cleanup candidates and unlabeled versions.

    Versions holding a reserved label are skipped entirely. Foreign and
    malformed labels are ignored.

    Args:
        label_map: Version id to labels.

    Returns:
        Tuple of (timestamp labels in map order, versions with no labels).
    """
    candidates: list[TimestampLabel] = []
    unlabeled: list[str] = []

    for version_id, labels in label_map.items():
        if has_reserved_label(labels):
            continue
        if not labels:
            unlabeled.append(version_id)
            continue
        for label in labels:
            timestamp = parse_timestamp_label(label)
            if timestamp is None:
                logger.debug("Ignoring foreign label %r on %s", label, version_id)
                continue
            candidates.append(TimestampLabel(version_id, label, timestamp))

    return candidates, unlabeled


def plan(
    label_map: LabelMap,
    policy: RetentionPolicy,
    *,
    now: datetime,
) -> CleanupPlan:
    """Compute which timestamp labels to remove under a retention policy.

    Args:
        label_map: Snapshot of version id to labels. Not modified.
        policy: Retention policy.
        now: Reference time for the days filter (naive local time).

    Returns:
        CleanupPlan for this snapshot.
    """
    candidates, unlabeled = collect_timestamp_labels(label_map)

    # sorted() is stable, so ties keep label-map order
    ordered = sorted(candidates, key=lambda t: t.timestamp, reverse=True)
    retained = ordered[: policy.keep_count]
    expired = ordered[policy.keep_count :]

    exempted: list[TimestampLabel] = []
    if policy.uses_days_filter:
        cutoff = now - timedelta(days=policy.keep_days)
        remaining = []
        for item in expired:
            if item.timestamp > cutoff:
                exempted.append(item)
            else:
                remaining.append(item)
        expired = remaining

    removals = [LabelRemoval(item.version_id, item.label) for item in expired]

    removed_by_version: dict[str, set[str]] = {}
    for removal in removals:
        removed_by_version.setdefault(removal.version_id, set()).add(removal.label)

    becoming_unlabeled = list(unlabeled)
    for version_id, removed in removed_by_version.items():
        left = set(label_map[version_id]) - removed
        if not left:
            becoming_unlabeled.append(version_id)

    logger.debug(
        "Planned %d removals (%d retained, %d exempted by days filter)",
        len(removals),
        len(retained),
        len(exempted),
    )

    return CleanupPlan(
        labels_to_remove=tuple(removals),
        versions_becoming_unlabeled=tuple(becoming_unlabeled),
        retained=tuple(retained),
        exempted=tuple(exempted),
        policy=policy,
        now=now,
    )
