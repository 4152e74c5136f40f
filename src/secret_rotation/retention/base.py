"""Base types for staging-label retention.

This module defines the vocabulary shared by the planner and the executor:
label classification, timestamp-label parsing, the retention policy and
the cleanup plan produced for one planning call.

Label kinds:
    - Reserved: AWSCURRENT / AWSPREVIOUS, owned by the secret store
    - Timestamp: ``YYYYMMDD_HHMMSS`` in local time, written at rotation time
    - Foreign: anything else, never touched
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

# =============================================================================
# Constants
# =============================================================================

CURRENT_LABEL = "AWSCURRENT"
PREVIOUS_LABEL = "AWSPREVIOUS"
RESERVED_LABELS = frozenset({CURRENT_LABEL, PREVIOUS_LABEL})

MAX_LABELS_PER_SECRET = 20
LABEL_WARNING_THRESHOLD = 18

DEFAULT_KEEP_COUNT = 10
DEFAULT_KEEP_DAYS = 7

TIMESTAMP_LABEL_FORMAT = "%Y%m%d_%H%M%S"
_TIMESTAMP_LABEL_RE = re.compile(r"^(\d{8})_(\d{6})$")

LabelMap = Mapping[str, Sequence[str]]


# =============================================================================
# Label Classification
# =============================================================================


class LabelKind(Enum):
    """Kind of a staging label."""

    RESERVED = "reserved"
    TIMESTAMP = "timestamp"
    FOREIGN = "foreign"


def parse_timestamp_label(label: str) -> datetime | None:
    """Parse a ``YYYYMMDD_HHMMSS`` label into a naive local datetime.

    Labels that match the pattern but do not name a real moment
    (``20251399_000000``) are rejected like any other non-matching label.

    Args:
        label: Staging label.

    Returns:
        The encoded moment, or None if the label is not a timestamp label.
    """
    if not _TIMESTAMP_LABEL_RE.match(label):
        return None
    try:
        return datetime.strptime(label, TIMESTAMP_LABEL_FORMAT)
    except ValueError:
        return None


def format_timestamp_label(moment: datetime) -> str:
    """Format a moment as a timestamp label (one-second resolution)."""
    return moment.strftime(TIMESTAMP_LABEL_FORMAT)


def is_timestamp_label(label: str) -> bool:
    """Check whether a label is a parseable timestamp label."""
    return parse_timestamp_label(label) is not None


def classify_label(label: str) -> LabelKind:
    """Classify a label as reserved, timestamp or foreign."""
    if label in RESERVED_LABELS:
        return LabelKind.RESERVED
    if is_timestamp_label(label):
        return LabelKind.TIMESTAMP
    return LabelKind.FOREIGN


def has_reserved_label(labels: Sequence[str]) -> bool:
    """Check whether any label in the sequence is reserved."""
    return any(label in RESERVED_LABELS for label in labels)


# =============================================================================
# Policy
# =============================================================================


@dataclass(frozen=True)
class RetentionPolicy:
    """Retention policy for timestamp labels.

    Attributes:
        keep_count: Number of most recent timestamp labels always kept.
        keep_days: Labels younger than this many days are kept even beyond
            keep_count. 0 disables the days filter.
        strict: Ignore keep_days and keep exactly keep_count labels.

    Raises:
        ValueError: If keep_count or keep_days is negative.
    """

    keep_count: int = DEFAULT_KEEP_COUNT
    keep_days: int = DEFAULT_KEEP_DAYS
    strict: bool = False

    def __post_init__(self) -> None:
        if self.keep_count < 0:
            raise ValueError(f"keep_count must be non-negative, got {self.keep_count}")
        if self.keep_days < 0:
            raise ValueError(f"keep_days must be non-negative, got {self.keep_days}")

    @property
    def uses_days_filter(self) -> bool:
        """Whether the days filter takes part in planning."""
        return not self.strict and self.keep_days > 0

    @property
    def description(self) -> str:
        """Human-readable description."""
        text = f"Keep {self.keep_count} most recent timestamp labels"
        if self.uses_days_filter:
            text += f" and any label newer than {self.keep_days} days"
        elif self.strict:
            text += " (strict)"
        return text

    def to_dict(self) -> dict[str, Any]:
        """Serialize policy to dictionary."""
        return {
            "keep_count": self.keep_count,
            "keep_days": self.keep_days,
            "strict": self.strict,
        }


# =============================================================================
# Plan
# =============================================================================


@dataclass(frozen=True)
class TimestampLabel:
    """A timestamp label attached to one version."""

    version_id: str
    label: str
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "version_id": self.version_id,
            "label": self.label,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class LabelRemoval:
    """One (version, label) pair to unlabel."""

    version_id: str
    label: str

    def to_dict(self) -> dict[str, str]:
        return {"version_id": self.version_id, "label": self.label}


@dataclass(frozen=True)
class CleanupPlan:
    """Result of one planning call.

    Pure data: safe to log or preview before anything is executed.

    Attributes:
        labels_to_remove: Label removals, newest first.
        versions_becoming_unlabeled: Versions left with no labels once the
            plan is applied (including versions that have none already).
        retained: Timestamp labels kept by keep_count.
        exempted: Timestamp labels kept by the days filter.
        policy: Policy the plan was computed with.
        now: Reference time used for the days filter.
    """

    labels_to_remove: tuple[LabelRemoval, ...] = ()
    versions_becoming_unlabeled: tuple[str, ...] = ()
    retained: tuple[TimestampLabel, ...] = ()
    exempted: tuple[TimestampLabel, ...] = ()
    policy: RetentionPolicy = field(default_factory=RetentionPolicy)
    now: datetime | None = None

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to remove and nothing to reclaim."""
        return not self.labels_to_remove and not self.versions_becoming_unlabeled

    @property
    def has_removals(self) -> bool:
        return bool(self.labels_to_remove)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "policy": self.policy.to_dict(),
            "now": self.now.isoformat() if self.now else None,
            "labels_to_remove": [r.to_dict() for r in self.labels_to_remove],
            "versions_becoming_unlabeled": list(self.versions_becoming_unlabeled),
            "retained": [t.to_dict() for t in self.retained],
            "exempted": [t.to_dict() for t in self.exempted],
        }


# =============================================================================
# Label Usage
# =============================================================================


@dataclass(frozen=True)
class LabelUsage:
    """Label accounting for one secret against the store's label cap."""

    version_count: int
    total_labels: int
    timestamp_labels: int
    limit: int = MAX_LABELS_PER_SECRET
    warning_threshold: int = LABEL_WARNING_THRESHOLD

    @property
    def available_slots(self) -> int:
        return self.limit - self.total_labels

    @property
    def near_limit(self) -> bool:
        return self.total_labels >= self.warning_threshold

    @property
    def at_limit(self) -> bool:
        return self.total_labels >= self.limit

    def to_dict(self) -> dict[str, Any]:
        return {
            "version_count": self.version_count,
            "total_labels": self.total_labels,
            "timestamp_labels": self.timestamp_labels,
            "limit": self.limit,
            "available_slots": self.available_slots,
            "near_limit": self.near_limit,
        }


def summarize_labels(
    label_map: LabelMap,
    *,
    limit: int = MAX_LABELS_PER_SECRET,
    warning_threshold: int = LABEL_WARNING_THRESHOLD,
) -> LabelUsage:
    """Count labels in a label map.

    Args:
        label_map: Version id to labels.
        limit: Label cap of the store.
        warning_threshold: Count at which usage is reported as near the cap.

    Returns:
        LabelUsage for the map.
    """
    total = 0
    timestamps = 0
    for labels in label_map.values():
        total += len(labels)
        timestamps += sum(1 for label in labels if is_timestamp_label(label))
    return LabelUsage(
        version_count=len(label_map),
        total_labels=total,
        timestamp_labels=timestamps,
        limit=limit,
        warning_threshold=warning_threshold,
    )


def version_status(labels: Sequence[str]) -> str:
    """Describe a version by its most significant label."""
    if CURRENT_LABEL in labels:
        return "CURRENT"
    if PREVIOUS_LABEL in labels:
        return "PREVIOUS"
    if any(is_timestamp_label(label) for label in labels):
        return "TIMESTAMPED"
    if labels:
        return "LABELED"
    return "UNLABELED"
