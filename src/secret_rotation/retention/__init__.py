"""Staging-label retention for secret-rotation.

Secrets Manager allows at most 20 staging labels per secret. Every
rotation adds a timestamp label to the version it retires, so old
labels have to be removed to keep room for new ones.

Usage:
    >>> from datetime import datetime
    >>> from secret_rotation.retention import RetentionPolicy, plan
    >>>
    >>> cleanup = plan(label_map, RetentionPolicy(keep_count=5, keep_days=7), now=datetime.now())
    >>> for removal in cleanup.labels_to_remove:
    ...     print(removal.version_id, removal.label)
"""

from secret_rotation.retention.base import (
    # Constants
    CURRENT_LABEL,
    PREVIOUS_LABEL,
    RESERVED_LABELS,
    MAX_LABELS_PER_SECRET,
    LABEL_WARNING_THRESHOLD,
    DEFAULT_KEEP_COUNT,
    DEFAULT_KEEP_DAYS,
    # Labels
    LabelKind,
    LabelMap,
    classify_label,
    format_timestamp_label,
    is_timestamp_label,
    parse_timestamp_label,
    version_status,
    # Policy and plan
    RetentionPolicy,
    TimestampLabel,
    LabelRemoval,
    CleanupPlan,
    LabelUsage,
    summarize_labels,
)
from secret_rotation.retention.planner import collect_timestamp_labels, plan
from secret_rotation.retention.executor import (
    CleanupExecutor,
    CleanupResult,
    CleanupStatus,
    RemovalResult,
)

__all__ = [
    "CURRENT_LABEL",
    "PREVIOUS_LABEL",
    "RESERVED_LABELS",
    "MAX_LABELS_PER_SECRET",
    "LABEL_WARNING_THRESHOLD",
    "DEFAULT_KEEP_COUNT",
    "DEFAULT_KEEP_DAYS",
    "LabelKind",
    "LabelMap",
    "classify_label",
    "format_timestamp_label",
    "is_timestamp_label",
    "parse_timestamp_label",
    "version_status",
    "RetentionPolicy",
    "TimestampLabel",
    "LabelRemoval",
    "CleanupPlan",
    "LabelUsage",
    "summarize_labels",
    "collect_timestamp_labels",
    "plan",
    "CleanupExecutor",
    "CleanupResult",
    "CleanupStatus",
    "RemovalResult",
]
