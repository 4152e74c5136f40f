"""Merge-and-write updates for JSON secrets.

A rotation changes one or two keys of a secret that holds many. The
updater reads the current object, overlays the new keys, writes a single
new version and then tags the version that became AWSPREVIOUS with a
timestamp label so it stays reachable for rollback.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from secret_rotation.retention.base import (
    MAX_LABELS_PER_SECRET,
    format_timestamp_label,
    summarize_labels,
)
from secret_rotation.secrets.base import SecretError
from secret_rotation.secrets.cloud import AWSSecretsManagerStore

logger = logging.getLogger(__name__)


@dataclass
class UpdateResult:
    """Outcome of one secret update.

    Attributes:
        secret_id: Secret that was written.
        version_id: New AWSCURRENT version.
        updated_keys: Keys set by this update.
        preserved_keys: Keys carried over unchanged.
        previous_version_id: Version that became AWSPREVIOUS, if any.
        timestamp_label: Label attached to the previous version, or None
            when labeling was skipped or failed.
    """

    secret_id: str
    version_id: str
    updated_keys: list[str] = field(default_factory=list)
    preserved_keys: list[str] = field(default_factory=list)
    previous_version_id: str | None = None
    timestamp_label: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "secret_id": self.secret_id,
            "version_id": self.version_id,
            "updated_keys": self.updated_keys,
            "preserved_keys": self.preserved_keys,
            "previous_version_id": self.previous_version_id,
            "timestamp_label": self.timestamp_label,
        }


class SecretUpdater:
    """Update keys inside a JSON secret without losing the others."""

    def __init__(
        self,
        store: AWSSecretsManagerStore,
        *,
        clock: Callable[[], datetime] = datetime.now,
        label_limit: int = MAX_LABELS_PER_SECRET,
    ) -> None:
        self._store = store
        self._clock = clock
        self._label_limit = label_limit

    @property
    def store(self) -> AWSSecretsManagerStore:
        return self._store

    def update(self, secret_id: str, updates: Mapping[str, str]) -> UpdateResult:
        """Overlay keys onto a secret and write a new version.

        Args:
            secret_id: Secret name or ARN.
            updates: Keys to set.

        Returns:
            UpdateResult describing the write.

        Raises:
            SecretError: If reading or writing the secret fails.
        """
        current = self._store.get_secret_values(secret_id)
        logger.info("Current secret keys: %s", sorted(current))

        preserved = [key for key in current if key not in updates]
        merged = {**current, **updates}
        version_id = self._store.put_secret_values(secret_id, merged)
        logger.info("Wrote %s to %s as version %s", sorted(updates), secret_id, version_id)

        result = UpdateResult(
            secret_id=secret_id,
            version_id=version_id,
            updated_keys=list(updates),
            preserved_keys=preserved,
        )
        self._label_previous_version(result)
        return result

    def _label_previous_version(self, result: UpdateResult) -> None:
        """Tag AWSPREVIOUS with a timestamp label. Failures only warn."""
        secret_id = result.secret_id
        try:
            previous = self._store.find_previous_version(secret_id)
            if previous is None:
                logger.info("No previous version of %s, skipping timestamp label", secret_id)
                return
            result.previous_version_id = previous

            label_map = self._store.fetch_label_map(secret_id)
            usage = summarize_labels(label_map, limit=self._label_limit)
            if usage.at_limit:
                logger.warning(
                    "%s already has %d/%d labels; run a cleanup before labeling %s",
                    secret_id,
                    usage.total_labels,
                    usage.limit,
                    previous,
                )
                return

            label = format_timestamp_label(self._clock())
            holder = next((v for v, labels in label_map.items() if label in labels), None)
            if holder is not None and holder != previous:
                # a timestamp label is never moved off the version it marks
                logger.warning(
                    "%s is already held by version %s; leaving %s without a timestamp label",
                    label,
                    holder,
                    previous,
                )
                return
            self._store.add_label(secret_id, previous, label)
            result.timestamp_label = label
        except SecretError as e:
            logger.warning("Failed to label previous version with timestamp: %s", e)
