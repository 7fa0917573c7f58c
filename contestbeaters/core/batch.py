"""Batched Firestore writes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .constants import FIRESTORE_BATCH_LIMIT

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


class BatchProcessor:
    """Handles batched Firestore operations to respect the write limit per batch."""

    def __init__(self, db: Client, limit: int = FIRESTORE_BATCH_LIMIT):
        self.db = db
        self.limit = limit
        self.batch = db.batch()
        self.count = 0
        self.total = 0

    def update(self, ref: Any, data: dict[str, Any]) -> None:
        """Adds an update operation to the batch."""
        self.batch.update(ref, data)
        self.count += 1
        self.total += 1
        if self.count >= self.limit:
            self.commit()

    def commit(self) -> None:
        """Commits the current batch."""
        if self.count > 0:
            self.batch.commit()
            self.batch = self.db.batch()
            self.count = 0
