"""Snapshot writer - persists one storage usage row per studio.

The row is a full recomputation, never a delta. Concurrent runs for the same
studio need no locking: whichever commits last wins, and both wrote ground
truth.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from domain.storage_usage.models import StorageTotals
from models.storage_usage import StudioStorageUsage
from .exceptions import SnapshotPersistError

logger = logging.getLogger(__name__)


class SnapshotWriter:
    """Idempotent upsert of StudioStorageUsage.

    Args:
        db: Database session; the writer commits or rolls back the whole row
        now: Clock, injectable for tests
    """

    def __init__(self, db: Session, now: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.now = now or (lambda: datetime.now(timezone.utc))

    def upsert(self, studio_id: UUID, totals: StorageTotals, quota_limit_bytes: int) -> StudioStorageUsage:
        """Create or overwrite the studio's snapshot in one transaction.

        quota_limit_bytes is applied when the row is created; an existing row
        keeps its quota.

        Raises:
            SnapshotPersistError: If the row cannot be written (nothing is committed)
        """
        try:
            snapshot = self._write(studio_id, totals, quota_limit_bytes)
        except IntegrityError:
            # A concurrent first run created the row between our read and insert
            self.db.rollback()
            logger.info(
                "Snapshot row created concurrently, retrying as update",
                extra={"studio_id": studio_id}
            )
            try:
                snapshot = self._write(studio_id, totals, quota_limit_bytes)
            except SQLAlchemyError as e:
                self._fail(studio_id, e)
        except SQLAlchemyError as e:
            self._fail(studio_id, e)

        logger.info(
            "Storage snapshot written",
            extra={"studio_id": studio_id, "total_bytes": snapshot.total_storage_bytes}
        )
        return snapshot

    def _write(self, studio_id: UUID, totals: StorageTotals, quota_limit_bytes: int) -> StudioStorageUsage:
        snapshot = (
            self.db.query(StudioStorageUsage)
            .filter(StudioStorageUsage.studio_id == studio_id)
            .first()
        )
        if snapshot is None:
            snapshot = StudioStorageUsage(
                studio_id=studio_id,
                quota_limit_bytes=quota_limit_bytes,
            )
            self.db.add(snapshot)

        now = self.now()
        snapshot.total_storage_bytes = totals.total_bytes
        snapshot.per_kind_bytes = dict(sorted(totals.per_kind_bytes.items()))
        snapshot.sections_json = [section.to_dict() for section in totals.sections]
        snapshot.last_calculated_at = now
        snapshot.updated_at = now

        self.db.commit()
        self.db.refresh(snapshot)
        return snapshot

    def _fail(self, studio_id: UUID, error: Exception) -> None:
        self.db.rollback()
        logger.error(
            "Storage snapshot write failed, rolled back",
            extra={"studio_id": studio_id, "error": str(error)},
            exc_info=True
        )
        raise SnapshotPersistError(f"Failed to persist storage snapshot: {error}") from error
