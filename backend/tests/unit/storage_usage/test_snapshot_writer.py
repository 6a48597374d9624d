"""Unit tests for SnapshotWriter (idempotent snapshot upsert)"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from domain.storage_usage.models import (
    ByteCount,
    SectionBreakdown,
    StorageResourceKind,
    StorageTotals,
)
from models.storage_usage import StudioStorageUsage
from storage_usage.exceptions import SnapshotPersistError
from storage_usage.snapshot import SnapshotWriter

GIB = 1024 ** 3
FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_totals(category_bytes=200, post_bytes=50):
    section = SectionBreakdown(section_id=uuid4(), section_name="Weddings")
    section.add_category(category_bytes)
    counts = [
        ByteCount(kind=StorageResourceKind.CATEGORY_MEDIA, bytes=category_bytes, count=1),
        ByteCount(kind=StorageResourceKind.POST_MEDIA, bytes=post_bytes, count=2),
    ]
    return StorageTotals.from_counts(counts, [section])


def snapshot_rows(db, studio):
    return db.query(StudioStorageUsage).filter(StudioStorageUsage.studio_id == studio.id).all()


class TestStorageTotals:

    def test_every_kind_is_present(self):
        totals = make_totals()

        assert set(totals.per_kind_bytes) == {kind.value for kind in StorageResourceKind}
        assert totals.per_kind_bytes["CONTACT_AVATAR"] == 0

    def test_total_is_sum_of_kinds(self):
        totals = make_totals(category_bytes=300, post_bytes=25)

        assert totals.total_bytes == 325
        assert totals.total_bytes == sum(totals.per_kind_bytes.values())


class TestSnapshotWriter:

    def test_creates_row_with_quota(self, db_session, test_studio):
        writer = SnapshotWriter(db_session, now=lambda: FIXED_NOW)

        snapshot = writer.upsert(test_studio.id, make_totals(), 10 * GIB)

        assert snapshot.total_storage_bytes == 250
        assert snapshot.quota_limit_bytes == 10 * GIB
        assert snapshot.per_kind_bytes["CATEGORY_MEDIA"] == 200
        assert snapshot.sections_json[0]["subtotal"] == 200
        assert snapshot.last_calculated_at.replace(tzinfo=None) == FIXED_NOW.replace(tzinfo=None)

    def test_overwrites_existing_row(self, db_session, test_studio):
        writer = SnapshotWriter(db_session)

        writer.upsert(test_studio.id, make_totals(category_bytes=200), 10 * GIB)
        snapshot = writer.upsert(test_studio.id, make_totals(category_bytes=10), 10 * GIB)

        assert snapshot.total_storage_bytes == 60
        assert len(snapshot_rows(db_session, test_studio)) == 1

    def test_existing_row_keeps_its_quota(self, db_session, test_studio):
        writer = SnapshotWriter(db_session)

        writer.upsert(test_studio.id, make_totals(), 10 * GIB)
        snapshot = writer.upsert(test_studio.id, make_totals(), 50 * GIB)

        assert snapshot.quota_limit_bytes == 10 * GIB

    def test_same_totals_twice_is_idempotent(self, db_session, test_studio):
        writer = SnapshotWriter(db_session)
        totals = make_totals()

        first = writer.upsert(test_studio.id, totals, GIB).to_dict()
        second = writer.upsert(test_studio.id, totals, GIB).to_dict()

        first.pop("last_calculated_at")
        second.pop("last_calculated_at")
        assert first == second

    def test_failed_commit_rolls_back_and_raises(self, db_session, test_studio, monkeypatch):
        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("disk full"))

        monkeypatch.setattr(db_session, "commit", failing_commit)

        with pytest.raises(SnapshotPersistError):
            SnapshotWriter(db_session).upsert(test_studio.id, make_totals(), GIB)

        monkeypatch.undo()
        assert snapshot_rows(db_session, test_studio) == []

    def test_concurrent_first_run_is_retried_as_update(self, db_session, test_studio, monkeypatch):
        real_commit = db_session.commit
        attempts = []

        def commit_once_conflicting():
            attempts.append(1)
            if len(attempts) == 1:
                raise IntegrityError("INSERT", {}, Exception("duplicate key value"))
            real_commit()

        monkeypatch.setattr(db_session, "commit", commit_once_conflicting)

        snapshot = SnapshotWriter(db_session).upsert(test_studio.id, make_totals(), GIB)

        assert snapshot.total_storage_bytes == 250
        assert len(attempts) == 2
        assert len(snapshot_rows(db_session, test_studio)) == 1

    def test_snapshot_deleted_with_studio(self, db_session, test_studio):
        SnapshotWriter(db_session).upsert(test_studio.id, make_totals(), GIB)

        db_session.delete(test_studio)
        db_session.commit()

        assert db_session.query(StudioStorageUsage).count() == 0
