"""Storage usage service - recomputes and persists a studio's storage usage.

This is the only entry point of the storage accounting engine:

1. Resolve the studio by slug
2. Run every resource collector concurrently
3. Fold category and item bytes into the section breakdown
4. Sum per-kind bytes into the total
5. Upsert the snapshot
6. Return the report

Steps 2-4 run under a deadline. A run that times out or is cancelled never
reaches the snapshot writer, so a partial total is never persisted. The
deadline is enforced at await points (blob store calls); a database query that
is already running finishes before the timeout is noticed. Blob store
failures only lower the total and are reported as warnings.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import Settings, get_settings
from domain.storage_usage.crawler import BlobTreeCrawler
from domain.storage_usage.hierarchy import HierarchyAggregator
from domain.storage_usage.models import (
    ByteCount,
    ByteSource,
    SectionBreakdown,
    StorageResourceKind,
    StorageTotals,
)
from domain.storage_usage.ports.blob_store_port import BlobStorePort
from models.studio import Studio
from observability.metrics import (
    storage_collector_bytes,
    storage_recalculation_duration_seconds,
    storage_recalculations_total,
    storage_studio_total_bytes,
)
from observability.request_id import request_id_scope
from .catalog_reader import CatalogReader
from .collectors import build_collectors
from .exceptions import (
    CatalogReadError,
    RecalculationCancelledError,
    SnapshotPersistError,
    StorageAccountingError,
    StudioNotFoundError,
)
from .schemas import SectionBreakdownSchema, StorageUsageReport
from .snapshot import SnapshotWriter

logger = logging.getLogger(__name__)


class StorageUsageService:
    """Recomputes storage usage for one studio at a time.

    The service holds no state between runs; the blob store client is
    injected so one instance can be shared by the whole process.

    Args:
        db: Database session
        blob_store: Blob store client shared by the crawler and collectors
        settings: Application settings (defaults to get_settings())
        byte_sources: Override of the per-kind ByteSource table
        snapshot_writer: Override of the writer (defaults to SnapshotWriter(db))
    """

    def __init__(
        self,
        db: Session,
        blob_store: BlobStorePort,
        settings: Optional[Settings] = None,
        byte_sources: Optional[Dict[StorageResourceKind, ByteSource]] = None,
        snapshot_writer: Optional[SnapshotWriter] = None,
    ):
        self.db = db
        self.blob_store = blob_store
        self.settings = settings or get_settings()
        self.byte_sources = byte_sources

        self.reader = CatalogReader(db)
        self.crawler = BlobTreeCrawler(
            blob_store,
            page_size=self.settings.STORAGE_LIST_PAGE_SIZE,
            size_lookup_concurrency=self.settings.STORAGE_SIZE_LOOKUP_CONCURRENCY,
        )
        self.aggregator = HierarchyAggregator()
        self.writer = snapshot_writer or SnapshotWriter(db)

    async def recompute(
        self,
        studio_slug: str,
        timeout_seconds: Optional[float] = None,
    ) -> StorageUsageReport:
        """Recompute, persist and return the storage usage of a studio.

        Args:
            studio_slug: Slug of the studio
            timeout_seconds: Deadline for measuring; defaults to
                             STORAGE_RECALC_TIMEOUT_SECONDS (None: no deadline)

        Returns:
            StorageUsageReport: Totals as persisted, plus warnings

        Raises:
            StudioNotFoundError: Unknown slug
            CatalogReadError: Content records could not be read
            RecalculationCancelledError: Deadline exceeded; nothing persisted
            SnapshotPersistError: Snapshot write failed; nothing persisted
        """
        if timeout_seconds is None:
            timeout_seconds = self.settings.STORAGE_RECALC_TIMEOUT_SECONDS

        with request_id_scope():
            start = time.time()
            try:
                report = await self._recompute(studio_slug, timeout_seconds, start)
            except StorageAccountingError as e:
                # A failed statement leaves the transaction aborted on PostgreSQL
                self.db.rollback()
                storage_recalculations_total.labels(status=_failure_status(e)).inc()
                logger.error(
                    f"Storage recalculation failed: {e}",
                    extra={"studio_slug": studio_slug, "error": type(e).__name__}
                )
                raise
            except asyncio.CancelledError:
                self.db.rollback()
                storage_recalculations_total.labels(status="cancelled").inc()
                logger.warning(
                    "Storage recalculation cancelled, snapshot not written",
                    extra={"studio_slug": studio_slug}
                )
                raise

            storage_recalculations_total.labels(status="success").inc()
            storage_recalculation_duration_seconds.observe(report.duration_seconds)
            return report

    async def _recompute(self, studio_slug: str, timeout_seconds: Optional[float], start: float) -> StorageUsageReport:
        studio = self.reader.get_studio(studio_slug)
        logger.info(
            "Storage recalculation started",
            extra={"studio_id": studio.id, "studio_slug": studio_slug}
        )

        try:
            counts, sections, warnings = await asyncio.wait_for(
                self._measure(studio),
                timeout=timeout_seconds,
            )
        except asyncio.TimeoutError:
            raise RecalculationCancelledError(
                f"Recalculation of '{studio_slug}' exceeded {timeout_seconds}s, snapshot not written"
            )

        totals = StorageTotals.from_counts(counts, sections)
        quota = self.reader.quota_for(studio, self.settings.STORAGE_DEFAULT_QUOTA_BYTES)
        snapshot = self.writer.upsert(studio.id, totals, quota)

        storage_studio_total_bytes.labels(studio_id=str(studio.id)).set(totals.total_bytes)
        for kind, size in totals.per_kind_bytes.items():
            storage_collector_bytes.labels(studio_id=str(studio.id), kind=kind).set(size)

        duration = time.time() - start
        logger.info(
            "Storage recalculation completed",
            extra={
                "studio_id": studio.id,
                "studio_slug": studio_slug,
                "total_bytes": totals.total_bytes,
                "duration_ms": round(duration * 1000, 2),
            }
        )
        if warnings:
            logger.warning(
                f"Storage recalculation degraded with {len(warnings)} warning(s)",
                extra={"studio_id": studio.id, "studio_slug": studio_slug}
            )

        return StorageUsageReport(
            studio_id=str(studio.id),
            studio_slug=studio.slug,
            total_bytes=snapshot.total_storage_bytes,
            per_kind_bytes=dict(snapshot.per_kind_bytes),
            per_kind_counts={count.kind.value: count.count for count in counts},
            sections=[SectionBreakdownSchema(**section) for section in snapshot.sections_json],
            quota_limit_bytes=snapshot.quota_limit_bytes,
            last_calculated_at=snapshot.last_calculated_at,
            duration_seconds=round(duration, 3),
            warnings=warnings,
        )

    async def _measure(self, studio: Studio) -> Tuple[List[ByteCount], List[SectionBreakdown], List[str]]:
        """Run all collectors and build the section breakdown."""
        collectors = build_collectors(
            db=self.db,
            blob_store=self.blob_store,
            crawler=self.crawler,
            size_lookup_concurrency=self.settings.STORAGE_SIZE_LOOKUP_CONCURRENCY,
            tracked_null_fallback=self.settings.STORAGE_TRACKED_NULL_FALLBACK,
            byte_sources=self.byte_sources,
        )

        tasks = [
            asyncio.ensure_future(collector.collect(studio.id, studio.slug))
            for collector in collectors
        ]
        try:
            counts = list(await asyncio.gather(*tasks))
        except BaseException:
            # One failed collector (or cancellation) stops the others
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        warnings: List[str] = []
        for count in counts:
            warnings.extend(count.warnings)

        by_kind = {count.kind: count for count in counts}
        category_count = by_kind.get(StorageResourceKind.CATEGORY_MEDIA)
        item_count = by_kind.get(StorageResourceKind.ITEM_MEDIA)

        structure = self.reader.load_structure(studio.id)
        sections, hierarchy_warnings = self.aggregator.aggregate(
            category_bytes=category_count.by_owner if category_count else {},
            item_bytes=item_count.by_owner if item_count else {},
            structure=structure,
        )
        warnings.extend(hierarchy_warnings)
        return counts, sections, warnings


def _failure_status(error: StorageAccountingError) -> str:
    if isinstance(error, StudioNotFoundError):
        return "not_found"
    if isinstance(error, RecalculationCancelledError):
        return "cancelled"
    if isinstance(error, SnapshotPersistError):
        return "persist_error"
    if isinstance(error, CatalogReadError):
        return "catalog_error"
    return "error"


async def recalculate_all_studios(
    db: Session,
    blob_store: BlobStorePort,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    """Recalculate every studio sequentially.

    A failure for one studio is logged and counted; the remaining studios are
    still processed.

    Returns:
        Dict with studios_processed, studios_failed, failures (slug -> error)
    """
    service = StorageUsageService(db, blob_store, settings=settings)
    slugs = [slug for (slug,) in db.query(Studio.slug).order_by(Studio.slug).all()]

    processed = 0
    failures: Dict[str, str] = {}
    for slug in slugs:
        try:
            await service.recompute(slug)
            processed += 1
        except StorageAccountingError as e:
            failures[slug] = str(e)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Storage recalculation hit a database error: {e}",
                extra={"studio_slug": slug}
            )
            failures[slug] = str(e)

    logger.info(
        f"Recalculated storage for {processed} studio(s), {len(failures)} failed"
    )
    return {
        "studios_processed": processed,
        "studios_failed": len(failures),
        "failures": failures,
    }
