"""Resource byte collectors - one per storage resource kind.

Each kind declares its ByteSource in BYTE_SOURCES; ResourceByteCollector has
a single dispatch point on that declaration. Adding a kind means adding an
entry to the table, not a new branch.

- Tracked kinds are summed with one aggregate query, no blob store calls.
- Live kinds with a shared folder are crawled with BlobTreeCrawler.
- Live kinds with one file per record are sized file by file under a bounded
  semaphore.

Blob store failures cost the affected file or folder its contribution (0) and
add a warning. A relational store failure raises CatalogReadError.
"""

import asyncio
import logging
import time
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.storage_usage.crawler import BlobTreeCrawler
from domain.storage_usage.models import (
    ByteCount,
    ByteSource,
    Live,
    StorageResourceKind,
    Tracked,
)
from domain.storage_usage.ports.blob_store_port import BlobStorePort
from models.catalog import CategoryMedia, ItemMedia
from models.location import LocationMedia
from models.offer import Offer, OfferMedia
from models.package import Package
from models.portfolio import PortfolioMedia
from models.post import PostMedia
from observability.metrics import storage_blob_failures_total
from .exceptions import CatalogReadError

logger = logging.getLogger(__name__)

AVATAR_FOLDER = "studios/{studio_slug}/contacts/avatars"

BYTE_SOURCES: Dict[StorageResourceKind, ByteSource] = {
    StorageResourceKind.CATEGORY_MEDIA: Tracked(
        CategoryMedia, "storage_bytes", owner_column="category_id", path_column="storage_path"
    ),
    StorageResourceKind.ITEM_MEDIA: Tracked(
        ItemMedia, "storage_bytes", owner_column="item_id", path_column="storage_path"
    ),
    StorageResourceKind.POST_MEDIA: Tracked(PostMedia, "storage_bytes", path_column="storage_path"),
    StorageResourceKind.PORTFOLIO_MEDIA: Tracked(
        PortfolioMedia, "storage_bytes", path_column="storage_path"
    ),
    StorageResourceKind.PACKAGE_COVER: Tracked(
        Package, "cover_storage_bytes", path_column="cover_url"
    ),
    StorageResourceKind.OFFER_MEDIA: Tracked(OfferMedia, "storage_bytes", path_column="storage_path"),
    StorageResourceKind.OFFER_COVER: Live(model=Offer, reference_column="cover_url"),
    StorageResourceKind.CONTACT_AVATAR: Live(path=AVATAR_FOLDER),
    StorageResourceKind.LOCATION_MEDIA: Tracked(
        LocationMedia, "storage_bytes", path_column="storage_path"
    ),
}


class ResourceByteCollector:
    """Collects bytes and resource count of one kind for one studio.

    Args:
        kind: Resource kind collected
        source: Its ByteSource declaration
        db: Session used for the relational reads
        blob_store: Shared blob store client
        crawler: Crawler bound to the same blob store
        size_lookup_concurrency: Max concurrent per-file size lookups
        tracked_null_fallback: Size tracked records with a null byte count
                               live instead of counting them as 0
    """

    def __init__(
        self,
        kind: StorageResourceKind,
        source: ByteSource,
        db: Session,
        blob_store: BlobStorePort,
        crawler: BlobTreeCrawler,
        size_lookup_concurrency: int = 8,
        tracked_null_fallback: bool = False,
    ):
        self.kind = kind
        self.source = source
        self.db = db
        self.blob_store = blob_store
        self.crawler = crawler
        self.size_lookup_concurrency = size_lookup_concurrency
        self.tracked_null_fallback = tracked_null_fallback

    async def collect(self, studio_id: UUID, studio_slug: str) -> ByteCount:
        """Collect this kind's usage.

        Raises:
            CatalogReadError: If the relational store cannot be read
        """
        start = time.time()
        logger.debug(
            f"Collector {self.kind.value} started",
            extra={"studio_id": studio_id, "kind": self.kind.value}
        )

        try:
            if isinstance(self.source, Tracked):
                result = await self._collect_tracked(self.source, studio_id)
            elif isinstance(self.source, Live) and self.source.is_shared_folder:
                result = await self._collect_folder(self.source, studio_id, studio_slug)
            elif isinstance(self.source, Live):
                result = await self._collect_files(self.source, studio_id)
            else:
                raise TypeError(f"Unsupported byte source for {self.kind.value}: {self.source!r}")
        except SQLAlchemyError as e:
            logger.error(
                f"Collector {self.kind.value} could not read the catalog",
                extra={"studio_id": studio_id, "kind": self.kind.value, "error": str(e)}
            )
            raise CatalogReadError(f"Failed to read {self.kind.value} records: {e}") from e

        logger.info(
            f"Collector {self.kind.value} finished",
            extra={
                "studio_id": studio_id,
                "kind": self.kind.value,
                "total_bytes": result.bytes,
                "file_count": result.count,
                "duration_ms": round((time.time() - start) * 1000, 2),
            }
        )
        return result

    async def _collect_tracked(self, source: Tracked, studio_id: UUID) -> ByteCount:
        model = source.model
        bytes_column = getattr(model, source.bytes_column)
        present = bytes_column.isnot(None)
        if source.path_column:
            present = or_(present, getattr(model, source.path_column).isnot(None))

        result = ByteCount(kind=self.kind)
        if source.owner_column:
            owner_column = getattr(model, source.owner_column)
            rows = (
                self.db.query(owner_column, func.coalesce(func.sum(bytes_column), 0), func.count())
                .filter(model.studio_id == studio_id, present)
                .group_by(owner_column)
                .all()
            )
            for owner_id, size, count in rows:
                result.by_owner[owner_id] = int(size)
                result.bytes += int(size)
                result.count += int(count)
        else:
            size, count = (
                self.db.query(func.coalesce(func.sum(bytes_column), 0), func.count())
                .filter(model.studio_id == studio_id, present)
                .one()
            )
            result.bytes = int(size)
            result.count = int(count)

        if self.tracked_null_fallback and source.path_column:
            await self._size_untracked(source, studio_id, result)

        return result

    async def _size_untracked(self, source: Tracked, studio_id: UUID, result: ByteCount) -> None:
        """Add live sizes for records whose tracked byte count is null."""
        model = source.model
        columns = [getattr(model, source.path_column)]
        if source.owner_column:
            columns.append(getattr(model, source.owner_column))

        rows = (
            self.db.query(*columns)
            .filter(
                model.studio_id == studio_id,
                getattr(model, source.bytes_column).is_(None),
                getattr(model, source.path_column).isnot(None),
            )
            .all()
        )
        if not rows:
            return

        references = [row[0] for row in rows]
        sizes, warnings = await self._size_references(references)
        result.warnings.extend(warnings)
        for row, size in zip(rows, sizes):
            result.bytes += size
            if source.owner_column:
                owner_id = row[1]
                result.by_owner[owner_id] = result.by_owner.get(owner_id, 0) + size

    async def _collect_folder(self, source: Live, studio_id: UUID, studio_slug: str) -> ByteCount:
        folder = source.path.format(studio_id=studio_id, studio_slug=studio_slug)
        usage = await self.crawler.crawl(folder)
        return ByteCount(
            kind=self.kind,
            bytes=usage.total_bytes,
            count=usage.file_count,
            warnings=list(usage.warnings),
        )

    async def _collect_files(self, source: Live, studio_id: UUID) -> ByteCount:
        model = source.model
        reference_column = getattr(model, source.reference_column)
        references = [
            row[0]
            for row in self.db.query(reference_column)
            .filter(model.studio_id == studio_id, reference_column.isnot(None))
            .all()
        ]

        sizes, warnings = await self._size_references(references)
        return ByteCount(
            kind=self.kind,
            bytes=sum(sizes),
            count=len(references),
            warnings=warnings,
        )

    async def _size_references(self, references: List[str]) -> Tuple[List[int], List[str]]:
        """Size each referenced file with bounded concurrency.

        Returns sizes aligned with references (0 for failures) and warnings.
        """
        semaphore = asyncio.Semaphore(self.size_lookup_concurrency)
        outcomes = await asyncio.gather(
            *(self._size_one(reference, semaphore) for reference in references)
        )
        sizes = [size for size, _ in outcomes]
        warnings = [warning for _, warning in outcomes if warning]
        return sizes, warnings

    async def _size_one(self, reference: str, semaphore: asyncio.Semaphore) -> Tuple[int, Optional[str]]:
        path = self.blob_store.resolve_path(reference)
        if not path:
            logger.warning(
                "Reference does not point into the blob store, counting as 0",
                extra={"kind": self.kind.value, "path": reference}
            )
            return 0, f"{self.kind.value}: unresolvable reference '{reference}'"

        async with semaphore:
            try:
                return await self.blob_store.get_size(path), None
            except Exception as e:
                storage_blob_failures_total.labels(operation="get_size").inc()
                logger.warning(
                    "Blob size lookup failed, counting file as 0",
                    extra={"kind": self.kind.value, "path": path, "error": str(e)}
                )
                return 0, f"{self.kind.value}: size lookup failed for '{path}': {e}"


def build_collectors(
    db: Session,
    blob_store: BlobStorePort,
    crawler: BlobTreeCrawler,
    size_lookup_concurrency: int = 8,
    tracked_null_fallback: bool = False,
    byte_sources: Optional[Dict[StorageResourceKind, ByteSource]] = None,
) -> List[ResourceByteCollector]:
    """Create one collector per declared resource kind."""
    sources = byte_sources if byte_sources is not None else BYTE_SOURCES
    return [
        ResourceByteCollector(
            kind=kind,
            source=source,
            db=db,
            blob_store=blob_store,
            crawler=crawler,
            size_lookup_concurrency=size_lookup_concurrency,
            tracked_null_fallback=tracked_null_fallback,
        )
        for kind, source in sources.items()
    ]
