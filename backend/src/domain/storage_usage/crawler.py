"""Blob tree crawler - recursive size discovery in the blob store.

The crawler is the only component that walks folders in the blob store. It
pages through every listing until the store reports no further page, recurses
into sub-folders and sums file sizes. Failures are isolated per sub-path: an
unreadable folder or file counts as 0 and is reported as a warning, the rest
of the tree is still counted.
"""

import asyncio
import logging
from typing import AsyncIterator, List, Optional

from observability.metrics import storage_blob_failures_total
from .models import TreeUsage
from .ports.blob_store_port import BlobEntry, BlobStorePort

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000
DEFAULT_SIZE_LOOKUP_CONCURRENCY = 8


class BlobTreeCrawler:
    """Recursively sums file sizes under a blob store path.

    Example:
        crawler = BlobTreeCrawler(blob_store, page_size=1000)
        total = await crawler.list_tree("studios/foto-lumen/contacts/avatars")
    """

    def __init__(
        self,
        blob_store: BlobStorePort,
        page_size: int = DEFAULT_PAGE_SIZE,
        size_lookup_concurrency: int = DEFAULT_SIZE_LOOKUP_CONCURRENCY,
    ):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        if size_lookup_concurrency < 1:
            raise ValueError("size_lookup_concurrency must be at least 1")
        self.blob_store = blob_store
        self.page_size = page_size
        self.size_lookup_concurrency = size_lookup_concurrency

    async def list_tree(self, root_path: str) -> int:
        """Return the total bytes stored under root_path (0 on failure)."""
        usage = await self.crawl(root_path)
        return usage.total_bytes

    async def crawl(self, root_path: str) -> TreeUsage:
        """Crawl root_path and return bytes, file count and warnings.

        Never raises for store failures. Cancellation is propagated.
        """
        semaphore = asyncio.Semaphore(self.size_lookup_concurrency)
        return await self._crawl_path(root_path.strip("/"), semaphore)

    async def iter_entries(self, path: str) -> AsyncIterator[BlobEntry]:
        """Yield every entry directly under path, page after page.

        The continuation-token loop only ends when the store returns no next
        page token. Restarting the iterator restarts from the first page.

        Raises:
            StorageError: If a page cannot be listed
        """
        page_token: Optional[str] = None
        while True:
            listing = await self.blob_store.list_page(
                path,
                page_token=page_token,
                page_size=self.page_size,
            )
            for entry in listing.entries:
                yield entry
            if not listing.next_page_token:
                break
            page_token = listing.next_page_token

    async def _crawl_path(self, path: str, semaphore: asyncio.Semaphore) -> TreeUsage:
        usage = TreeUsage()
        directories: List[BlobEntry] = []
        files: List[BlobEntry] = []

        try:
            async for entry in self.iter_entries(path):
                if entry.is_directory:
                    directories.append(entry)
                else:
                    files.append(entry)
        except Exception as e:
            storage_blob_failures_total.labels(operation="list").inc()
            message = f"Listing failed for '{path}': {e}"
            logger.warning(
                "Blob listing failed, counting sub-path as 0",
                extra={"path": path, "error": str(e)}
            )
            return TreeUsage(warnings=[message])

        file_sizes = await asyncio.gather(
            *(self._file_size(entry, semaphore) for entry in files)
        )
        for size, warning in file_sizes:
            if warning:
                usage.warnings.append(warning)
            else:
                usage.total_bytes += size
                usage.file_count += 1

        for directory in directories:
            if directory.path == path:
                # A store echoing the listed folder back would recurse forever
                message = f"Skipped self-referencing folder entry under '{path}'"
                logger.warning(
                    "Blob listing returned the folder itself, skipping",
                    extra={"path": path}
                )
                usage.warnings.append(message)
                continue
            usage.merge(await self._crawl_path(directory.path, semaphore))

        logger.debug(
            "Crawled blob path",
            extra={
                "path": path,
                "total_bytes": usage.total_bytes,
                "file_count": usage.file_count,
            }
        )
        return usage

    async def _file_size(self, entry: BlobEntry, semaphore: asyncio.Semaphore):
        """Return (size, warning) for one file entry."""
        if entry.size_bytes is not None:
            return entry.size_bytes, None

        async with semaphore:
            try:
                size = await self.blob_store.get_size(entry.path)
            except Exception as e:
                storage_blob_failures_total.labels(operation="get_size").inc()
                logger.warning(
                    "Blob size lookup failed, counting file as 0",
                    extra={"path": entry.path, "error": str(e)}
                )
                return 0, f"Size lookup failed for '{entry.path}': {e}"
        return size, None
