"""In-memory blob store for storage accounting tests.

Keys are flat object paths ("studios/foto-lumen/contacts/avatars/a.jpg");
folders are derived from key prefixes like S3 common prefixes. Listings are
paged with a numeric continuation token so multi-page crawls are exercised.

Usage:
    store = FakeBlobStore({"studios/a/avatars/1.jpg": 1024})
    store.fail_listing("studios/a/avatars/broken")
    store.fail_size("studios/a/offers/cover.jpg")
"""

import asyncio
from typing import Dict, List, Optional

from domain.storage_usage.ports.blob_store_port import (
    BlobEntry,
    BlobListing,
    BlobStorePort,
    StorageError,
)

KB = 1024
MB = 1024 * 1024


class FakeBlobStore(BlobStorePort):
    """BlobStorePort backed by a dict of path -> size.

    Args:
        files: Initial objects
        inline_sizes: Return sizes in listings; when False every file needs
                      a get_size call
        list_delay: Seconds each list_page call sleeps (cancellation tests)
        size_delay: Seconds each get_size call sleeps (concurrency tests)
    """

    def __init__(
        self,
        files: Optional[Dict[str, int]] = None,
        inline_sizes: bool = True,
        list_delay: float = 0.0,
        size_delay: float = 0.0,
    ):
        self.files: Dict[str, int] = dict(files or {})
        self.inline_sizes = inline_sizes
        self.list_delay = list_delay
        self.size_delay = size_delay

        self.failing_list_paths = set()
        self.failing_size_paths = set()

        self.list_calls: List[tuple] = []
        self.size_calls: List[str] = []
        self.max_concurrent_size_lookups = 0
        self._active_size_lookups = 0

    def put(self, path: str, size: int) -> None:
        self.files[path.strip("/")] = size

    def fail_listing(self, path: str) -> None:
        self.failing_list_paths.add(path.strip("/"))

    def fail_size(self, path: str) -> None:
        self.failing_size_paths.add(path.strip("/"))

    def _children(self, path: str) -> List[BlobEntry]:
        prefix = f"{path}/" if path else ""
        directories: Dict[str, BlobEntry] = {}
        files: List[BlobEntry] = []
        for key in sorted(self.files):
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if "/" in rest:
                name = rest.split("/", 1)[0]
                directories.setdefault(name, BlobEntry(
                    name=name,
                    path=f"{prefix}{name}",
                    is_directory=True,
                ))
            else:
                files.append(BlobEntry(
                    name=rest,
                    path=key,
                    size_bytes=self.files[key] if self.inline_sizes else None,
                ))
        return list(directories.values()) + files

    async def list_page(
        self,
        path: str,
        page_token: Optional[str] = None,
        page_size: int = 1000,
    ) -> BlobListing:
        path = path.strip("/")
        self.list_calls.append((path, page_token))
        if self.list_delay:
            await asyncio.sleep(self.list_delay)
        if path in self.failing_list_paths:
            raise StorageError(f"listing '{path}' denied")

        entries = self._children(path)
        start = int(page_token or 0)
        end = start + page_size
        next_token = str(end) if end < len(entries) else None
        return BlobListing(entries=entries[start:end], next_page_token=next_token)

    async def get_size(self, path: str) -> int:
        path = path.strip("/")
        self.size_calls.append(path)
        self._active_size_lookups += 1
        self.max_concurrent_size_lookups = max(
            self.max_concurrent_size_lookups, self._active_size_lookups
        )
        try:
            await asyncio.sleep(self.size_delay)
            if path in self.failing_size_paths:
                raise StorageError(f"head '{path}' timed out")
            if path not in self.files:
                raise FileNotFoundError(path)
            return self.files[path]
        finally:
            self._active_size_lookups -= 1
