"""Blob Store Port - Domain interface for listing and sizing stored files.

Storage accounting only discovers files; it never writes. Adapters translate a
concrete object store (S3, MinIO) into pages of entries and per-file sizes.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional


class StorageError(Exception):
    """Base exception for blob store operations."""
    pass


@dataclass
class BlobEntry:
    """One entry of a listing page.

    Attributes:
        name: Last path segment
        path: Full key (files) or the prefix to list next (directories)
        is_directory: True for folder markers/common prefixes
        size_bytes: Size when the backend returns it inline, otherwise None
    """
    name: str
    path: str
    is_directory: bool = False
    size_bytes: Optional[int] = None


@dataclass
class BlobListing:
    """One page of a listing; next_page_token is None on the last page."""
    entries: List[BlobEntry] = field(default_factory=list)
    next_page_token: Optional[str] = None


class BlobStorePort(ABC):
    """Port interface for blob store discovery operations.

    Implementations must be safe to call from several coroutines at once;
    one instance is shared by the crawler and every collector of a run.
    """

    @abstractmethod
    async def list_page(
        self,
        path: str,
        page_token: Optional[str] = None,
        page_size: int = 1000,
    ) -> BlobListing:
        """List the direct children of ``path``.

        Args:
            path: Folder path without trailing slash ('' for the bucket root)
            page_token: Token returned by the previous page, None for the first
            page_size: Maximum number of entries in the returned page

        Returns:
            BlobListing: Entries of this page plus the next page token

        Raises:
            StorageError: If the listing fails
        """
        pass

    @abstractmethod
    async def get_size(self, path: str) -> int:
        """Return the size of one file in bytes.

        Raises:
            FileNotFoundError: If the file doesn't exist
            StorageError: If the metadata lookup fails
        """
        pass

    def resolve_path(self, reference: str) -> Optional[str]:
        """Map a stored reference (public URL or raw key) to a blob path.

        Returns None when the reference does not point into this store.
        """
        return reference or None
