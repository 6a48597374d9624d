"""Errors that abort a storage recalculation.

Recoverable blob store failures never surface as exceptions; they are absorbed
where they happen and reported as warnings on the result.
"""


class StorageAccountingError(Exception):
    """Base class for fatal storage accounting errors."""
    pass


class StudioNotFoundError(StorageAccountingError):
    """No studio exists for the requested slug."""

    def __init__(self, studio_slug: str):
        self.studio_slug = studio_slug
        super().__init__(f"Studio '{studio_slug}' not found")


class CatalogReadError(StorageAccountingError):
    """The relational content store could not be read."""
    pass


class SnapshotPersistError(StorageAccountingError):
    """The usage snapshot could not be written; nothing was committed."""
    pass


class RecalculationCancelledError(StorageAccountingError):
    """The run hit its deadline or was cancelled before persisting."""
    pass
