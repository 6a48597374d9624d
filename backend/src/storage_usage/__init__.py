"""Storage accounting feature: recompute and persist per-studio usage."""

from .exceptions import (
    CatalogReadError,
    RecalculationCancelledError,
    SnapshotPersistError,
    StorageAccountingError,
    StudioNotFoundError,
)
from .schemas import SectionBreakdownSchema, StorageSnapshotResponse, StorageUsageReport
from .service import StorageUsageService, recalculate_all_studios

__all__ = [
    "CatalogReadError",
    "RecalculationCancelledError",
    "SnapshotPersistError",
    "StorageAccountingError",
    "StudioNotFoundError",
    "SectionBreakdownSchema",
    "StorageSnapshotResponse",
    "StorageUsageReport",
    "StorageUsageService",
    "recalculate_all_studios",
]
