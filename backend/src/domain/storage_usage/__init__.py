"""Storage accounting domain module - byte sources, crawling, section breakdown"""

from .models import (
    StorageResourceKind,
    ByteSource,
    Tracked,
    Live,
    ByteCount,
    TreeUsage,
    SectionBreakdown,
    CatalogStructure,
    StorageTotals,
)
from .crawler import BlobTreeCrawler
from .hierarchy import HierarchyAggregator

__all__ = [
    "StorageResourceKind",
    "ByteSource",
    "Tracked",
    "Live",
    "ByteCount",
    "TreeUsage",
    "SectionBreakdown",
    "CatalogStructure",
    "StorageTotals",
    "BlobTreeCrawler",
    "HierarchyAggregator",
]
