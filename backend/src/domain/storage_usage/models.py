"""Storage accounting domain models.

Plain dataclasses and enums shared by the crawler, the collectors, the
hierarchy aggregator and the snapshot writer. Nothing here touches the
database or the blob store.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID


class StorageResourceKind(str, Enum):
    """Content kinds that consume object storage."""
    CATEGORY_MEDIA = "CATEGORY_MEDIA"
    ITEM_MEDIA = "ITEM_MEDIA"
    POST_MEDIA = "POST_MEDIA"
    PORTFOLIO_MEDIA = "PORTFOLIO_MEDIA"
    PACKAGE_COVER = "PACKAGE_COVER"
    OFFER_MEDIA = "OFFER_MEDIA"
    OFFER_COVER = "OFFER_COVER"
    CONTACT_AVATAR = "CONTACT_AVATAR"
    LOCATION_MEDIA = "LOCATION_MEDIA"


class ByteSource:
    """Where the byte count of a resource kind comes from.

    Exactly two variants exist: Tracked and Live.
    """


@dataclass(frozen=True)
class Tracked(ByteSource):
    """Byte count stored on each content record at upload time.

    Attributes:
        model: SQLAlchemy model holding the records
        bytes_column: Column with the tracked byte count (nullable)
        owner_column: Column grouped on for per-owner totals (category/item id)
        path_column: Column holding the blob key, used only by the optional
                     live fallback for records whose tracked value is null
    """
    model: Any
    bytes_column: str
    owner_column: Optional[str] = None
    path_column: Optional[str] = None


@dataclass(frozen=True)
class Live(ByteSource):
    """Byte count resolved by querying the blob store at calculation time.

    Set ``path`` for resources that share one folder per studio; the folder is
    crawled as a whole. Set ``model`` and ``reference_column`` for resources
    scattered one file per record; each referenced file is sized individually.

    ``path`` is a template formatted with ``studio_id`` and ``studio_slug``.
    """
    path: Optional[str] = None
    model: Any = None
    reference_column: Optional[str] = None

    def __post_init__(self):
        if self.path is None and (self.model is None or self.reference_column is None):
            raise ValueError("Live source needs a folder path or a model reference column")

    @property
    def is_shared_folder(self) -> bool:
        return self.path is not None


@dataclass
class ByteCount:
    """Result of one collector run.

    ``by_owner`` maps owner ids (category or item) to bytes for kinds that feed
    the section breakdown; it is empty for other kinds.
    """
    kind: StorageResourceKind
    bytes: int = 0
    count: int = 0
    by_owner: Dict[UUID, int] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)


@dataclass
class TreeUsage:
    """Totals of one recursive crawl."""
    total_bytes: int = 0
    file_count: int = 0
    warnings: List[str] = field(default_factory=list)

    def merge(self, other: "TreeUsage") -> None:
        self.total_bytes += other.total_bytes
        self.file_count += other.file_count
        self.warnings.extend(other.warnings)


@dataclass
class SectionBreakdown:
    """Usage of one catalog section.

    Invariant: subtotal == category_bytes + item_bytes.
    """
    section_id: UUID
    section_name: str
    category_bytes: int = 0
    category_count: int = 0
    item_bytes: int = 0
    item_count: int = 0
    subtotal: int = 0

    def add_category(self, size: int) -> None:
        self.category_bytes += size
        self.category_count += 1
        self.subtotal = self.category_bytes + self.item_bytes

    def add_item(self, size: int) -> None:
        self.item_bytes += size
        self.item_count += 1
        self.subtotal = self.category_bytes + self.item_bytes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "section_id": str(self.section_id),
            "section_name": self.section_name,
            "category_bytes": self.category_bytes,
            "category_count": self.category_count,
            "item_bytes": self.item_bytes,
            "item_count": self.item_count,
            "subtotal": self.subtotal,
        }


@dataclass
class CatalogStructure:
    """Structural links of the catalog tree for one studio.

    Attributes:
        sections: section id -> section name, in display order
        category_sections: category id -> section id (None when unlinked),
                           in display order
        item_categories: item id -> category id, in display order
    """
    sections: Dict[UUID, str] = field(default_factory=dict)
    category_sections: Dict[UUID, Optional[UUID]] = field(default_factory=dict)
    item_categories: Dict[UUID, UUID] = field(default_factory=dict)


@dataclass
class StorageTotals:
    """Everything the snapshot writer persists for one run."""
    total_bytes: int
    per_kind_bytes: Dict[str, int]
    sections: List[SectionBreakdown]

    @classmethod
    def from_counts(cls, counts: List[ByteCount], sections: List[SectionBreakdown]) -> "StorageTotals":
        """Build totals from collector outputs.

        Every kind is present in per_kind_bytes (0 when it had no content) and
        total_bytes is always the sum of its values.
        """
        per_kind = {kind.value: 0 for kind in StorageResourceKind}
        for count in counts:
            per_kind[count.kind.value] += count.bytes
        return cls(
            total_bytes=sum(per_kind.values()),
            per_kind_bytes=per_kind,
            sections=sections,
        )
