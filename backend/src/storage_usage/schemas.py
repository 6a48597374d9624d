"""Pydantic schemas for storage usage reports and snapshots.

- SectionBreakdownSchema: usage of one catalog section
- StorageUsageReport: result of one recalculation
- StorageSnapshotResponse: persisted snapshot as served by the API
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field, model_validator


class SectionBreakdownSchema(BaseModel):
    """Bytes of one section split into category media and item media."""

    section_id: str
    section_name: str
    category_bytes: int = Field(ge=0)
    category_count: int = Field(ge=0)
    item_bytes: int = Field(ge=0)
    item_count: int = Field(ge=0)
    subtotal: int = Field(ge=0)

    @model_validator(mode="after")
    def check_subtotal(self) -> "SectionBreakdownSchema":
        if self.subtotal != self.category_bytes + self.item_bytes:
            raise ValueError("subtotal must equal category_bytes + item_bytes")
        return self


class StorageUsageReport(BaseModel):
    """Result of a storage recalculation.

    warnings lists every degraded measurement (unreadable folder, failed size
    lookup, category without section). A non-empty list means total_bytes may
    undercount; it never overcounts.
    """

    studio_id: str
    studio_slug: str
    total_bytes: int = Field(ge=0)
    per_kind_bytes: Dict[str, int]
    per_kind_counts: Dict[str, int] = Field(default_factory=dict)
    sections: List[SectionBreakdownSchema] = Field(default_factory=list)
    quota_limit_bytes: int = Field(ge=0)
    last_calculated_at: datetime
    duration_seconds: float = Field(ge=0.0)
    warnings: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_total(self) -> "StorageUsageReport":
        if self.total_bytes != sum(self.per_kind_bytes.values()):
            raise ValueError("total_bytes must equal the sum of per_kind_bytes")
        return self

    @computed_field
    @property
    def is_degraded(self) -> bool:
        return bool(self.warnings)


class StorageSnapshotResponse(BaseModel):
    """Persisted snapshot, correct as of last_calculated_at."""

    studio_id: str
    total_bytes: int
    per_kind_bytes: Dict[str, int]
    sections: List[SectionBreakdownSchema]
    quota_limit_bytes: int
    last_calculated_at: Optional[datetime] = None

    @computed_field
    @property
    def usage_percent(self) -> float:
        if not self.quota_limit_bytes:
            return 0.0
        return round(self.total_bytes / self.quota_limit_bytes * 100, 2)
