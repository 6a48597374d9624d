"""StudioStorageUsage SQLAlchemy model

One row per studio holding the latest full storage recomputation. The row is
overwritten on every run; no history is kept.
"""

from uuid import uuid4

from sqlalchemy import Column, BigInteger, ForeignKey, Uuid, DateTime, func
from sqlalchemy.orm import relationship

from .base import Base, PortableJSONB


class StudioStorageUsage(Base):
    """Storage usage snapshot for a studio.

    Invariant: total_storage_bytes == sum(per_kind_bytes.values()).
    """
    __tablename__ = "studio_storage_usage"

    id = Column(Uuid, primary_key=True, default=uuid4)
    studio_id = Column(
        Uuid,
        ForeignKey("studio.id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )
    total_storage_bytes = Column(BigInteger, nullable=False, default=0)
    per_kind_bytes = Column(PortableJSONB, nullable=False, default=dict)
    sections_json = Column(PortableJSONB, nullable=False, default=list)
    quota_limit_bytes = Column(BigInteger, nullable=False)
    last_calculated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    studio = relationship("Studio", back_populates="storage_usage")

    def to_dict(self):
        """Convert snapshot to dictionary representation"""
        return {
            "studio_id": str(self.studio_id),
            "total_bytes": self.total_storage_bytes,
            "per_kind_bytes": dict(self.per_kind_bytes or {}),
            "sections": list(self.sections_json or []),
            "quota_limit_bytes": self.quota_limit_bytes,
            "last_calculated_at": (
                self.last_calculated_at.isoformat() if self.last_calculated_at else None
            ),
        }

    def __repr__(self):
        return (
            f"<StudioStorageUsage(studio_id={self.studio_id}, "
            f"total_storage_bytes={self.total_storage_bytes})>"
        )
