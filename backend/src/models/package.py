"""Package model (bundled service offering with a cover image)"""

from uuid import uuid4

from sqlalchemy import Column, Text, BigInteger, ForeignKey, Index, Uuid, DateTime, func

from .base import Base


class Package(Base):
    """Service package.

    cover_storage_bytes is null for covers uploaded before size tracking
    existed; those covers count as 0 unless STORAGE_TRACKED_NULL_FALLBACK is on.
    """
    __tablename__ = "package"
    __table_args__ = (
        Index("ix_package_studio_id", "studio_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    studio_id = Column(Uuid, ForeignKey("studio.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    cover_url = Column(Text, nullable=True)
    cover_storage_bytes = Column(BigInteger, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
