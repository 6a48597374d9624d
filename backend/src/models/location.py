"""Location media model"""

from uuid import uuid4

from sqlalchemy import Column, Text, BigInteger, Integer, ForeignKey, Index, Uuid, DateTime, func

from .base import Base


class LocationMedia(Base):
    """Photo of a studio location (shooting venue). Size is tracked at upload."""
    __tablename__ = "location_media"
    __table_args__ = (
        Index("ix_location_media_studio_id", "studio_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    studio_id = Column(Uuid, ForeignKey("studio.id", ondelete="CASCADE"), nullable=False)
    location_id = Column(Uuid, nullable=False)
    filename = Column(Text, nullable=True)
    storage_path = Column(Text, nullable=True)
    storage_bytes = Column(BigInteger, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
