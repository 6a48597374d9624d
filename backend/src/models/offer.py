"""Offer models (landing-page offers with cover and content-block media)"""

from uuid import uuid4

from sqlalchemy import Column, Text, BigInteger, ForeignKey, Index, Uuid, DateTime, func

from .base import Base


class Offer(Base):
    """Commercial offer.

    The cover image has no tracked size: cover_url is the only reference, so
    its size is looked up in the blob store at calculation time.
    """
    __tablename__ = "offer"
    __table_args__ = (
        Index("ix_offer_studio_id", "studio_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    studio_id = Column(Uuid, ForeignKey("studio.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    cover_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class OfferMedia(Base):
    __tablename__ = "offer_media"
    __table_args__ = (
        Index("ix_offer_media_studio_id", "studio_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    studio_id = Column(Uuid, ForeignKey("studio.id", ondelete="CASCADE"), nullable=False)
    offer_id = Column(Uuid, ForeignKey("offer.id", ondelete="CASCADE"), nullable=False)
    file_url = Column(Text, nullable=True)
    storage_path = Column(Text, nullable=True)
    storage_bytes = Column(BigInteger, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
