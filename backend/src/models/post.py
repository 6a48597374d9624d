"""Post models (profile content feed)"""

from uuid import uuid4

from sqlalchemy import Column, Text, BigInteger, ForeignKey, Index, Uuid, DateTime, func

from .base import Base


class Post(Base):
    __tablename__ = "post"
    __table_args__ = (
        Index("ix_post_studio_id", "studio_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    studio_id = Column(Uuid, ForeignKey("studio.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PostMedia(Base):
    __tablename__ = "post_media"
    __table_args__ = (
        Index("ix_post_media_studio_id", "studio_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    studio_id = Column(Uuid, ForeignKey("studio.id", ondelete="CASCADE"), nullable=False)
    post_id = Column(Uuid, ForeignKey("post.id", ondelete="CASCADE"), nullable=False)
    file_url = Column(Text, nullable=True)
    storage_path = Column(Text, nullable=True)
    storage_bytes = Column(BigInteger, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
