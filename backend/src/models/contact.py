"""Contact model (studio clients and leads)"""

from uuid import uuid4

from sqlalchemy import Column, Text, ForeignKey, Index, Uuid, DateTime, func

from .base import Base


class Contact(Base):
    """Studio contact.

    Avatars are uploaded to one shared folder per studio
    (studios/{slug}/contacts/avatars), which is crawled as a whole.
    """
    __tablename__ = "contact"
    __table_args__ = (
        Index("ix_contact_studio_id", "studio_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    studio_id = Column(Uuid, ForeignKey("studio.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    avatar_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
