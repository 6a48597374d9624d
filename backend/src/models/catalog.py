"""Catalog hierarchy models: sections, categories, items and their media.

The hierarchy is a strict three-level tree. Items belong to a category, and a
category is attached to at most one section through section_category.
"""

from uuid import uuid4

from sqlalchemy import Column, Text, Integer, BigInteger, ForeignKey, Index, Uuid, DateTime, func
from sqlalchemy.orm import relationship

from .base import Base


class ServiceSection(Base):
    __tablename__ = "service_section"
    __table_args__ = (
        Index("ix_service_section_studio_id", "studio_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    studio_id = Column(Uuid, ForeignKey("studio.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    category_links = relationship("SectionCategory", back_populates="section")


class ServiceCategory(Base):
    __tablename__ = "service_category"
    __table_args__ = (
        Index("ix_service_category_studio_id", "studio_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    studio_id = Column(Uuid, ForeignKey("studio.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    section_link = relationship("SectionCategory", back_populates="category", uselist=False)
    items = relationship("ServiceItem", back_populates="category")
    media = relationship("CategoryMedia", back_populates="category")


class SectionCategory(Base):
    """Link between a section and a category (unique per category)."""
    __tablename__ = "section_category"

    id = Column(Uuid, primary_key=True, default=uuid4)
    section_id = Column(Uuid, ForeignKey("service_section.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(
        Uuid,
        ForeignKey("service_category.id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )

    section = relationship("ServiceSection", back_populates="category_links")
    category = relationship("ServiceCategory", back_populates="section_link")


class ServiceItem(Base):
    __tablename__ = "service_item"
    __table_args__ = (
        Index("ix_service_item_studio_id", "studio_id"),
        Index("ix_service_item_category_id", "category_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    studio_id = Column(Uuid, ForeignKey("studio.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(Uuid, ForeignKey("service_category.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    category = relationship("ServiceCategory", back_populates="items")
    media = relationship("ItemMedia", back_populates="item")


class CategoryMedia(Base):
    """Photo or video attached to a category. storage_bytes is set at upload time."""
    __tablename__ = "category_media"
    __table_args__ = (
        Index("ix_category_media_studio_id", "studio_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    studio_id = Column(Uuid, ForeignKey("studio.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(Uuid, ForeignKey("service_category.id", ondelete="CASCADE"), nullable=False)
    file_url = Column(Text, nullable=True)
    storage_path = Column(Text, nullable=True)
    storage_bytes = Column(BigInteger, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    category = relationship("ServiceCategory", back_populates="media")


class ItemMedia(Base):
    """Photo or video attached to a catalog item."""
    __tablename__ = "item_media"
    __table_args__ = (
        Index("ix_item_media_studio_id", "studio_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    studio_id = Column(Uuid, ForeignKey("studio.id", ondelete="CASCADE"), nullable=False)
    item_id = Column(Uuid, ForeignKey("service_item.id", ondelete="CASCADE"), nullable=False)
    file_url = Column(Text, nullable=True)
    storage_path = Column(Text, nullable=True)
    storage_bytes = Column(BigInteger, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    item = relationship("ServiceItem", back_populates="media")
