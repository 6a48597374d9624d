"""Catalog builders for storage accounting tests."""

from typing import Dict, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from models.catalog import (
    CategoryMedia,
    ItemMedia,
    SectionCategory,
    ServiceCategory,
    ServiceItem,
    ServiceSection,
)
from models.studio import Studio

KB = 1024


def add_section(db: Session, studio: Studio, name: str, display_order: int = 0) -> ServiceSection:
    section = ServiceSection(studio_id=studio.id, name=name, display_order=display_order)
    db.add(section)
    db.flush()
    return section


def add_category(
    db: Session,
    studio: Studio,
    name: str,
    section: Optional[ServiceSection] = None,
    media_bytes: Optional[int] = None,
    display_order: int = 0,
) -> ServiceCategory:
    """Add a category, optionally linked to a section and with one media file."""
    category = ServiceCategory(studio_id=studio.id, name=name, display_order=display_order)
    db.add(category)
    db.flush()
    if section is not None:
        db.add(SectionCategory(section_id=section.id, category_id=category.id))
    if media_bytes is not None:
        db.add(CategoryMedia(
            studio_id=studio.id,
            category_id=category.id,
            storage_path=f"studios/{studio.slug}/categories/{category.id}.jpg",
            storage_bytes=media_bytes,
        ))
    db.flush()
    return category


def add_item(
    db: Session,
    studio: Studio,
    category: ServiceCategory,
    name: str,
    media_bytes: Optional[int] = None,
    display_order: int = 0,
) -> ServiceItem:
    item = ServiceItem(
        studio_id=studio.id,
        category_id=category.id,
        name=name,
        display_order=display_order,
    )
    db.add(item)
    db.flush()
    if media_bytes is not None:
        db.add(ItemMedia(
            studio_id=studio.id,
            item_id=item.id,
            storage_path=f"studios/{studio.slug}/items/{item.id}.jpg",
            storage_bytes=media_bytes,
        ))
    db.flush()
    return item


def build_wedding_catalog(db: Session, studio: Studio) -> Dict[str, UUID]:
    """One section, two categories (120 KB, 80 KB), three items on the first (10 KB, 5 KB, 0 KB).

    Expected breakdown: categories 200 KB, items 15 KB, subtotal 215 KB.
    """
    section = add_section(db, studio, "Weddings")
    ceremony = add_category(db, studio, "Ceremony", section=section, media_bytes=120 * KB, display_order=1)
    reception = add_category(db, studio, "Reception", section=section, media_bytes=80 * KB, display_order=2)
    add_item(db, studio, ceremony, "Full day", media_bytes=10 * KB, display_order=1)
    add_item(db, studio, ceremony, "Half day", media_bytes=5 * KB, display_order=2)
    add_item(db, studio, ceremony, "Elopement", media_bytes=0, display_order=3)
    db.commit()
    return {
        "section_id": section.id,
        "ceremony_id": ceremony.id,
        "reception_id": reception.id,
    }
