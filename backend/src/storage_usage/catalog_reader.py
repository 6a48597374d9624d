"""Read access to the studio directory and the catalog hierarchy."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.storage_usage.models import CatalogStructure
from models.catalog import SectionCategory, ServiceCategory, ServiceItem, ServiceSection
from models.studio import Studio
from .exceptions import CatalogReadError, StudioNotFoundError

logger = logging.getLogger(__name__)


class CatalogReader:
    """Relational reads needed by a recalculation.

    Args:
        db: Database session
    """

    def __init__(self, db: Session):
        self.db = db

    def get_studio(self, studio_slug: str) -> Studio:
        """Resolve a studio by slug.

        Raises:
            StudioNotFoundError: If no studio has this slug
            CatalogReadError: If the lookup fails
        """
        try:
            studio = self.db.query(Studio).filter(Studio.slug == studio_slug).first()
        except SQLAlchemyError as e:
            raise CatalogReadError(f"Failed to resolve studio '{studio_slug}': {e}") from e
        if not studio:
            raise StudioNotFoundError(studio_slug)
        return studio

    def load_structure(self, studio_id: UUID) -> CatalogStructure:
        """Load section, category and item links in display order.

        Categories without a section link map to None so the aggregator can
        report them.

        Raises:
            CatalogReadError: If the catalog cannot be read
        """
        structure = CatalogStructure()
        try:
            sections = (
                self.db.query(ServiceSection.id, ServiceSection.name)
                .filter(ServiceSection.studio_id == studio_id)
                .order_by(ServiceSection.display_order, ServiceSection.created_at, ServiceSection.id)
                .all()
            )
            categories = (
                self.db.query(ServiceCategory.id, SectionCategory.section_id)
                .outerjoin(SectionCategory, SectionCategory.category_id == ServiceCategory.id)
                .filter(ServiceCategory.studio_id == studio_id)
                .order_by(ServiceCategory.display_order, ServiceCategory.created_at, ServiceCategory.id)
                .all()
            )
            items = (
                self.db.query(ServiceItem.id, ServiceItem.category_id)
                .filter(ServiceItem.studio_id == studio_id)
                .order_by(ServiceItem.display_order, ServiceItem.created_at, ServiceItem.id)
                .all()
            )
        except SQLAlchemyError as e:
            raise CatalogReadError(f"Failed to load catalog structure: {e}") from e

        for section_id, name in sections:
            structure.sections[section_id] = name
        for category_id, section_id in categories:
            structure.category_sections[category_id] = section_id
        for item_id, category_id in items:
            structure.item_categories[item_id] = category_id

        logger.debug(
            f"Loaded catalog structure: {len(structure.sections)} sections, "
            f"{len(structure.category_sections)} categories, {len(structure.item_categories)} items",
            extra={"studio_id": studio_id}
        )
        return structure

    def quota_for(self, studio: Studio, default_quota_bytes: int) -> int:
        """Quota of a studio: its plan's storage limit, else the default.

        Raises:
            CatalogReadError: If the plan cannot be loaded
        """
        try:
            plan = studio.plan
        except SQLAlchemyError as e:
            raise CatalogReadError(f"Failed to load plan of studio '{studio.slug}': {e}") from e
        if plan is not None and plan.storage_limit_bytes:
            return plan.storage_limit_bytes
        return default_quota_bytes
