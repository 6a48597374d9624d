"""Section breakdown of catalog storage.

Folds per-category and per-item byte counts into one entry per section. The
catalog is a strict tree (item -> category -> section); items never point at a
section directly.
"""

import logging
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from .models import CatalogStructure, SectionBreakdown

logger = logging.getLogger(__name__)


class HierarchyAggregator:
    """Aggregates category and item bytes into SectionBreakdown entries.

    Categories without a resolvable section are skipped with a warning, and so
    are their items. Addition is commutative, so iteration order only decides
    the order of the returned list (first-seen section order).
    """

    def aggregate(
        self,
        category_bytes: Dict[UUID, int],
        item_bytes: Dict[UUID, int],
        structure: CatalogStructure,
    ) -> Tuple[List[SectionBreakdown], List[str]]:
        """Build the section breakdown.

        Args:
            category_bytes: category id -> bytes of its media
            item_bytes: item id -> bytes of its media
            structure: structural links of the studio's catalog

        Returns:
            (sections in first-seen order, warnings for skipped nodes)
        """
        breakdowns: Dict[UUID, SectionBreakdown] = {}
        warnings: List[str] = []

        for category_id, section_id in structure.category_sections.items():
            breakdown = self._section_for(section_id, structure, breakdowns)
            if breakdown is None:
                warnings.append(f"Category {category_id} has no section, skipped")
                logger.warning(
                    "Category has no resolvable section, skipped from breakdown",
                    extra={"category_id": str(category_id), "section_id": str(section_id)}
                )
                continue
            breakdown.add_category(category_bytes.get(category_id, 0))

        for item_id, category_id in structure.item_categories.items():
            if category_id not in structure.category_sections:
                warnings.append(f"Item {item_id} references unknown category {category_id}, skipped")
                logger.warning(
                    "Item references unknown category, skipped from breakdown",
                    extra={"item_id": str(item_id), "category_id": str(category_id)}
                )
                continue
            breakdown = self._section_for(
                structure.category_sections[category_id], structure, breakdowns
            )
            if breakdown is None:
                # Already reported with its category
                continue
            breakdown.add_item(item_bytes.get(item_id, 0))

        return list(breakdowns.values()), warnings

    def _section_for(
        self,
        section_id: Optional[UUID],
        structure: CatalogStructure,
        breakdowns: Dict[UUID, SectionBreakdown],
    ) -> Optional[SectionBreakdown]:
        if section_id is None or section_id not in structure.sections:
            return None
        if section_id not in breakdowns:
            breakdowns[section_id] = SectionBreakdown(
                section_id=section_id,
                section_name=structure.sections[section_id],
            )
        return breakdowns[section_id]
