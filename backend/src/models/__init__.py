"""SQLAlchemy models for studio storage accounting"""

from .base import Base
from .plan import PlatformPlan
from .studio import Studio
from .catalog import (
    ServiceSection,
    ServiceCategory,
    SectionCategory,
    ServiceItem,
    CategoryMedia,
    ItemMedia,
)
from .post import Post, PostMedia
from .portfolio import Portfolio, PortfolioMedia
from .package import Package
from .offer import Offer, OfferMedia
from .contact import Contact
from .location import LocationMedia
from .storage_usage import StudioStorageUsage

__all__ = [
    "Base",
    "PlatformPlan",
    "Studio",
    "ServiceSection",
    "ServiceCategory",
    "SectionCategory",
    "ServiceItem",
    "CategoryMedia",
    "ItemMedia",
    "Post",
    "PostMedia",
    "Portfolio",
    "PortfolioMedia",
    "Package",
    "Offer",
    "OfferMedia",
    "Contact",
    "LocationMedia",
    "StudioStorageUsage",
]
