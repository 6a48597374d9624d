"""Studio model - Root entity for multi-tenant isolation"""

from datetime import datetime
from uuid import uuid4
import re

from sqlalchemy import Column, ForeignKey, Text, Uuid, DateTime, func
from sqlalchemy.orm import validates, relationship

from .base import Base


class Studio(Base):
    """
    Studio model - the tenant whose storage usage is measured.

    Every content table references studio.id. Deleting a studio cascades to
    its storage usage snapshot.
    """
    __tablename__ = "studio"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True)
    plan_id = Column(Uuid, ForeignKey("platform_plan.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=datetime.utcnow
    )

    # Relationships
    plan = relationship("PlatformPlan", back_populates="studios")
    storage_usage = relationship(
        "StudioStorageUsage",
        back_populates="studio",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @validates('slug')
    def validate_slug(self, key, value):
        """
        Ensure slug is URL-friendly. Slugs are also used as blob path segments
        (studios/{slug}/...), so the pattern is strict.

        Pattern: ^[a-z0-9-]+$
        Valid: foto-lumen, studio-123
        Invalid: Foto_Lumen, foto lumen, foto.lumen

        Raises:
            ValueError: If slug doesn't match pattern or length requirements
        """
        if not re.match(r'^[a-z0-9-]+$', value):
            raise ValueError(
                "Slug must contain only lowercase letters, numbers, and hyphens"
            )
        if len(value) < 2 or len(value) > 100:
            raise ValueError("Slug must be between 2 and 100 characters")
        return value

    @validates('name')
    def validate_name(self, key, value):
        if not value or len(value.strip()) == 0:
            raise ValueError("Studio name cannot be empty")
        if len(value) > 200:
            raise ValueError("Studio name cannot exceed 200 characters")
        return value.strip()

    def __repr__(self):
        return f"<Studio(id={self.id}, slug='{self.slug}', name='{self.name}')>"
