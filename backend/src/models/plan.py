"""Platform plan model"""

from uuid import uuid4

from sqlalchemy import Column, Text, Integer, Uuid
from sqlalchemy.orm import relationship

from .base import Base


class PlatformPlan(Base):
    """Subscription plan. Only the storage allowance matters to storage accounting.

    storage_limit_gb is nullable: plans without a limit fall back to the
    default quota configured in STORAGE_DEFAULT_QUOTA_BYTES.
    """
    __tablename__ = "platform_plan"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(Text, nullable=False)
    storage_limit_gb = Column(Integer, nullable=True)

    studios = relationship("Studio", back_populates="plan")

    @property
    def storage_limit_bytes(self):
        if not self.storage_limit_gb:
            return None
        return self.storage_limit_gb * 1024 * 1024 * 1024

    def __repr__(self):
        return f"<PlatformPlan(id={self.id}, name='{self.name}', storage_limit_gb={self.storage_limit_gb})>"
