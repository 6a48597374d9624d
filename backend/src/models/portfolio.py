"""Portfolio models"""

from uuid import uuid4

from sqlalchemy import Column, Text, BigInteger, ForeignKey, Index, Uuid, DateTime, func

from .base import Base


class Portfolio(Base):
    __tablename__ = "portfolio"
    __table_args__ = (
        Index("ix_portfolio_studio_id", "studio_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    studio_id = Column(Uuid, ForeignKey("studio.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PortfolioMedia(Base):
    """Gallery file of a portfolio. storage_bytes is recorded after optimization."""
    __tablename__ = "portfolio_media"
    __table_args__ = (
        Index("ix_portfolio_media_studio_id", "studio_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    studio_id = Column(Uuid, ForeignKey("studio.id", ondelete="CASCADE"), nullable=False)
    portfolio_id = Column(Uuid, ForeignKey("portfolio.id", ondelete="CASCADE"), nullable=False)
    file_url = Column(Text, nullable=True)
    storage_path = Column(Text, nullable=True)
    storage_bytes = Column(BigInteger, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
