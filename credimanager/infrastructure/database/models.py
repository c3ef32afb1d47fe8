"""SQLAlchemy ORM models for persisted state"""

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class PortfolioSnapshot(Base):
    """Whole borrower/loan/payment state serialized as one JSON document"""

    __tablename__ = "portfolio_snapshot"

    key = Column(String(128), primary_key=True)
    payload = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
