from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, UniqueConstraint

from florist_cart.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StorageEntry(Base):
    """One client-scoped key/value pair, the SQL equivalent of a localStorage slot."""
    __tablename__ = "cart_storage"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(String(255), nullable=False, index=True)
    key = Column(String(255), nullable=False)
    value = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('client_id', 'key'),
    )


__all__ = [
    "StorageEntry",
    "Base"
]
