"""Customer model."""
from datetime import datetime, timezone

from sqlalchemy import Column, BigInteger, Integer, String, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB
from shop.database import Base


def utcnow():
    """Server-side creation time (timezone aware)."""
    return datetime.now(timezone.utc)


class Customer(Base):
    """
    Customer document.

    Products are embedded as an ordered JSON array instead of a child table:
    a product only exists inside its customer and is deleted with it.
    """

    __tablename__ = 'customer'

    id = Column(BigInteger().with_variant(Integer, 'sqlite'), primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    products = Column(JSON().with_variant(JSONB(), 'postgresql'), nullable=False, default=list)

    def __repr__(self):
        return f"<Customer(id={self.id}, name='{self.name}', products={len(self.products or [])})>"

    def to_dict(self):
        """JSON shape served by the API (camelCase keys, string id)."""
        created_at = self.created_at
        if created_at is not None and created_at.tzinfo is None:
            # SQLite drops tzinfo; values are always stored as UTC
            created_at = created_at.replace(tzinfo=timezone.utc)
        return {
            'id': str(self.id),
            'name': self.name,
            'createdAt': created_at.isoformat() if created_at else None,
            'products': [dict(p) for p in (self.products or [])],
        }
