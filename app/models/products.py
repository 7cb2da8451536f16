# app/models/products.py

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, Index, Integer, String, Numeric, DateTime

from app.database import Base

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"


def utcnow():
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(100), nullable=False, default="")

    # Products are never deleted, only deactivated, so past sale items keep their reference
    status = Column(String(10), nullable=False, default=STATUS_ACTIVE)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_products_name", "name"),
        Index("ix_products_status", "status"),
        CheckConstraint("price >= 0", name="ck_product_price_non_negative"),
        CheckConstraint("status IN ('active', 'inactive')", name="ck_product_status_valid"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE
