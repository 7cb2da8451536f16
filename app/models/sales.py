# models/sales.py

from sqlalchemy import CheckConstraint, Column, Index, Integer, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from app.database import Base
from app.models.products import utcnow

MODE_POS = "pos"
MODE_LOG = "log"


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)

    entry_mode = Column(String(10), nullable=False)

    # total_amount = subtotal_amount + tax_amount, subtotal_amount = sum of item line totals
    subtotal_amount = Column(Numeric(10, 2), nullable=False)
    tax_rate = Column(Numeric(5, 4), nullable=False, default=0)
    tax_amount = Column(Numeric(10, 2), nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    # Client supplied idempotency key (double submit protection)
    request_id = Column(String(64), nullable=True, unique=True)

    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SaleItem.id",
    )

    __table_args__ = (
        Index("ix_sales_created_total", "created_at", "total_amount"),
        CheckConstraint("entry_mode IN ('pos', 'log')", name="ck_sale_entry_mode_valid"),
        CheckConstraint("total_amount >= 0", name="ck_sale_total_non_negative"),
    )
