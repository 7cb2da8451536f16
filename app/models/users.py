# app/models/users.py

from sqlalchemy import CheckConstraint, Column, Integer, String, DateTime
from sqlalchemy.sql import func

from app.database import Base

ROLE_ADMIN = "ADMIN"
ROLE_CASHIER = "CASHIER"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    # Admins manage the catalog and read reports, cashiers ring up sales
    role = Column(String(20), nullable=False, default=ROLE_CASHIER)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("role IN ('ADMIN', 'CASHIER')", name="ck_user_role_valid"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
