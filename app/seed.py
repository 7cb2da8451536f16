# app/seed.py

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.hashing import hash_password
from app.models.products import Product
from app.models.users import User, ROLE_ADMIN, ROLE_CASHIER

logger = logging.getLogger("app.seed")

DEFAULT_PRODUCTS = [
    {"name": "Premium Espresso Beans 1kg", "price": Decimal("45.00"), "category": "Coffee"},
    {"name": "Artisan Dark Chocolate", "price": Decimal("12.50"), "category": "Sweets"},
    {"name": "Honey Lavender Syrup", "price": Decimal("18.00"), "category": "Beverages"},
]


def seed_defaults(db: Session) -> None:
    """Starter catalog on an empty store, default accounts when passwords are configured."""
    if db.query(Product).count() == 0:
        db.add_all(Product(**fields) for fields in DEFAULT_PRODUCTS)
        logger.info(f"Seeded {len(DEFAULT_PRODUCTS)} default products")

    accounts = [
        ("admin", ROLE_ADMIN, settings.ADMIN_PASSWORD),
        ("cashier1", ROLE_CASHIER, settings.CASHIER_PASSWORD),
    ]

    for username, role, password in accounts:
        if not password:
            continue
        if db.query(User).filter(User.username == username).first():
            continue
        db.add(User(username=username, role=role, password_hash=hash_password(password)))
        logger.info(f"Seeded default {role.lower()} account {username!r}")

    db.commit()
