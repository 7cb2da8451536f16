# =========================================================
# CATALOG STORE
# Products are created and edited by admins and never
# deleted: "delete" deactivates so sale history keeps
# pointing at a real row.
# =========================================================

import logging
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, PersistenceError
from app.models.products import Product, STATUS_ACTIVE, STATUS_INACTIVE, utcnow

logger = logging.getLogger("app.catalog")


def _read(db: Session, query, what: str):
    try:
        return query()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(f"Reading {what} failed")
        raise PersistenceError(f"Unable to read {what}", exc) from exc


def _commit(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(f"Product {action} failed, rolled back")
        raise PersistenceError(f"Unable to {action} product", exc) from exc


def list_products(
    db: Session,
    active_only: bool = False,
    search: Optional[str] = None,
) -> list[Product]:
    query = db.query(Product)

    if active_only:
        query = query.filter(Product.status == STATUS_ACTIVE)

    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Product.name).like(pattern),
                func.lower(Product.category).like(pattern),
            )
        )

    return _read(db, query.order_by(Product.id).all, "products")


def list_categories(db: Session) -> list[str]:
    query = (
        db.query(Product.category)
        .filter(Product.status == STATUS_ACTIVE)
        .distinct()
        .order_by(Product.category)
    )
    rows = _read(db, query.all, "categories")
    return [row.category for row in rows if row.category]


def get_product(db: Session, product_id: int) -> Product:
    product = _read(
        db, db.query(Product).filter(Product.id == product_id).first, "product"
    )

    if not product:
        raise NotFoundError("Product", product_id)

    return product


def create_product(db: Session, fields: dict) -> Product:
    now = utcnow()
    product = Product(
        name=fields["name"],
        price=fields["price"],
        category=fields.get("category") or "",
        status=fields.get("status") or STATUS_ACTIVE,
        created_at=now,
        updated_at=now,
    )

    db.add(product)
    _commit(db, "create")
    db.refresh(product)

    logger.info(f"Product created id={product.id} name={product.name!r} price={product.price}")
    return product


def update_product(db: Session, product_id: int, fields: dict) -> Product:
    product = get_product(db, product_id)

    changed = False
    for key in ("name", "price", "category", "status"):
        value = fields.get(key)
        if value is not None and getattr(product, key) != value:
            setattr(product, key, value)
            changed = True

    if changed:
        product.updated_at = utcnow()
        _commit(db, "update")
        db.refresh(product)
        logger.info(f"Product updated id={product.id}")

    return product


def deactivate_product(db: Session, product_id: int) -> Product:
    product = get_product(db, product_id)

    # Already inactive: nothing to write, updated_at stays as it was
    if product.status == STATUS_INACTIVE:
        return product

    product.status = STATUS_INACTIVE
    product.updated_at = utcnow()
    _commit(db, "deactivate")
    db.refresh(product)

    logger.info(f"Product deactivated id={product.id}")
    return product
