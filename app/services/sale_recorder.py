# =========================================================
# SALE RECORDER
#
# Turns draft lines into an immutable Sale + SaleItems.
# - price_at_sale is the price the caller captured, never
#   re-read from the catalog
# - header and items are written in one transaction, a
#   failure leaves nothing behind
# =========================================================

import logging
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.auth import SessionContext
from app.core.errors import PersistenceError, ValidationError
from app.models.products import Product
from app.models.sale_items import SaleItem
from app.models.sales import Sale
from app.services.cart import (
    CommitLine,
    SalePolicy,
    Totals,
    complete_lines,
    compute_totals,
    money,
)

logger = logging.getLogger("app.sales")


def _resolve_lines(db: Session, lines: Iterable[CommitLine]) -> List[CommitLine]:
    lines = complete_lines(lines)

    for line in lines:
        if line.unit_price is not None and line.unit_price < 0:
            raise ValidationError("Unit price cannot be negative")

    product_ids = {line.product_id for line in lines}

    try:
        products = {
            product.id: product
            for product in db.query(Product).filter(Product.id.in_(product_ids)).all()
        }
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError("Unable to read products", exc) from exc

    missing = sorted(product_ids - products.keys())
    if missing:
        raise PersistenceError(f"Unknown product id(s): {', '.join(map(str, missing))}")

    for product_id in product_ids:
        product = products[product_id]
        if not product.is_active:
            raise ValidationError(f"{product.name} is no longer available")

    # Lines without a captured price take the catalog price as of now
    return [
        CommitLine(
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=money(
                line.unit_price if line.unit_price is not None else products[line.product_id].price
            ),
        )
        for line in lines
    ]


def quote(db: Session, lines: Iterable[CommitLine], policy: SalePolicy) -> Totals:
    return compute_totals(_resolve_lines(db, lines), policy)


def _persist_items(db: Session, sale: Sale, lines: List[CommitLine]) -> List[SaleItem]:
    items = [
        SaleItem(
            sale_id=sale.id,
            product_id=line.product_id,
            quantity=line.quantity,
            price_at_sale=line.unit_price,
            line_total=line.line_total,
        )
        for line in lines
    ]
    db.add_all(items)
    db.flush()
    return items


def get_sale(db: Session, sale_id: int) -> Optional[Sale]:
    try:
        return (
            db.query(Sale)
            .options(joinedload(Sale.items).joinedload(SaleItem.product))
            .filter(Sale.id == sale_id)
            .first()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError("Unable to read sale", exc) from exc


def _find_by_request_id(db: Session, request_id: str) -> Optional[Sale]:
    try:
        return db.query(Sale).filter(Sale.request_id == request_id).first()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError("Unable to check for an earlier sale", exc) from exc


def record_sale(
    db: Session,
    lines: Iterable[CommitLine],
    policy: SalePolicy,
    acting_user: Optional[SessionContext] = None,
    request_id: Optional[str] = None,
) -> Sale:
    # ===============================
    # IDEMPOTENCY CHECK (DOUBLE CLICK PROTECTION)
    # ===============================
    if request_id:
        existing_sale = _find_by_request_id(db, request_id)
        if existing_sale:
            logger.info(f"Sale request {request_id} already recorded as sale {existing_sale.id}")
            return existing_sale

    lines = _resolve_lines(db, lines)
    totals = compute_totals(lines, policy)

    try:
        sale = Sale(
            entry_mode=policy.value,
            subtotal_amount=totals.subtotal,
            tax_rate=totals.tax_rate,
            tax_amount=totals.tax,
            total_amount=totals.total,
            created_by=acting_user.user_id if acting_user else None,
            request_id=request_id,
        )
        db.add(sale)
        db.flush()
        sale_id = sale.id

        _persist_items(db, sale, lines)

        db.commit()

    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Sale commit failed, rolled back")
        raise PersistenceError("Unable to complete sale", exc) from exc

    logger.info(
        f"Sale {sale_id} recorded mode={policy.value} items={len(lines)} "
        f"total={totals.total} by={acting_user.username if acting_user else '-'}"
    )

    # The sale is durable from here on, a failed re-read must not report it as lost
    try:
        return get_sale(db, sale_id) or sale
    except PersistenceError:
        logger.warning(f"Sale {sale_id} recorded but could not be re-read")
        return sale
