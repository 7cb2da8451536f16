# tests/conftest.py
# ---------------------------------------------------------------------
# - Settings are read at import time, so the environment is set first
# - Every test gets a fresh in-memory SQLite database (StaticPool so the
#   TestClient threadpool sees the same connection)
# - Requests get their own session, tests use the `db` session
# ---------------------------------------------------------------------

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SEED_DEFAULTS", "false")

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.auth import SessionContext
from app.core.hashing import hash_password
from app.core.jwt import create_access_token
from app.database import Base, get_db
from app.main import app
from app.models.products import Product
from app.models.sale_items import SaleItem
from app.models.sales import Sale
from app.models.users import User, ROLE_ADMIN, ROLE_CASHIER


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ---------- Users ----------
def _make_user(db, username, role):
    user = User(username=username, role=role, password_hash=hash_password("s3cret-pass"))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db):
    return _make_user(db, "admin", ROLE_ADMIN)


@pytest.fixture
def cashier_user(db):
    return _make_user(db, "cashier1", ROLE_CASHIER)


@pytest.fixture
def cashier_session(cashier_user):
    return SessionContext.from_user(cashier_user)


def _auth_headers(user):
    token = create_access_token(data={"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    return _auth_headers(admin_user)


@pytest.fixture
def cashier_headers(cashier_user):
    return _auth_headers(cashier_user)


# ---------- Catalog / sales helpers ----------
@pytest.fixture
def make_product(db):
    def _make(name="Premium Espresso Beans 1kg", price="45.00", category="Coffee", status="active"):
        product = Product(name=name, price=Decimal(price), category=category, status=status)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def make_sale(db, make_product):
    """Insert a finished log-book sale of one item with a given total and timestamp."""
    state = {}

    def _make(total, created_at=None, entry_mode="log"):
        if "product" not in state:
            state["product"] = make_product(name="Ledger Item", price="1.00", category="Misc")
        total = Decimal(total)
        sale = Sale(
            entry_mode=entry_mode,
            subtotal_amount=total,
            tax_rate=Decimal("0"),
            tax_amount=Decimal("0.00"),
            total_amount=total,
            created_at=created_at or datetime.now(timezone.utc),
        )
        sale.items.append(
            SaleItem(
                product_id=state["product"].id,
                quantity=1,
                price_at_sale=total,
                line_total=total,
            )
        )
        db.add(sale)
        db.commit()
        db.refresh(sale)
        return sale

    return _make
