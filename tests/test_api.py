"""End-to-end tests through the HTTP API."""

import csv
import io
from decimal import Decimal

from sqlalchemy.exc import OperationalError

from app.core.errors import PersistenceError
from app.routers import sales as sales_router
from app.services import reporting


def _checkout_payload(*lines, request_id=None):
    payload = {
        "items": [
            {"product_id": product.id, "quantity": quantity, "unit_price": str(product.price)}
            for product, quantity in lines
        ]
    }
    if request_id:
        payload["request_id"] = request_id
    return payload


# ---------------- AUTH ----------------
def test_login_and_me(client, cashier_user) -> None:
    response = client.post(
        "/auth/login",
        data={"username": "cashier1", "password": "s3cret-pass"},
    )
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert me.status_code == 200
    assert me.json() == {"user_id": cashier_user.id, "username": "cashier1", "role": "CASHIER"}


def test_login_rejects_bad_password(client, cashier_user) -> None:
    response = client.post("/auth/login", data={"username": "cashier1", "password": "nope"})

    assert response.status_code == 401


def test_requests_without_token_are_rejected(client) -> None:
    assert client.get("/products").status_code == 401


def test_admin_creates_user(client, admin_headers) -> None:
    response = client.post(
        "/auth/users",
        json={"username": "cashier2", "password": "till-two-pass", "role": "CASHIER"},
        headers=admin_headers,
    )

    assert response.status_code == 201
    assert response.json()["role"] == "CASHIER"


# ---------------- PRODUCTS ----------------
def test_product_lifecycle(client, admin_headers) -> None:
    created = client.post(
        "/products",
        json={"name": "Honey Lavender Syrup", "price": "18.00", "category": "Beverages"},
        headers=admin_headers,
    )
    assert created.status_code == 201
    product = created.json()
    assert product["status"] == "active"

    updated = client.put(
        f"/products/{product['id']}",
        json={"price": "19.50"},
        headers=admin_headers,
    )
    assert updated.status_code == 200
    assert Decimal(updated.json()["price"]) == Decimal("19.50")

    assert client.delete(f"/products/{product['id']}", headers=admin_headers).status_code == 204
    assert client.delete(f"/products/{product['id']}", headers=admin_headers).status_code == 204

    active = client.get("/products", params={"active_only": True}, headers=admin_headers)
    assert active.json() == []

    fetched = client.get(f"/products/{product['id']}", headers=admin_headers)
    assert fetched.json()["status"] == "inactive"


def test_cashier_cannot_change_catalog(client, cashier_headers) -> None:
    response = client.post(
        "/products",
        json={"name": "Sneaky", "price": "1.00"},
        headers=cashier_headers,
    )

    assert response.status_code == 403


def test_update_missing_product_is_404(client, admin_headers) -> None:
    response = client.put("/products/999", json={"name": "Ghost"}, headers=admin_headers)

    assert response.status_code == 404


def test_negative_price_is_rejected(client, admin_headers) -> None:
    response = client.post(
        "/products",
        json={"name": "Broken", "price": "-1.00"},
        headers=admin_headers,
    )

    assert response.status_code == 422


def test_categories(client, cashier_headers, make_product) -> None:
    make_product(name="Espresso", category="Coffee")
    make_product(name="Chocolate", category="Sweets")

    response = client.get("/products/categories", headers=cashier_headers)

    assert response.json() == ["Coffee", "Sweets"]


# ---------------- SALES ----------------
def test_pos_checkout(client, cashier_headers, cashier_user, make_product) -> None:
    espresso = make_product(name="Premium Espresso Beans 1kg", price="45.00")
    chocolate = make_product(name="Artisan Dark Chocolate", price="12.50", category="Sweets")

    response = client.post(
        "/sales/checkout",
        json=_checkout_payload((espresso, 2), (chocolate, 1)),
        headers=cashier_headers,
    )

    assert response.status_code == 201
    sale = response.json()
    assert sale["entry_mode"] == "pos"
    assert Decimal(sale["subtotal_amount"]) == Decimal("102.50")
    assert Decimal(sale["tax_amount"]) == Decimal("8.20")
    assert Decimal(sale["total_amount"]) == Decimal("110.70")
    assert sale["created_by"] == cashier_user.id
    assert [item["product_name"] for item in sale["items"]] == [espresso.name, chocolate.name]
    assert [Decimal(item["line_total"]) for item in sale["items"]] == [
        Decimal("90.00"),
        Decimal("12.50"),
    ]


def test_log_entry_drops_blank_rows(client, cashier_headers, make_product) -> None:
    espresso = make_product(price="45.00")

    response = client.post(
        "/sales/log",
        json={
            "items": [
                {"product_id": espresso.id, "quantity": 2, "unit_price": "45.00"},
                {"product_id": None, "quantity": 1},
            ]
        },
        headers=cashier_headers,
    )

    assert response.status_code == 201
    sale = response.json()
    assert sale["entry_mode"] == "log"
    assert Decimal(sale["total_amount"]) == Decimal("90.00")
    assert len(sale["items"]) == 1


def test_empty_checkout_is_400_and_records_nothing(client, cashier_headers, admin_headers) -> None:
    response = client.post(
        "/sales/checkout",
        json={"items": [{"product_id": None, "quantity": 1}]},
        headers=cashier_headers,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "no valid items"
    assert client.get("/sales", headers=admin_headers).json() == []


def test_unknown_product_is_retryable_failure(client, cashier_headers) -> None:
    response = client.post(
        "/sales/checkout",
        json={"items": [{"product_id": 404, "quantity": 1, "unit_price": "1.00"}]},
        headers=cashier_headers,
    )

    assert response.status_code == 503
    assert "try again" in response.json()["detail"]


def test_duplicate_request_id_returns_same_sale(client, cashier_headers, make_product) -> None:
    espresso = make_product(price="45.00")
    payload = _checkout_payload((espresso, 1), request_id="till-1-0042")

    first = client.post("/sales/checkout", json=payload, headers=cashier_headers)
    second = client.post("/sales/checkout", json=payload, headers=cashier_headers)

    assert first.json()["id"] == second.json()["id"]
    assert len(client.get("/sales", headers=cashier_headers).json()) == 1


def test_quote(client, cashier_headers, make_product) -> None:
    espresso = make_product(price="45.00")
    chocolate = make_product(name="Artisan Dark Chocolate", price="12.50")

    response = client.post(
        "/sales/quote",
        json={"mode": "pos", **_checkout_payload((espresso, 2), (chocolate, 1))},
        headers=cashier_headers,
    )

    body = response.json()
    assert Decimal(body["subtotal"]) == Decimal("102.50")
    assert Decimal(body["tax"]) == Decimal("8.20")
    assert Decimal(body["total"]) == Decimal("110.70")
    assert body["unit_count"] == 3


def test_receipt_keeps_price_after_product_edit(client, admin_headers, cashier_headers, make_product) -> None:
    product = make_product(name="Drip Filter", price="10.00")
    sale = client.post(
        "/sales/log",
        json=_checkout_payload((product, 1)),
        headers=cashier_headers,
    ).json()

    client.put(f"/products/{product.id}", json={"price": "15.00"}, headers=admin_headers)
    client.delete(f"/products/{product.id}", headers=admin_headers)

    receipt = client.get(f"/sales/{sale['id']}", headers=cashier_headers).json()
    item = receipt["items"][0]
    assert Decimal(item["price_at_sale"]) == Decimal("10.00")
    assert Decimal(item["line_total"]) == Decimal("10.00")
    assert item["product_name"] == "Drip Filter"


def test_missing_sale_is_404(client, cashier_headers) -> None:
    assert client.get("/sales/999", headers=cashier_headers).status_code == 404


def test_history_amount_filter(client, admin_headers, make_sale) -> None:
    make_sale("30.00")
    expected = make_sale("75.00")
    make_sale("120.00")

    response = client.get(
        "/sales",
        params={"min_amount": "50", "max_amount": "100"},
        headers=admin_headers,
    )

    assert [sale["id"] for sale in response.json()] == [expected.id]


# ---------------- REPORTS ----------------
def test_dashboard(client, admin_headers, make_sale) -> None:
    make_sale("50.00")
    make_sale("25.00")

    response = client.get("/reports/dashboard", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["today_revenue"]) == Decimal("75.00")
    assert body["total_orders"] == 2
    assert len(body["weekly_trend"]) == 7
    assert len(body["recent_sales"]) == 2
    assert body["error"] is None


def test_dashboard_degrades_on_read_failure(client, admin_headers, monkeypatch) -> None:
    def broken(db, today=None):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(reporting, "dashboard_stats", broken)

    response = client.get("/reports/dashboard", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["error"]
    assert body["total_orders"] == 0
    assert len(body["weekly_trend"]) == 7


def test_dashboard_is_admin_only(client, cashier_headers) -> None:
    assert client.get("/reports/dashboard", headers=cashier_headers).status_code == 403


def test_trend(client, admin_headers, make_sale) -> None:
    make_sale("12.00")

    points = client.get("/reports/trend", headers=admin_headers).json()

    assert len(points) == 7
    assert Decimal(points[-1]["revenue"]) == Decimal("12.00")


def test_trend_degrades_on_read_failure(client, admin_headers, monkeypatch) -> None:
    def broken(db, today=None):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(reporting, "weekly_trend", broken)

    response = client.get("/reports/trend", headers=admin_headers)

    assert response.status_code == 200
    points = response.json()
    assert len(points) == 7
    assert all(Decimal(point["revenue"]) == 0 for point in points)


def test_history_read_failure_is_503(client, cashier_headers, monkeypatch) -> None:
    def broken(db, filters=None, limit=None, offset=0):
        raise PersistenceError("Unable to read sales history")

    monkeypatch.setattr(sales_router, "filter_sales", broken)

    response = client.get("/sales", headers=cashier_headers)

    assert response.status_code == 503


# ---------------- EXPORTS ----------------
def test_csv_export(client, admin_headers, make_sale) -> None:
    sale = make_sale("75.00")

    response = client.get("/exports/sales.csv", headers=admin_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "leonisa_sales_report_" in response.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == ["Receipt ID", "Date", "Total Amount", "Items Count"]
    assert rows[1][0] == str(sale.id)
    assert rows[1][2:] == ["75.00", "1"]


def test_xlsx_export(client, admin_headers, make_sale) -> None:
    make_sale("75.00")

    response = client.get("/exports/sales.xlsx", headers=admin_headers)

    assert response.status_code == 200
    assert response.content[:2] == b"PK"


def test_health(client) -> None:
    assert client.get("/").status_code == 200
