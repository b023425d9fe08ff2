"""
Integration tests - catalog, checkout, receipts, products and inventory.
"""

from decimal import Decimal
from uuid import UUID

from conftest import create_product, sign_in, sign_up

from pos_admin.infrastructure.database.models import (
    AuthUser,
    ProductCategory,
    StockMovement,
    Transaction,
    TransactionItem,
)


def _category(client, headers, name: str) -> dict:
    response = client.post("/api/v1/settings/categories", json={"name": name}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestCatalog:
    """Test the register's product list."""

    def test_products_with_category_names(self, client, owner_headers):
        drinks = _category(client, owner_headers, "Drinks")
        create_product(client, owner_headers, name="Es Kopi Susu", category_id=drinks["id"])
        create_product(client, owner_headers, name="Air Mineral")

        products = client.get("/api/v1/pos/products", headers=owner_headers).json()
        assert [(p["name"], p["category"]) for p in products] == [
            ("Air Mineral", "Uncategorized"),
            ("Es Kopi Susu", "Drinks"),
        ]

    def test_search_and_category_filter(self, client, owner_headers):
        bakery = _category(client, owner_headers, "Bakery")
        create_product(client, owner_headers, name="Croissant", category_id=bakery["id"])
        create_product(client, owner_headers, name="Es Kopi Susu")

        found = client.get("/api/v1/pos/products", params={"search": "KOPI"}, headers=owner_headers).json()
        assert [p["name"] for p in found] == ["Es Kopi Susu"]

        bakery_only = client.get(
            "/api/v1/pos/products", params={"category": "Bakery"}, headers=owner_headers
        ).json()
        assert [p["name"] for p in bakery_only] == ["Croissant"]

        everything = client.get("/api/v1/pos/products", params={"category": "all"}, headers=owner_headers).json()
        assert len(everything) == 2

    def test_inactive_products_hidden(self, client, owner_headers):
        product = create_product(client, owner_headers, name="Old Stock")
        client.delete(f"/api/v1/products/{product['id']}", headers=owner_headers)
        assert client.get("/api/v1/pos/products", headers=owner_headers).json() == []

    def test_categories_start_with_all(self, client, owner_headers):
        _category(client, owner_headers, "Drinks")
        _category(client, owner_headers, "Bakery")
        assert client.get("/api/v1/pos/categories", headers=owner_headers).json() == ["all", "Bakery", "Drinks"]


class TestQuote:
    def test_quote_totals(self, client, owner_headers):
        product = create_product(client, owner_headers, price=18000)
        response = client.post(
            "/api/v1/pos/quote",
            json={
                "items": [{"product_id": product["id"], "quantity": 2}],
                "discount_percent": 10,
                "tax_percent": 11,
            },
            headers=owner_headers,
        )
        body = response.json()
        assert response.status_code == 200
        assert Decimal(body["subtotal"]) == Decimal("36000")
        assert Decimal(body["discount_amount"]) == Decimal("3600")
        assert Decimal(body["tax_amount"]) == Decimal("3564")
        assert Decimal(body["final_amount"]) == Decimal("35964")
        assert body["currency"] == "IDR"

    def test_quote_over_stock(self, client, owner_headers):
        product = create_product(client, owner_headers, stock_quantity=1)
        response = client.post(
            "/api/v1/pos/quote",
            json={"items": [{"product_id": product["id"], "quantity": 2}]},
            headers=owner_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Only 1 items available"


class TestCheckout:
    """Test checkout persistence."""

    def test_checkout_persists_sale_and_decrements_stock(self, client, owner_headers, db_session):
        product = create_product(client, owner_headers, price=18000, stock_quantity=10)
        response = client.post(
            "/api/v1/pos/checkout",
            json={
                "items": [{"product_id": product["id"], "quantity": 2}],
                "discount_percent": 10,
                "tax_percent": 11,
                "payment_method": "qris",
                "customer_name": "Budi",
            },
            headers=owner_headers,
        )
        assert response.status_code == 201, response.text
        body = response.json()
        transaction = body["transaction"]
        assert transaction["status"] == "completed"
        assert transaction["transaction_number"].startswith("TXN-")
        assert transaction["payment_method"] == "qris"
        assert Decimal(transaction["final_amount"]) == Decimal("35964")
        assert body["receipt_id"] == transaction["id"]
        assert body["items"][0]["product_name"] == "Es Kopi Susu"

        stock = client.get(f"/api/v1/products/{product['id']}", headers=owner_headers).json()
        assert stock["stock_quantity"] == 8

        movements = client.get("/api/v1/inventory/movements", headers=owner_headers).json()
        assert movements[0]["type"] == "out"
        assert movements[0]["quantity"] == 2
        assert movements[0]["reference_id"] == transaction["id"]

        assert db_session.query(TransactionItem).count() == 1

    def test_timestamps_stored_as_naive_utc(self, client, owner_headers, db_session):
        product = create_product(client, owner_headers)
        client.post(
            "/api/v1/pos/checkout",
            json={"items": [{"product_id": product["id"], "quantity": 1}]},
            headers=owner_headers,
        )
        row = db_session.query(Transaction).one()
        assert row.created_at.tzinfo is None
        assert Transaction.__table__.c.created_at.type.timezone is False

    def test_stock_shortfall_saves_nothing(self, client, owner_headers, db_session):
        cheap = create_product(client, owner_headers, name="Permen", stock_quantity=5)
        scarce = create_product(client, owner_headers, name="Roti", stock_quantity=1)
        response = client.post(
            "/api/v1/pos/checkout",
            json={"items": [
                {"product_id": cheap["id"], "quantity": 1},
                {"product_id": scarce["id"], "quantity": 3},
            ]},
            headers=owner_headers,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "STOCK_LIMIT"
        assert db_session.query(Transaction).count() == 0
        assert db_session.query(StockMovement).count() == 0
        assert client.get(f"/api/v1/products/{cheap['id']}", headers=owner_headers).json()["stock_quantity"] == 5

    def test_empty_cart(self, client, owner_headers):
        response = client.post("/api/v1/pos/checkout", json={"items": []}, headers=owner_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "EMPTY_CART"

    def test_no_outlet_assigned(self, client, owner_headers):
        sign_up(client, "drifter@example.com")
        headers = sign_in(client, "drifter@example.com")
        response = client.post("/api/v1/pos/checkout", json={"items": []}, headers=headers)
        assert response.status_code == 400
        assert response.json()["code"] == "NO_OUTLET_ASSIGNED"

    def test_out_of_stock_product(self, client, owner_headers):
        product = create_product(client, owner_headers, stock_quantity=0)
        response = client.post(
            "/api/v1/pos/checkout",
            json={"items": [{"product_id": product["id"], "quantity": 1}]},
            headers=owner_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Es Kopi Susu is out of stock"


class TestReceipts:
    """Test receipt lookup."""

    def _sell(self, client, headers) -> str:
        product = create_product(client, headers)
        response = client.post(
            "/api/v1/pos/checkout",
            json={"items": [{"product_id": product["id"], "quantity": 1}]},
            headers=headers,
        )
        return response.json()["receipt_id"]

    def test_receipt_has_outlet_and_items(self, client, owner_headers):
        receipt = client.get(f"/api/v1/receipts/{self._sell(client, owner_headers)}", headers=owner_headers).json()
        assert receipt["outlet"] == {"name": "Kopi Kita Sudirman", "address": "Jl. Sudirman 1", "phone": "021-555"}
        assert receipt["items"][0]["product_name"] == "Es Kopi Susu"

    def test_other_outlet_receipt_is_hidden(self, client, owner_headers, staff_headers):
        receipt_id = self._sell(client, owner_headers)
        other = client.post("/api/v1/outlets", json={"name": "Cabang Dua"}, headers=owner_headers).json()
        profile = client.get("/api/v1/auth/me", headers=staff_headers).json()
        client.put(
            f"/api/v1/users/{profile['id']}",
            json={"role": "staff", "outlet_id": other["id"]},
            headers=owner_headers,
        )
        assert client.get(f"/api/v1/receipts/{receipt_id}", headers=staff_headers).status_code == 404

    def test_staff_of_same_outlet_can_read(self, client, owner_headers, staff_headers):
        receipt_id = self._sell(client, owner_headers)
        assert client.get(f"/api/v1/receipts/{receipt_id}", headers=staff_headers).status_code == 200

    def test_superadmin_reads_any_outlet(self, client, owner_headers, db_session):
        other = client.post(
            "/api/v1/outlets", json={"name": "Cabang Dua", "address": "Jl. Thamrin 9"}, headers=owner_headers
        ).json()
        owner = db_session.query(AuthUser).filter(AuthUser.email == "owner@example.com").one()
        transaction = Transaction(
            transaction_number="TXN-42",
            outlet_id=UUID(other["id"]),
            cashier_id=owner.id,
            total_amount=Decimal("12000"),
            final_amount=Decimal("12000"),
            payment_method="cash",
            status="completed",
        )
        db_session.add(transaction)
        db_session.commit()

        response = client.get(f"/api/v1/receipts/{transaction.id}", headers=owner_headers)
        assert response.status_code == 200
        assert response.json()["outlet"]["name"] == "Cabang Dua"


class TestProducts:
    def test_soft_delete(self, client, owner_headers):
        product = create_product(client, owner_headers)
        assert client.delete(f"/api/v1/products/{product['id']}", headers=owner_headers).status_code == 204
        assert client.get("/api/v1/products", headers=owner_headers).json() == []
        listed = client.get("/api/v1/products", params={"include_inactive": True}, headers=owner_headers).json()
        assert listed[0]["is_active"] is False

    def test_update_partial(self, client, owner_headers):
        product = create_product(client, owner_headers, price=18000)
        response = client.put(
            f"/api/v1/products/{product['id']}", json={"price": 20000}, headers=owner_headers
        )
        assert Decimal(response.json()["price"]) == Decimal("20000")
        assert response.json()["name"] == "Es Kopi Susu"

    def test_negative_price_rejected(self, client, owner_headers):
        response = client.post("/api/v1/products", json={"name": "X", "price": -1}, headers=owner_headers)
        assert response.status_code == 422

    def test_staff_cannot_create(self, client, staff_headers):
        response = client.post("/api/v1/products", json={"name": "X"}, headers=staff_headers)
        assert response.status_code == 403

    def test_category_from_other_outlet_rejected(self, client, owner_headers, db_session):
        other = client.post("/api/v1/outlets", json={"name": "Cabang Dua"}, headers=owner_headers).json()
        category = ProductCategory(name="Drinks", outlet_id=UUID(other["id"]))
        db_session.add(category)
        db_session.commit()

        response = client.post(
            "/api/v1/products",
            json={"name": "Es Teh", "category_id": str(category.id)},
            headers=owner_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Category does not belong to this outlet"


class TestInventory:
    """Test stock levels and adjustments."""

    def test_stock_levels(self, client, owner_headers):
        create_product(client, owner_headers, name="A", stock_quantity=5, cost_price=1000)
        create_product(client, owner_headers, name="B", stock_quantity=20, cost_price=1000)
        create_product(client, owner_headers, name="C", stock_quantity=21, cost_price=1000)

        levels = client.get("/api/v1/inventory/stock", headers=owner_headers).json()
        assert [lvl["status"] for lvl in levels] == ["Low Stock", "Medium", "Good"]
        assert Decimal(levels[2]["stock_value"]) == Decimal("21000")

    def test_adjust_in_and_out(self, client, owner_headers):
        product = create_product(client, owner_headers, stock_quantity=4)
        stock_in = client.post(
            "/api/v1/inventory/adjust",
            json={"product_id": product["id"], "type": "in", "quantity": 6, "reason": "Restock"},
            headers=owner_headers,
        )
        assert stock_in.status_code == 201
        assert stock_in.json()["product_name"] == "Es Kopi Susu"

        too_much = client.post(
            "/api/v1/inventory/adjust",
            json={"product_id": product["id"], "type": "out", "quantity": 11},
            headers=owner_headers,
        )
        assert too_much.status_code == 400
        assert too_much.json()["code"] == "INSUFFICIENT_STOCK"

        current = client.get(f"/api/v1/products/{product['id']}", headers=owner_headers).json()
        assert current["stock_quantity"] == 10

    def test_zero_quantity_rejected(self, client, owner_headers):
        product = create_product(client, owner_headers)
        response = client.post(
            "/api/v1/inventory/adjust",
            json={"product_id": product["id"], "type": "in", "quantity": 0},
            headers=owner_headers,
        )
        assert response.status_code == 422
