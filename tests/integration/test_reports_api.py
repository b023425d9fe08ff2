"""
Integration tests - cash flow, sales reports, dashboard and pricing.
"""

from datetime import timedelta
from decimal import Decimal
from uuid import UUID

from conftest import create_product

from pos_admin.infrastructure.database.models import AuthUser, Transaction, utcnow


def _checkout(client, headers, quantity=1, payment_method="cash", **product_fields) -> dict:
    product = create_product(client, headers, **product_fields)
    response = client.post(
        "/api/v1/pos/checkout",
        json={
            "items": [{"product_id": product["id"], "quantity": quantity}],
            "payment_method": payment_method,
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["transaction"]


class TestCash:
    """Test cash flows and the daily summary."""

    def test_categories(self, client, owner_headers):
        body = client.get("/api/v1/cash/categories", headers=owner_headers).json()
        assert body["income"][0] == "Sales"
        assert "Other Expense" in body["expense"]

    def test_category_must_match_type(self, client, owner_headers):
        response = client.post(
            "/api/v1/cash/flows",
            json={"type": "income", "amount": 1000, "description": "x", "category": "Rent"},
            headers=owner_headers,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_CATEGORY"

    def test_daily_summary(self, client, owner_headers):
        """net = cash sales + income - expenses."""
        _checkout(client, owner_headers, price=50000)
        _checkout(client, owner_headers, price=30000, payment_method="card")
        client.post(
            "/api/v1/cash/flows",
            json={"type": "income", "amount": 15000, "description": "Modal", "category": "Investment"},
            headers=owner_headers,
        )
        client.post(
            "/api/v1/cash/flows",
            json={"type": "expense", "amount": 40000, "description": "Gas", "category": "Utilities"},
            headers=owner_headers,
        )

        summary = client.get("/api/v1/cash/summary", headers=owner_headers).json()
        assert Decimal(summary["total_sales"]) == Decimal("80000")
        assert Decimal(summary["cash_sales"]) == Decimal("50000")
        assert Decimal(summary["total_income"]) == Decimal("15000")
        assert Decimal(summary["total_expenses"]) == Decimal("40000")
        assert Decimal(summary["net_cash"]) == Decimal("25000")
        assert [f["type"] for f in summary["flows"]] == ["expense", "income"]

    def test_flows_filtered_by_date(self, client, owner_headers):
        yesterday = (utcnow() - timedelta(days=1)).date()
        client.post(
            "/api/v1/cash/flows",
            json={
                "type": "expense",
                "amount": 40000,
                "description": "Sewa",
                "category": "Rent",
                "date": yesterday.isoformat(),
            },
            headers=owner_headers,
        )
        today = client.get("/api/v1/cash/summary", headers=owner_headers).json()
        earlier = client.get(
            "/api/v1/cash/summary", params={"date": yesterday.isoformat()}, headers=owner_headers
        ).json()
        assert Decimal(today["total_expenses"]) == 0
        assert Decimal(earlier["total_expenses"]) == Decimal("40000")


class TestSalesReport:
    """Test the sales report and CSV export."""

    def test_today_report(self, client, owner_headers):
        _checkout(client, owner_headers, price=20000, payment_method="qris")
        _checkout(client, owner_headers, price=10000, payment_method="qris")
        _checkout(client, owner_headers, price=15000, payment_method="cash")

        report = client.get("/api/v1/reports/sales", params={"range": "today"}, headers=owner_headers).json()
        summary = report["summary"]
        assert summary["total_transactions"] == 3
        assert Decimal(summary["total_sales"]) == Decimal("45000")
        assert Decimal(summary["average_order"]) == Decimal("15000")
        assert summary["top_payment_method"] == "qris"
        assert Decimal(report["transactions"][0]["final_amount"]) == Decimal("15000")

    def test_cancelled_sales_excluded(self, client, owner_headers, db_session):
        transaction = _checkout(client, owner_headers)
        row = db_session.query(Transaction).filter(Transaction.id == UUID(transaction["id"])).one()
        row.status = "cancelled"
        db_session.commit()

        report = client.get("/api/v1/reports/sales", headers=owner_headers).json()
        assert report["summary"]["total_transactions"] == 0
        assert report["summary"]["top_payment_method"] == ""

    def test_yesterday_is_empty(self, client, owner_headers):
        _checkout(client, owner_headers)
        report = client.get("/api/v1/reports/sales", params={"range": "yesterday"}, headers=owner_headers).json()
        assert report["transactions"] == []

    def test_custom_open_end(self, client, owner_headers):
        _checkout(client, owner_headers)
        start = (utcnow() - timedelta(days=30)).date().isoformat()
        report = client.get(
            "/api/v1/reports/sales",
            params={"range": "custom", "start_date": start},
            headers=owner_headers,
        ).json()
        assert report["end"] is None
        assert report["summary"]["total_transactions"] == 1

    def test_csv_export(self, client, owner_headers):
        transaction = _checkout(client, owner_headers, price=18000)
        response = client.get("/api/v1/reports/sales.csv", headers=owner_headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        today = utcnow().date().isoformat()
        assert f'filename="sales-report-{today}.csv"' in response.headers["content-disposition"]

        lines = response.text.split("\n")
        assert lines[0] == '"Transaction Number","Date","Customer","Amount","Payment Method"'
        assert lines[1].startswith(f'"{transaction["transaction_number"]}"')
        assert lines[1].endswith('"18000.00","cash"')

    def test_csv_export_empty(self, client, owner_headers):
        response = client.get("/api/v1/reports/sales.csv", headers=owner_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "No transactions to export"


class TestDashboard:
    """Test dashboard metrics and charts."""

    def test_monthly_metrics(self, client, owner_headers, db_session):
        _checkout(client, owner_headers, price=10000)
        cancelled = _checkout(client, owner_headers, price=5000)
        row = db_session.query(Transaction).filter(Transaction.id == UUID(cancelled["id"])).one()
        row.status = "cancelled"
        db_session.commit()

        metrics = {m["title"]: m for m in client.get("/api/v1/dashboard/metrics", headers=owner_headers).json()}
        assert Decimal(metrics["Total orders"]["value"]) == 1
        assert Decimal(metrics["Total sales"]["value"]) == Decimal("10000")
        assert Decimal(metrics["Cancelled orders"]["value"]) == 1
        assert Decimal(metrics["Total sales"]["change"]) == 0

    def test_hourly_sales(self, client, owner_headers):
        _checkout(client, owner_headers, price=10000)
        buckets = client.get("/api/v1/dashboard/hourly-sales", headers=owner_headers).json()
        assert [b["time"] for b in buckets][:3] == ["00", "02", "04"]
        assert len(buckets) == 12
        assert sum(Decimal(b["sales"]) for b in buckets) == Decimal("10000")

    def test_outlet_sales(self, client, owner_headers, db_session):
        _checkout(client, owner_headers, price=10000)
        series = client.get("/api/v1/dashboard/outlet-sales", params={"days": 7}, headers=owner_headers).json()
        assert len(series) == 7
        assert series[-1]["date"] == utcnow().date().isoformat()
        assert Decimal(series[-1]["outlets"]["Kopi Kita Sudirman"]) == Decimal("10000")
        assert Decimal(series[0]["outlets"]["Kopi Kita Sudirman"]) == 0

    def test_last_month_baseline(self, client, owner_headers, db_session, outlet_id):
        _checkout(client, owner_headers, price=15000)
        cashier = db_session.query(AuthUser).first()
        last_month = utcnow().replace(day=1) - timedelta(days=3)
        db_session.add(Transaction(
            transaction_number="TXN-1",
            outlet_id=UUID(outlet_id),
            cashier_id=cashier.id,
            total_amount=Decimal("10000"),
            final_amount=Decimal("10000"),
            status="completed",
            created_at=last_month,
        ))
        db_session.commit()

        metrics = {m["title"]: m for m in client.get("/api/v1/dashboard/metrics", headers=owner_headers).json()}
        assert Decimal(metrics["Total sales"]["change"]) == Decimal("50")
        assert metrics["Total sales"]["change_type"] == "positive"


class TestPricing:
    def test_public_plans(self, client):
        plans = client.get("/api/v1/pricing/plans").json()
        assert [p["name"] for p in plans] == ["Free", "Pro", "Pro Plus"]
        assert plans[1]["is_popular"] is True
        assert plans[2]["price"] == "Rp3.450"
