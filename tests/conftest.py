"""
Pytest configuration and fixtures.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pos_admin.domain.entities import CatalogProduct, SaleRecord
from pos_admin.infrastructure.database import get_db, init_db
from pos_admin.infrastructure.mailer import Mailer, get_mailer
from pos_admin.main import app

PASSWORD = "secret123"


@pytest.fixture
def coffee() -> CatalogProduct:
    return CatalogProduct(
        id=UUID("00000000-0000-0000-0000-0000000000c1"),
        name="Es Kopi Susu",
        price=Decimal("18000"),
        stock_quantity=3,
        category="Drinks",
        cost_price=Decimal("7000"),
    )


@pytest.fixture
def croissant() -> CatalogProduct:
    return CatalogProduct(
        id=UUID("00000000-0000-0000-0000-0000000000c2"),
        name="Croissant",
        price=Decimal("22500"),
        stock_quantity=10,
        category="Bakery",
        cost_price=Decimal("12000"),
    )


@pytest.fixture
def sold_out() -> CatalogProduct:
    return CatalogProduct(id=uuid4(), name="Matcha Latte", price=Decimal("25000"), stock_quantity=0)


@pytest.fixture
def sales() -> list[SaleRecord]:
    return [
        SaleRecord(final_amount=Decimal("50000"), created_at=datetime(2026, 3, 2, 9, 15), payment_method="cash"),
        SaleRecord(final_amount=Decimal("30000"), created_at=datetime(2026, 3, 2, 10, 40), payment_method="qris"),
        SaleRecord(final_amount=Decimal("20000"), created_at=datetime(2026, 3, 2, 13, 5), payment_method="cash"),
    ]


# ----------------------------------------------------------------------- database / API


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def mailer() -> Mailer:
    return Mailer()


@pytest.fixture
def client(session_factory, mailer):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()


def sign_up(client: TestClient, email: str, password: str = PASSWORD, **extra) -> dict:
    response = client.post("/api/v1/auth/sign-up", json={"email": email, "password": password, **extra})
    assert response.status_code == 201, response.text
    return response.json()


def sign_in(client: TestClient, email: str, password: str = PASSWORD) -> dict:
    response = client.post("/api/v1/auth/sign-in", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def create_product(client: TestClient, headers: dict, **fields) -> dict:
    payload = {"name": "Es Kopi Susu", "price": 18000, "cost_price": 7000, "stock_quantity": 10}
    payload.update(fields)
    response = client.post("/api/v1/products", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def owner_headers(client) -> dict:
    """First account (superadmin) with its own outlet."""
    sign_up(client, "owner@example.com", full_name="Sari Owner")
    headers = sign_in(client, "owner@example.com")
    response = client.post(
        "/api/v1/outlets",
        json={"name": "Kopi Kita Sudirman", "address": "Jl. Sudirman 1", "phone": "021-555"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return headers


@pytest.fixture
def outlet_id(client, owner_headers) -> str:
    return client.get("/api/v1/auth/me", headers=owner_headers).json()["outlet_id"]


@pytest.fixture
def staff_headers(client, owner_headers, outlet_id) -> dict:
    """A staff account assigned to the owner's outlet."""
    profile = sign_up(client, "staff@example.com", full_name="Budi Staff", phone="0812345")
    response = client.put(
        f"/api/v1/users/{profile['id']}",
        json={"full_name": "Budi Staff", "phone": "0812345", "role": "staff", "outlet_id": outlet_id},
        headers=owner_headers,
    )
    assert response.status_code == 200, response.text
    return sign_in(client, "staff@example.com")
