"""
Infrastructure - SQLModel database models.
"""

from datetime import UTC, datetime
from datetime import date as date_type
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in every table."""
    return datetime.now(UTC).replace(tzinfo=None)


def money_field(default: Decimal = Decimal("0")):
    return Field(default=default, max_digits=14, decimal_places=2)


class AuthUser(SQLModel, table=True):
    """Authentication identity (email + password)."""

    __tablename__ = "auth_users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True)
    password_hash: str
    password_salt: str
    failed_login_attempts: int = 0
    locked_until: datetime | None = Field(default=None, sa_type=DateTime)
    last_sign_in_at: datetime | None = Field(default=None, sa_type=DateTime)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class AuthSession(SQLModel, table=True):
    """Signed-in session; the id is the ``jti`` of its access token."""

    __tablename__ = "auth_sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="auth_users.id", index=True)
    expires_at: datetime = Field(sa_type=DateTime)
    revoked_at: datetime | None = Field(default=None, sa_type=DateTime)
    user_agent: str | None = None
    ip_address: str | None = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class PasswordResetToken(SQLModel, table=True):
    __tablename__ = "password_reset_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="auth_users.id", index=True)
    token_hash: str = Field(unique=True, index=True)
    expires_at: datetime = Field(sa_type=DateTime)
    used_at: datetime | None = Field(default=None, sa_type=DateTime)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class Outlet(SQLModel, table=True):
    """A single store or branch location."""

    __tablename__ = "outlets"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    address: str | None = None
    phone: str | None = None
    is_active: bool = True
    owner_id: UUID = Field(foreign_key="auth_users.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class Profile(SQLModel, table=True):
    """Application user record, distinct from the auth identity."""

    __tablename__ = "profiles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="auth_users.id", unique=True, index=True)
    full_name: str | None = None
    phone: str | None = None
    role: str = "staff"  # superadmin, admin, manager, cashier, staff
    subscription_plan: str = "free"  # free, pro, pro_plus
    is_active: bool = True
    outlet_id: UUID | None = Field(default=None, foreign_key="outlets.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class ProductCategory(SQLModel, table=True):
    __tablename__ = "product_categories"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    outlet_id: UUID = Field(foreign_key="outlets.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(index=True)
    description: str | None = None
    sku: str | None = None
    image_url: str | None = None
    price: Decimal = money_field()
    cost_price: Decimal = money_field()
    stock_quantity: int = 0
    min_stock: int = 5
    is_active: bool = True
    category_id: UUID | None = Field(default=None, foreign_key="product_categories.id")
    outlet_id: UUID = Field(foreign_key="outlets.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class Transaction(SQLModel, table=True):
    """Sales transaction recorded by the register."""

    __tablename__ = "transactions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    transaction_number: str = Field(unique=True, index=True)
    outlet_id: UUID = Field(foreign_key="outlets.id", index=True)
    cashier_id: UUID = Field(foreign_key="auth_users.id")
    customer_name: str | None = None
    total_amount: Decimal = money_field()
    discount_amount: Decimal = money_field()
    tax_amount: Decimal = money_field()
    final_amount: Decimal = money_field()
    payment_method: str | None = "cash"  # cash, card, e_wallet, qris, bank_transfer
    status: str = Field(default="pending", index=True)  # pending, completed, cancelled, refunded
    notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class TransactionItem(SQLModel, table=True):
    __tablename__ = "transaction_items"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    transaction_id: UUID = Field(foreign_key="transactions.id", index=True)
    product_id: UUID = Field(foreign_key="products.id")
    quantity: int
    price: Decimal = money_field()
    total: Decimal = money_field()
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class StockMovement(SQLModel, table=True):
    __tablename__ = "stock_movements"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    product_id: UUID = Field(foreign_key="products.id", index=True)
    type: str  # in, out
    quantity: int
    reason: str | None = None
    reference_id: UUID | None = None  # transaction id for sales
    user_id: UUID = Field(foreign_key="auth_users.id")
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, index=True)


class Income(SQLModel, table=True):
    __tablename__ = "incomes"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    outlet_id: UUID = Field(foreign_key="outlets.id", index=True)
    user_id: UUID = Field(foreign_key="auth_users.id")
    amount: Decimal = money_field()
    category: str
    description: str
    date: date_type = Field(default_factory=lambda: utcnow().date())
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class Expense(SQLModel, table=True):
    __tablename__ = "expenses"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    outlet_id: UUID = Field(foreign_key="outlets.id", index=True)
    user_id: UUID = Field(foreign_key="auth_users.id")
    amount: Decimal = money_field()
    category: str
    description: str
    date: date_type = Field(default_factory=lambda: utcnow().date())
    receipt_image_url: str | None = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
