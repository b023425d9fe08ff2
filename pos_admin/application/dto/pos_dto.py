"""
API DTOs - Data Transfer Objects for API requests/responses.
"""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from pos_admin.domain.value_objects import CashFlowType, PaymentMethod, StockMovementType


def _normalize_email(value: str) -> str:
    value = value.strip().lower()
    local, _, domain = value.partition("@")
    if not local or "." not in domain:
        raise ValueError("Invalid email address")
    return value


Email = Annotated[str, AfterValidator(_normalize_email)]


# --------------------------------------------------------------------------- auth


class SignUpRequestDTO(BaseModel):
    """DTO - Register an account."""
    email: Email = Field(..., description="Sign-in email")
    password: str = Field(..., description="Password, at least 6 characters")
    full_name: str | None = Field(None, max_length=200)
    phone: str | None = Field(None, max_length=50)


class SignInRequestDTO(BaseModel):
    email: Email
    password: str


class TokenResponseDTO(BaseModel):
    access_token: str
    token_type: str
    expires_in: int


class ForgotPasswordRequestDTO(BaseModel):
    email: Email


class ResetPasswordRequestDTO(BaseModel):
    token: str = Field(..., min_length=1)
    password: str
    confirm_password: str


class ChangePasswordRequestDTO(BaseModel):
    old_password: str
    new_password: str


class MessageDTO(BaseModel):
    message: str


class PermissionsDTO(BaseModel):
    role: str
    permissions: list[str]
    can_manage_users: bool
    can_edit_roles: bool
    can_view_all_outlets: bool


# ----------------------------------------------------------------------- profiles


class ProfileResponseDTO(BaseModel):
    """DTO - User profile."""
    id: UUID
    user_id: UUID
    full_name: str | None
    phone: str | None
    role: str
    subscription_plan: str
    is_active: bool
    outlet_id: UUID | None
    outlet_name: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CurrentUserDTO(ProfileResponseDTO):
    email: Email


class ProfileUpdateDTO(BaseModel):
    """DTO - Edit a user. Empty strings clear the field."""
    full_name: str = ""
    phone: str = ""
    role: str = Field(..., pattern="^(superadmin|admin|manager|cashier|staff)$")
    outlet_id: str = ""
    is_active: bool = True

    @field_validator("outlet_id")
    @classmethod
    def check_outlet_id(cls, value: str) -> str:
        if value:
            UUID(value)
        return value


# ------------------------------------------------------------------------ outlets


class OutletCreateDTO(BaseModel):
    """DTO - Create or update an outlet."""
    name: str = Field(..., min_length=1, max_length=200, description="Outlet name")
    address: str | None = Field(None, description="Street address")
    phone: str | None = Field(None, description="Phone number")
    is_active: bool = True


class OutletInfoDTO(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: str | None = None
    phone: str | None = None

    model_config = ConfigDict(from_attributes=True)


class OutletResponseDTO(BaseModel):
    id: UUID
    name: str
    address: str | None
    phone: str | None
    is_active: bool
    owner_id: UUID
    staff_count: int = 0
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OutletSummaryDTO(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


# --------------------------------------------------------------------- categories


class CategoryCreateDTO(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)


class CategoryResponseDTO(BaseModel):
    id: UUID
    name: str
    outlet_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ----------------------------------------------------------------------- products


class ProductCreateDTO(BaseModel):
    """DTO - Create a product."""
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    sku: str | None = None
    image_url: str | None = None
    price: Decimal = Field(Decimal("0"), ge=0, description="Selling price")
    cost_price: Decimal = Field(Decimal("0"), ge=0, description="Purchase cost")
    stock_quantity: int = Field(0, ge=0)
    min_stock: int = Field(5, ge=0)
    category_id: UUID | None = None
    is_active: bool = True

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "name": "Es Kopi Susu",
            "sku": "KOPI-001",
            "price": 18000,
            "cost_price": 7000,
            "stock_quantity": 40,
            "category_id": None,
        }
    })


class ProductUpdateDTO(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    sku: str | None = None
    image_url: str | None = None
    price: Decimal | None = Field(None, ge=0)
    cost_price: Decimal | None = Field(None, ge=0)
    stock_quantity: int | None = Field(None, ge=0)
    min_stock: int | None = Field(None, ge=0)
    category_id: UUID | None = None
    is_active: bool | None = None


class ProductResponseDTO(BaseModel):
    id: UUID
    name: str
    description: str | None
    sku: str | None
    image_url: str | None
    price: Decimal
    cost_price: Decimal
    stock_quantity: int
    min_stock: int
    is_active: bool
    category_id: UUID | None
    category_name: str | None = None
    outlet_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------- pos


class CatalogProductDTO(BaseModel):
    id: UUID
    name: str
    price: Decimal
    stock_quantity: int
    category: str
    cost_price: Decimal
    min_stock: int
    image_url: str | None

    model_config = ConfigDict(from_attributes=True)


class CartLineDTO(BaseModel):
    product_id: UUID
    quantity: int = Field(..., ge=1, description="Units in the cart")


class QuoteRequestDTO(BaseModel):
    """DTO - Price a cart without saving it."""
    items: list[CartLineDTO] = Field(default_factory=list)
    discount_percent: Decimal = Field(Decimal("0"), ge=0, le=100, description="Discount %")
    tax_percent: Decimal = Field(Decimal("0"), ge=0, le=100, description="Tax %")


class QuoteLineDTO(BaseModel):
    product_id: UUID
    name: str
    quantity: int
    price: Decimal
    total: Decimal


class QuoteResponseDTO(BaseModel):
    items: list[QuoteLineDTO]
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    final_amount: Decimal
    currency: str


class CheckoutRequestDTO(QuoteRequestDTO):
    """DTO - Complete a sale."""
    payment_method: PaymentMethod = PaymentMethod.CASH
    customer_name: str | None = Field(None, max_length=200)
    notes: str | None = None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "items": [{"product_id": "5b8f2d1e-8c3a-4c55-9d4e-0c7d7f1b2a10", "quantity": 2}],
            "discount_percent": 10,
            "tax_percent": 11,
            "payment_method": "cash",
            "customer_name": "Budi",
        }
    })


class TransactionResponseDTO(BaseModel):
    id: UUID
    transaction_number: str
    outlet_id: UUID
    cashier_id: UUID
    customer_name: str | None
    total_amount: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    final_amount: Decimal
    payment_method: str | None
    status: str
    notes: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TransactionItemResponseDTO(BaseModel):
    id: UUID
    product_id: UUID
    product_name: str
    quantity: int
    price: Decimal
    total: Decimal


class CheckoutResponseDTO(BaseModel):
    transaction: TransactionResponseDTO
    items: list[TransactionItemResponseDTO]
    receipt_id: UUID


class ReceiptDTO(BaseModel):
    """DTO - Printable receipt data."""
    transaction: TransactionResponseDTO
    items: list[TransactionItemResponseDTO]
    outlet: OutletInfoDTO


# ---------------------------------------------------------------------- inventory


class StockLevelDTO(BaseModel):
    id: UUID
    name: str
    stock_quantity: int
    cost_price: Decimal
    price: Decimal
    stock_value: Decimal
    status: str


class StockAdjustRequestDTO(BaseModel):
    """DTO - Add or remove stock."""
    product_id: UUID
    type: StockMovementType
    quantity: int = Field(..., gt=0)
    reason: str | None = Field(None, max_length=500)


class StockMovementResponseDTO(BaseModel):
    id: UUID
    product_id: UUID
    product_name: str | None
    type: str
    quantity: int
    reason: str | None
    reference_id: UUID | None
    created_at: datetime


# --------------------------------------------------------------------------- cash


class CashFlowCreateDTO(BaseModel):
    """DTO - Record an income or expense."""
    type: CashFlowType
    amount: Decimal = Field(..., gt=0)
    description: str = Field(..., min_length=1, max_length=500)
    category: str = Field(..., min_length=1)
    date: date_type | None = Field(None, description="Defaults to today")


class CashFlowResponseDTO(BaseModel):
    id: UUID
    type: CashFlowType
    amount: Decimal
    description: str
    category: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CashSummaryDTO(BaseModel):
    date: date_type
    total_sales: Decimal
    cash_sales: Decimal
    total_income: Decimal
    total_expenses: Decimal
    net_cash: Decimal
    flows: list[CashFlowResponseDTO]


class CashCategoriesDTO(BaseModel):
    income: list[str]
    expense: list[str]


# ------------------------------------------------------------------------ reports


class SalesSummaryDTO(BaseModel):
    total_sales: Decimal
    total_transactions: int
    average_order: Decimal
    top_payment_method: str

    model_config = ConfigDict(from_attributes=True)


class SalesReportDTO(BaseModel):
    """DTO - Sales report for a date range."""
    range: str
    start: datetime | None
    end: datetime | None
    summary: SalesSummaryDTO
    transactions: list[TransactionResponseDTO]


# ---------------------------------------------------------------------- dashboard


class MetricDTO(BaseModel):
    title: str
    value: Decimal
    previous: Decimal
    change: Decimal
    change_type: str


class HourlySalesDTO(BaseModel):
    time: str
    sales: Decimal


class OutletDailySalesDTO(BaseModel):
    day: str
    date: date_type
    outlets: dict[str, Decimal]


# ------------------------------------------------------------------------ pricing


class PricingPlanDTO(BaseModel):
    code: str
    name: str
    price: str
    period: str = "day"
    features: list[str]
    is_popular: bool = False
