"""
Domain Entities - cart, checkout and the records the summaries reduce over.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal

from pos_admin.core.exceptions import OutOfStockError, StockLimitError

from .value_objects import ZERO, UNCATEGORIZED, CashFlowType, Money


@dataclass(frozen=True)
class CatalogProduct:
    """A sellable product as shown on the register."""
    id: uuid.UUID
    name: str
    price: Decimal
    stock_quantity: int
    category: str = UNCATEGORIZED
    cost_price: Decimal = ZERO
    min_stock: int = 5
    image_url: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class CartItem:
    product: CatalogProduct
    quantity: int

    @property
    def product_id(self) -> uuid.UUID:
        return self.product.id

    @property
    def price(self) -> Decimal:
        return self.product.price

    @property
    def total(self) -> Decimal:
        return self.product.price * self.quantity


@dataclass(frozen=True)
class Cart:
    """
    Entity - shopping cart of the register.

    Every operation returns a new cart; the stock check uses the stock level
    captured on the product when it was added.
    """
    items: tuple[CartItem, ...] = ()
    customer_name: str = ""
    discount_percent: Decimal = ZERO
    tax_percent: Decimal = ZERO
    currency: str = "IDR"

    def find(self, product_id: uuid.UUID) -> CartItem | None:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def add(self, product: CatalogProduct) -> "Cart":
        if product.stock_quantity <= 0:
            raise OutOfStockError(product.name)

        existing = self.find(product.id)
        if existing is None:
            return replace(self, items=self.items + (CartItem(product, 1),))

        if existing.quantity >= product.stock_quantity:
            raise StockLimitError(product.name, product.stock_quantity)

        return self._with_quantity(product.id, existing.quantity + 1)

    def update_quantity(self, product_id: uuid.UUID, quantity: int) -> "Cart":
        if quantity <= 0:
            return self.remove(product_id)

        existing = self.find(product_id)
        if existing is None:
            return self
        if quantity > existing.product.stock_quantity:
            raise StockLimitError(existing.product.name, existing.product.stock_quantity)

        return self._with_quantity(product_id, quantity)

    def remove(self, product_id: uuid.UUID) -> "Cart":
        return replace(self, items=tuple(i for i in self.items if i.product_id != product_id))

    def clear(self) -> "Cart":
        return Cart(currency=self.currency)

    def with_adjustments(
        self,
        discount_percent: Decimal = ZERO,
        tax_percent: Decimal = ZERO,
        customer_name: str = "",
    ) -> "Cart":
        return replace(
            self,
            discount_percent=Decimal(discount_percent),
            tax_percent=Decimal(tax_percent),
            customer_name=customer_name,
        )

    def _with_quantity(self, product_id: uuid.UUID, quantity: int) -> "Cart":
        return replace(
            self,
            items=tuple(
                replace(item, quantity=quantity) if item.product_id == product_id else item
                for item in self.items
            ),
        )

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def subtotal(self) -> Money:
        return Money(sum((item.total for item in self.items), ZERO), self.currency)


@dataclass(frozen=True)
class CheckoutTotals:
    subtotal: Money
    discount_amount: Money
    tax_amount: Money
    final_amount: Money


@dataclass(frozen=True)
class SaleRecord:
    """A persisted transaction, reduced to the fields reports read."""
    final_amount: Decimal
    created_at: datetime
    payment_method: str | None = None
    total_amount: Decimal = ZERO
    discount_amount: Decimal = ZERO
    status: str = "completed"
    outlet_id: uuid.UUID | None = None
    transaction_number: str = ""
    customer_name: str | None = None


@dataclass(frozen=True)
class CashFlowEntry:
    id: uuid.UUID
    type: CashFlowType
    amount: Decimal
    description: str
    category: str
    created_at: datetime


@dataclass
class CashSummary:
    total_sales: Decimal = ZERO
    cash_sales: Decimal = ZERO
    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    net_cash: Decimal = ZERO
    flows: list[CashFlowEntry] = field(default_factory=list)


@dataclass
class SalesSummary:
    total_sales: Decimal = ZERO
    total_transactions: int = 0
    average_order: Decimal = ZERO
    top_payment_method: str = ""


@dataclass(frozen=True)
class ProfileCard:
    """User directory entry used for searching."""
    id: uuid.UUID
    role: str
    full_name: str | None = None
    phone: str | None = None
