"""
Domain Layer - Pure Python business logic for the point-of-sale admin.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

CENT = Decimal("0.01")
ZERO = Decimal("0")


def round_money(amount: Decimal) -> Decimal:
    """Round half-up to 2 decimal places."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    E_WALLET = "e_wallet"
    QRIS = "qris"
    BANK_TRANSFER = "bank_transfer"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class SubscriptionPlan(str, Enum):
    FREE = "free"
    PRO = "pro"
    PRO_PLUS = "pro_plus"


class StockMovementType(str, Enum):
    IN = "in"
    OUT = "out"


class CashFlowType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class StockStatus(str, Enum):
    LOW = "Low Stock"
    MEDIUM = "Medium"
    GOOD = "Good"


class ReportRange(str, Enum):
    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    CUSTOM = "custom"


INCOME_CATEGORIES: list[str] = ["Sales", "Investment", "Loan", "Interest", "Other Income"]

EXPENSE_CATEGORIES: list[str] = [
    "Rent",
    "Utilities",
    "Supplies",
    "Marketing",
    "Salary",
    "Transportation",
    "Maintenance",
    "Other Expense",
]

UNCATEGORIZED = "Uncategorized"
ALL_CATEGORIES = "all"


@dataclass(frozen=True, slots=True)
class Money:
    """Value Object - amount in a single currency."""
    amount: Decimal
    currency: str = "IDR"

    def __add__(self, other: "Money") -> "Money":
        if self.currency != other.currency:
            raise ValueError("Cannot add amounts in different currencies")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: "Money") -> "Money":
        if self.currency != other.currency:
            raise ValueError("Cannot subtract amounts in different currencies")
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def rounded(self) -> "Money":
        return Money(amount=round_money(self.amount), currency=self.currency)


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive day range; a ``None`` bound leaves that side open."""
    start: datetime | None
    end: datetime | None

    def contains(self, moment: datetime) -> bool:
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True

    @staticmethod
    def start_of_day(day: date) -> datetime:
        return datetime.combine(day, time.min)

    @staticmethod
    def end_of_day(day: date) -> datetime:
        return datetime.combine(day, time.max)

    @classmethod
    def for_day(cls, day: date) -> "DateRange":
        return cls(cls.start_of_day(day), cls.end_of_day(day))

    @classmethod
    def for_month(cls, day: date) -> "DateRange":
        first = day.replace(day=1)
        next_first = (first + timedelta(days=32)).replace(day=1)
        return cls(cls.start_of_day(first), cls.end_of_day(next_first - timedelta(days=1)))

    @classmethod
    def for_preset(
        cls,
        preset: ReportRange,
        today: date,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> "DateRange":
        if preset == ReportRange.YESTERDAY:
            return cls.for_day(today - timedelta(days=1))
        if preset == ReportRange.THIS_MONTH:
            return cls.for_month(today)
        if preset == ReportRange.LAST_MONTH:
            return cls.for_month(today.replace(day=1) - timedelta(days=1))
        if preset == ReportRange.CUSTOM:
            return cls(
                cls.start_of_day(start_date) if start_date else None,
                cls.end_of_day(end_date) if end_date else None,
            )
        return cls.for_day(today)
