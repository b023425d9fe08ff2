"""
Domain Services - totals, stock, cash and sales arithmetic for the register.
"""

import csv
import io
import threading
import time
from collections import Counter
from collections.abc import Callable, Iterable
from datetime import date, timedelta
from decimal import Decimal

from pos_admin.core.exceptions import InsufficientStockError, InvalidCategoryError

from .entities import (
    Cart,
    CashFlowEntry,
    CashSummary,
    CheckoutTotals,
    ProfileCard,
    SaleRecord,
    SalesSummary,
)
from .value_objects import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    ZERO,
    CashFlowType,
    Money,
    PaymentMethod,
    StockMovementType,
    StockStatus,
    TransactionStatus,
    round_money,
)

HUNDRED = Decimal("100")


class CheckoutCalculator:
    """
    Service - subtotal, discount, tax and final amount of a cart.

    Discount applies to the subtotal, tax to the discounted subtotal; each
    amount is rounded half-up to 2 decimals before it is summed.
    """

    def calculate(
        self,
        subtotal: Money,
        discount_percent: Decimal = ZERO,
        tax_percent: Decimal = ZERO,
    ) -> CheckoutTotals:
        discount_percent = Decimal(discount_percent)
        tax_percent = Decimal(tax_percent)
        for label, value in (("Discount", discount_percent), ("Tax", tax_percent)):
            if value < 0 or value > HUNDRED:
                raise ValueError(f"{label} must be between 0 and 100 percent")

        base = round_money(subtotal.amount)
        discount = round_money(base * discount_percent / HUNDRED)
        tax = round_money((base - discount) * tax_percent / HUNDRED)
        currency = subtotal.currency

        return CheckoutTotals(
            subtotal=Money(base, currency),
            discount_amount=Money(discount, currency),
            tax_amount=Money(tax, currency),
            final_amount=Money(base - discount + tax, currency),
        )

    def price_cart(self, cart: Cart) -> CheckoutTotals:
        return self.calculate(cart.subtotal, cart.discount_percent, cart.tax_percent)


class TransactionNumberGenerator:
    """Transaction numbers follow ``TXN-<epoch milliseconds>``, strictly increasing per process."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_number(self) -> str:
        with self._lock:
            millis = max(int(self._clock() * 1000), self._last + 1)
            self._last = millis
        return f"TXN-{millis}"


class InventoryService:
    """Service - stock levels, valuation and movements."""

    def __init__(self, low_threshold: int = 5, medium_threshold: int = 20):
        self.low_threshold = low_threshold
        self.medium_threshold = medium_threshold

    def stock_status(self, quantity: int) -> StockStatus:
        if quantity <= self.low_threshold:
            return StockStatus.LOW
        if quantity <= self.medium_threshold:
            return StockStatus.MEDIUM
        return StockStatus.GOOD

    def stock_value(self, quantity: int, cost_price: Decimal) -> Decimal:
        return round_money(Decimal(quantity) * Decimal(cost_price))

    def apply_movement(
        self,
        product_name: str,
        current: int,
        movement_type: StockMovementType,
        quantity: int,
    ) -> int:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than zero")
        delta = quantity if movement_type == StockMovementType.IN else -quantity
        new_quantity = current + delta
        if new_quantity < 0:
            raise InsufficientStockError(product_name, current, quantity)
        return new_quantity


class CashFlowService:
    """Service - daily cash position of an outlet."""

    def categories_for(self, flow_type: CashFlowType) -> list[str]:
        return INCOME_CATEGORIES if flow_type == CashFlowType.INCOME else EXPENSE_CATEGORIES

    def validate_category(self, flow_type: CashFlowType, category: str) -> None:
        allowed = self.categories_for(flow_type)
        if category not in allowed:
            raise InvalidCategoryError(category, allowed)

    def summarize(
        self,
        sales: Iterable[SaleRecord],
        incomes: Iterable[CashFlowEntry],
        expenses: Iterable[CashFlowEntry],
    ) -> CashSummary:
        completed = [s for s in sales if s.status == TransactionStatus.COMPLETED.value]
        incomes = list(incomes)
        expenses = list(expenses)

        total_sales = sum((s.final_amount for s in completed), ZERO)
        cash_sales = sum(
            (s.final_amount for s in completed if s.payment_method == PaymentMethod.CASH.value),
            ZERO,
        )
        total_income = sum((i.amount for i in incomes), ZERO)
        total_expenses = sum((e.amount for e in expenses), ZERO)

        flows = sorted(incomes + expenses, key=lambda f: f.created_at, reverse=True)

        return CashSummary(
            total_sales=total_sales,
            cash_sales=cash_sales,
            total_income=total_income,
            total_expenses=total_expenses,
            net_cash=cash_sales + total_income - total_expenses,
            flows=flows,
        )


class SalesReportService:
    """Service - sales summary and CSV export."""

    CSV_HEADERS = ["Transaction Number", "Date", "Customer", "Amount", "Payment Method"]

    def summarize(self, sales: Iterable[SaleRecord]) -> SalesSummary:
        sales = list(sales)
        total_sales = sum((s.final_amount for s in sales), ZERO)
        count = len(sales)
        average = round_money(total_sales / count) if count else ZERO

        # Counter keeps first-seen order, so ties go to the earliest method.
        methods = Counter(s.payment_method or "unknown" for s in sales)
        top = methods.most_common(1)[0][0] if methods else ""

        return SalesSummary(
            total_sales=total_sales,
            total_transactions=count,
            average_order=average,
            top_payment_method=top,
        )

    def to_csv(self, sales: Iterable[SaleRecord]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(self.CSV_HEADERS)
        for s in sales:
            writer.writerow([
                s.transaction_number,
                s.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                s.customer_name or "",
                s.final_amount,
                s.payment_method or "",
            ])
        return buffer.getvalue().rstrip("\n")

    @staticmethod
    def export_filename(today: date) -> str:
        return f"sales-report-{today:%Y-%m-%d}.csv"


class DashboardService:
    """Service - month-over-month metrics and sales charts."""

    def percent_change(self, current: Decimal, previous: Decimal) -> Decimal:
        if previous == 0:
            return ZERO
        return round_money((Decimal(current) - Decimal(previous)) / Decimal(previous) * HUNDRED)

    def metric(self, title: str, current: Decimal, previous: Decimal, *, lower_is_better: bool = False) -> dict:
        change = self.percent_change(current, previous)
        improving = change <= 0 if lower_is_better else change >= 0
        return {
            "title": title,
            "value": current,
            "previous": previous,
            "change": abs(change),
            "change_type": "positive" if improving else "negative",
        }

    def monthly_metrics(self, current: list[SaleRecord], previous: list[SaleRecord]) -> list[dict]:
        def completed(rows: list[SaleRecord]) -> list[SaleRecord]:
            return [r for r in rows if r.status == TransactionStatus.COMPLETED.value]

        def cancelled(rows: list[SaleRecord]) -> int:
            return sum(1 for r in rows if r.status == TransactionStatus.CANCELLED.value)

        def net(rows: list[SaleRecord]) -> Decimal:
            return sum((r.total_amount - r.discount_amount for r in completed(rows)), ZERO)

        def gross(rows: list[SaleRecord]) -> Decimal:
            return sum((r.final_amount for r in completed(rows)), ZERO)

        return [
            self.metric("Total orders", Decimal(len(completed(current))), Decimal(len(completed(previous)))),
            self.metric("Total sales", gross(current), gross(previous)),
            self.metric("Net sales", net(current), net(previous)),
            self.metric(
                "Cancelled orders",
                Decimal(cancelled(current)),
                Decimal(cancelled(previous)),
                lower_is_better=True,
            ),
        ]

    def hourly_sales(self, sales: Iterable[SaleRecord], bucket_hours: int = 2) -> list[dict]:
        buckets = {hour: ZERO for hour in range(0, 24, bucket_hours)}
        for s in sales:
            if s.status != TransactionStatus.COMPLETED.value:
                continue
            hour = s.created_at.hour - s.created_at.hour % bucket_hours
            buckets[hour] += s.final_amount
        return [{"time": f"{hour:02d}", "sales": amount} for hour, amount in buckets.items()]

    @staticmethod
    def outlet_labels(outlet_names: dict) -> dict:
        """Chart label per outlet id; repeated names get a short id suffix."""
        counts = Counter(outlet_names.values())
        return {
            outlet_id: name if counts[name] == 1 else f"{name} ({str(outlet_id)[:8]})"
            for outlet_id, name in outlet_names.items()
        }

    def daily_sales_by_outlet(
        self,
        sales: Iterable[SaleRecord],
        outlet_names: dict,
        start: date,
        days: int,
    ) -> list[dict]:
        labels = self.outlet_labels(outlet_names)
        series = []
        for offset in range(days):
            day = start + timedelta(days=offset)
            series.append({
                "day": day.strftime("%a %d"),
                "date": day,
                "outlets": {label: ZERO for label in labels.values()},
            })
        for s in sales:
            if s.status != TransactionStatus.COMPLETED.value or s.outlet_id not in labels:
                continue
            index = (s.created_at.date() - start).days
            if 0 <= index < days:
                series[index]["outlets"][labels[s.outlet_id]] += s.final_amount
        return series


class UserDirectory:
    """Service - user list search."""

    def search(self, profiles: Iterable[ProfileCard], query: str) -> list[ProfileCard]:
        needle = (query or "").lower()
        if not needle:
            return list(profiles)
        return [
            p for p in profiles
            if (p.full_name and needle in p.full_name.lower())
            or (p.phone and query in p.phone)
            or needle in p.role.lower()
        ]
