"""Domain layer - Pure Python business logic."""

from pos_admin.domain.entities import (
    Cart,
    CartItem,
    CashFlowEntry,
    CashSummary,
    CatalogProduct,
    CheckoutTotals,
    ProfileCard,
    SaleRecord,
    SalesSummary,
)
from pos_admin.domain.services import (
    CashFlowService,
    CheckoutCalculator,
    DashboardService,
    InventoryService,
    SalesReportService,
    TransactionNumberGenerator,
    UserDirectory,
)
from pos_admin.domain.value_objects import (
    CashFlowType,
    DateRange,
    Money,
    PaymentMethod,
    ReportRange,
    StockMovementType,
    StockStatus,
    SubscriptionPlan,
    TransactionStatus,
)
