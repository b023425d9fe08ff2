"""
Row -> domain record conversions shared by the routers.
"""

from pos_admin.domain.entities import CashFlowEntry, CatalogProduct, ProfileCard, SaleRecord
from pos_admin.domain.value_objects import UNCATEGORIZED, CashFlowType
from pos_admin.infrastructure.database.models import (
    Expense,
    Income,
    Product,
    Profile,
    Transaction,
)


def to_sale_record(row: Transaction) -> SaleRecord:
    return SaleRecord(
        final_amount=row.final_amount,
        created_at=row.created_at,
        payment_method=row.payment_method,
        total_amount=row.total_amount,
        discount_amount=row.discount_amount,
        status=row.status,
        outlet_id=row.outlet_id,
        transaction_number=row.transaction_number,
        customer_name=row.customer_name,
    )


def to_cash_flow(row: Income | Expense) -> CashFlowEntry:
    return CashFlowEntry(
        id=row.id,
        type=CashFlowType.INCOME if isinstance(row, Income) else CashFlowType.EXPENSE,
        amount=row.amount,
        description=row.description,
        category=row.category,
        created_at=row.created_at,
    )


def to_catalog_product(row: Product, category_name: str | None = None) -> CatalogProduct:
    return CatalogProduct(
        id=row.id,
        name=row.name,
        price=row.price,
        stock_quantity=row.stock_quantity,
        category=category_name or UNCATEGORIZED,
        cost_price=row.cost_price,
        min_stock=row.min_stock,
        image_url=row.image_url,
        is_active=row.is_active,
    )


def to_profile_card(row: Profile) -> ProfileCard:
    return ProfileCard(id=row.id, role=row.role, full_name=row.full_name, phone=row.phone)
