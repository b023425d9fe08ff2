"""
API Routers - point-of-sale catalog, quote and checkout.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from pos_admin.api.deps import CurrentUser, require_outlet, require_permission
from pos_admin.api.routers.receipts import load_items
from pos_admin.application.dto.pos_dto import (
    CatalogProductDTO,
    CheckoutRequestDTO,
    CheckoutResponseDTO,
    QuoteLineDTO,
    QuoteRequestDTO,
    QuoteResponseDTO,
    TransactionResponseDTO,
)
from pos_admin.core.config import Settings, get_settings
from pos_admin.core.exceptions import EmptyCartError, NotFoundError
from pos_admin.core.logging_config import get_logger
from pos_admin.core.security import Permission
from pos_admin.domain.entities import Cart
from pos_admin.domain.services import CheckoutCalculator, InventoryService, TransactionNumberGenerator
from pos_admin.domain.value_objects import ALL_CATEGORIES, StockMovementType, TransactionStatus
from pos_admin.infrastructure.database import get_db
from pos_admin.infrastructure.database.mappers import to_catalog_product
from pos_admin.infrastructure.database.models import (
    Product,
    ProductCategory,
    StockMovement,
    Transaction,
    TransactionItem,
)

router = APIRouter(prefix="/api/v1/pos", tags=["Point of Sale"])

logger = get_logger("pos")

calculator = CheckoutCalculator()
numbers = TransactionNumberGenerator()


def _category_names(db: Session, outlet_id: UUID) -> dict[UUID, str]:
    rows = db.query(ProductCategory).filter(ProductCategory.outlet_id == outlet_id).all()
    return {c.id: c.name for c in rows}


def _build_cart(
    db: Session,
    outlet_id: UUID,
    dto: QuoteRequestDTO,
    currency: str,
    lock: bool = False,
) -> tuple[Cart, dict[UUID, Product]]:
    """
    Price the requested lines against the current product rows.

    Repeated product ids are merged. Stock rules are enforced by ``Cart``.
    """
    quantities: dict[UUID, int] = {}
    for line in dto.items:
        quantities[line.product_id] = quantities.get(line.product_id, 0) + line.quantity

    query = db.query(Product).filter(
        Product.id.in_(list(quantities)),
        Product.outlet_id == outlet_id,
        Product.is_active.is_(True),
    )
    if lock:
        query = query.with_for_update()
    rows = {p.id: p for p in query.all()}

    cart = Cart(currency=currency)
    for product_id, quantity in quantities.items():
        row = rows.get(product_id)
        if row is None:
            raise NotFoundError("Product", product_id)
        cart = cart.add(to_catalog_product(row)).update_quantity(product_id, quantity)

    customer_name = getattr(dto, "customer_name", None) or ""
    return cart.with_adjustments(dto.discount_percent, dto.tax_percent, customer_name), rows


@router.get("/products", response_model=list[CatalogProductDTO])
def list_products(
    search: str | None = None,
    category: str | None = None,
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    """Active products of the outlet, ordered by name."""
    query = db.query(Product).filter(Product.outlet_id == outlet_id, Product.is_active.is_(True))
    if search:
        query = query.filter(Product.name.ilike(f"%{search}%"))

    names = _category_names(db, outlet_id)
    products = [
        to_catalog_product(p, names.get(p.category_id))
        for p in query.order_by(Product.name).all()
    ]
    if category and category != ALL_CATEGORIES:
        products = [p for p in products if p.category == category]
    return [CatalogProductDTO.model_validate(p) for p in products]


@router.get("/categories", response_model=list[str])
def list_categories(outlet_id: UUID = Depends(require_outlet), db: Session = Depends(get_db)):
    rows = (
        db.query(ProductCategory.name)
        .filter(ProductCategory.outlet_id == outlet_id)
        .order_by(ProductCategory.name)
        .all()
    )
    return [ALL_CATEGORIES] + [name for (name,) in rows]


@router.post("/quote", response_model=QuoteResponseDTO)
def quote(
    dto: QuoteRequestDTO,
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Price a cart. Nothing is saved."""
    cart, _ = _build_cart(db, outlet_id, dto, settings.currency)
    totals = calculator.price_cart(cart)
    return QuoteResponseDTO(
        items=[
            QuoteLineDTO(
                product_id=item.product_id,
                name=item.product.name,
                quantity=item.quantity,
                price=item.price,
                total=item.total,
            )
            for item in cart.items
        ],
        subtotal=totals.subtotal.amount,
        discount_amount=totals.discount_amount.amount,
        tax_amount=totals.tax_amount.amount,
        final_amount=totals.final_amount.amount,
        currency=totals.final_amount.currency,
    )


@router.post("/checkout", response_model=CheckoutResponseDTO, status_code=status.HTTP_201_CREATED)
def checkout(
    dto: CheckoutRequestDTO,
    current: CurrentUser = Depends(require_permission(Permission.POS_CHECKOUT)),
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Complete a sale.

    - Re-checks stock against the current rows
    - Saves the transaction and its lines
    - Decrements stock and records an ``out`` movement per line

    Everything commits together.
    """
    if not dto.items:
        raise EmptyCartError()

    cart, rows = _build_cart(db, outlet_id, dto, settings.currency, lock=True)
    totals = calculator.price_cart(cart)
    inventory = InventoryService(settings.low_stock_threshold, settings.medium_stock_threshold)

    transaction = Transaction(
        transaction_number=numbers.next_number(),
        outlet_id=outlet_id,
        cashier_id=current.id,
        customer_name=dto.customer_name or None,
        total_amount=totals.subtotal.amount,
        discount_amount=totals.discount_amount.amount,
        tax_amount=totals.tax_amount.amount,
        final_amount=totals.final_amount.amount,
        payment_method=dto.payment_method.value,
        status=TransactionStatus.COMPLETED.value,
        notes=dto.notes,
    )
    db.add(transaction)
    db.flush()

    for item in cart.items:
        product = rows[item.product_id]
        db.add(TransactionItem(
            transaction_id=transaction.id,
            product_id=product.id,
            quantity=item.quantity,
            price=item.price,
            total=item.total,
        ))
        product.stock_quantity = inventory.apply_movement(
            product.name, product.stock_quantity, StockMovementType.OUT, item.quantity
        )
        db.add(StockMovement(
            product_id=product.id,
            type=StockMovementType.OUT.value,
            quantity=item.quantity,
            reason=f"Sale {transaction.transaction_number}",
            reference_id=transaction.id,
            user_id=current.id,
        ))

    db.commit()
    db.refresh(transaction)

    logger.info(
        "checkout_completed",
        extra={
            "transaction_id": str(transaction.id),
            "transaction_number": transaction.transaction_number,
            "final_amount": str(transaction.final_amount),
            "lines": len(cart.items),
        },
    )
    return CheckoutResponseDTO(
        transaction=TransactionResponseDTO.model_validate(transaction),
        items=load_items(db, transaction.id),
        receipt_id=transaction.id,
    )
