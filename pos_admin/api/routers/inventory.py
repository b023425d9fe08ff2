"""
API Routers - stock levels, adjustments and movement history.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from pos_admin.api.deps import CurrentUser, require_outlet, require_permission
from pos_admin.application.dto.pos_dto import (
    StockAdjustRequestDTO,
    StockLevelDTO,
    StockMovementResponseDTO,
)
from pos_admin.core.config import Settings, get_settings
from pos_admin.core.logging_config import get_logger
from pos_admin.core.security import Permission
from pos_admin.domain.services import InventoryService
from pos_admin.infrastructure.database import get_db
from pos_admin.infrastructure.database.models import Product, StockMovement, utcnow

router = APIRouter(prefix="/api/v1/inventory", tags=["Inventory"])

logger = get_logger("inventory")


def _inventory(settings: Settings) -> InventoryService:
    return InventoryService(settings.low_stock_threshold, settings.medium_stock_threshold)


@router.get("/stock", response_model=list[StockLevelDTO])
def stock_levels(
    search: str | None = None,
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Stock level, valuation and status of every active product."""
    inventory = _inventory(settings)
    query = db.query(Product).filter(Product.outlet_id == outlet_id, Product.is_active.is_(True))
    if search:
        query = query.filter(Product.name.ilike(f"%{search}%"))

    return [
        StockLevelDTO(
            id=p.id,
            name=p.name,
            stock_quantity=p.stock_quantity,
            cost_price=p.cost_price,
            price=p.price,
            stock_value=inventory.stock_value(p.stock_quantity, p.cost_price),
            status=inventory.stock_status(p.stock_quantity).value,
        )
        for p in query.order_by(Product.name).all()
    ]


@router.post("/adjust", response_model=StockMovementResponseDTO, status_code=status.HTTP_201_CREATED)
def adjust_stock(
    dto: StockAdjustRequestDTO,
    current: CurrentUser = Depends(require_permission(Permission.INVENTORY_ADJUST)),
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Stock in or out. Stock never goes below zero."""
    product = db.get(Product, dto.product_id)
    if not product or product.outlet_id != outlet_id:
        raise HTTPException(status_code=404, detail="Product not found")

    product.stock_quantity = _inventory(settings).apply_movement(
        product.name, product.stock_quantity, dto.type, dto.quantity
    )
    product.updated_at = utcnow()
    movement = StockMovement(
        product_id=product.id,
        type=dto.type.value,
        quantity=dto.quantity,
        reason=dto.reason,
        user_id=current.id,
    )
    db.add(movement)
    db.commit()
    db.refresh(movement)

    logger.info(
        "stock_adjusted",
        extra={
            "product_id": str(product.id),
            "type": dto.type.value,
            "quantity": dto.quantity,
            "stock_quantity": product.stock_quantity,
        },
    )
    return StockMovementResponseDTO(
        id=movement.id,
        product_id=product.id,
        product_name=product.name,
        type=movement.type,
        quantity=movement.quantity,
        reason=movement.reason,
        reference_id=movement.reference_id,
        created_at=movement.created_at,
    )


@router.get("/movements", response_model=list[StockMovementResponseDTO])
def list_movements(
    limit: int = Query(50, ge=1, le=500),
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(StockMovement, Product.name)
        .join(Product, Product.id == StockMovement.product_id)
        .filter(Product.outlet_id == outlet_id)
        .order_by(StockMovement.created_at.desc())
        .limit(limit)
        .all()
    )
    return [
        StockMovementResponseDTO(
            id=m.id,
            product_id=m.product_id,
            product_name=name,
            type=m.type,
            quantity=m.quantity,
            reason=m.reason,
            reference_id=m.reference_id,
            created_at=m.created_at,
        )
        for m, name in rows
    ]
