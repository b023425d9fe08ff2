"""
API Routers - product catalog management.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pos_admin.api.deps import require_outlet, require_permission
from pos_admin.application.dto.pos_dto import ProductCreateDTO, ProductResponseDTO, ProductUpdateDTO
from pos_admin.core.logging_config import get_logger
from pos_admin.core.security import Permission
from pos_admin.infrastructure.database import get_db
from pos_admin.infrastructure.database.models import Product, ProductCategory, utcnow

router = APIRouter(prefix="/api/v1/products", tags=["Products"])

logger = get_logger("products")

can_manage = require_permission(Permission.PRODUCT_MANAGE)

NULLABLE_FIELDS = {"description", "sku", "image_url", "category_id"}


def _get_product(db: Session, outlet_id: UUID, product_id: UUID) -> Product:
    product = db.get(Product, product_id)
    if not product or product.outlet_id != outlet_id:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _check_category(db: Session, outlet_id: UUID, category_id: UUID | None) -> None:
    if category_id is None:
        return
    category = db.get(ProductCategory, category_id)
    if not category or category.outlet_id != outlet_id:
        raise HTTPException(status_code=400, detail="Category does not belong to this outlet")


def _to_dto(db: Session, product: Product) -> ProductResponseDTO:
    category = db.get(ProductCategory, product.category_id) if product.category_id else None
    return ProductResponseDTO.model_validate(product).model_copy(
        update={"category_name": category.name if category else None}
    )


@router.get("", response_model=list[ProductResponseDTO])
def list_products(
    search: str | None = None,
    include_inactive: bool = False,
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    query = db.query(Product).filter(Product.outlet_id == outlet_id)
    if not include_inactive:
        query = query.filter(Product.is_active.is_(True))
    if search:
        query = query.filter(Product.name.ilike(f"%{search}%"))

    names = {
        c.id: c.name
        for c in db.query(ProductCategory).filter(ProductCategory.outlet_id == outlet_id).all()
    }
    return [
        ProductResponseDTO.model_validate(p).model_copy(
            update={"category_name": names.get(p.category_id)}
        )
        for p in query.order_by(Product.name).all()
    ]


@router.post("", response_model=ProductResponseDTO, status_code=status.HTTP_201_CREATED)
def create_product(
    dto: ProductCreateDTO,
    _=Depends(can_manage),
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    _check_category(db, outlet_id, dto.category_id)
    product = Product(**dto.model_dump(), outlet_id=outlet_id)
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("product_created", extra={"product_id": str(product.id)})
    return _to_dto(db, product)


@router.get("/{product_id}", response_model=ProductResponseDTO)
def get_product(
    product_id: UUID,
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    return _to_dto(db, _get_product(db, outlet_id, product_id))


@router.put("/{product_id}", response_model=ProductResponseDTO)
def update_product(
    product_id: UUID,
    dto: ProductUpdateDTO,
    _=Depends(can_manage),
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    """Update the fields present in the request."""
    product = _get_product(db, outlet_id, product_id)
    changes = {
        k: v for k, v in dto.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }
    if "category_id" in changes:
        _check_category(db, outlet_id, changes["category_id"])

    for field, value in changes.items():
        setattr(product, field, value)
    product.updated_at = utcnow()
    db.commit()
    db.refresh(product)
    logger.info("product_updated", extra={"product_id": str(product.id), "fields": sorted(changes)})
    return _to_dto(db, product)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: UUID,
    _=Depends(can_manage),
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    """Soft delete: the product is deactivated, sales history keeps it."""
    product = _get_product(db, outlet_id, product_id)
    product.is_active = False
    product.updated_at = utcnow()
    db.commit()
    logger.info("product_deactivated", extra={"product_id": str(product.id)})
