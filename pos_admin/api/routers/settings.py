"""
API Routers - outlet profile and product categories.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pos_admin.api.deps import require_outlet, require_permission
from pos_admin.application.dto.pos_dto import CategoryCreateDTO, CategoryResponseDTO, OutletInfoDTO
from pos_admin.core.logging_config import get_logger
from pos_admin.core.security import Permission
from pos_admin.infrastructure.database import get_db
from pos_admin.infrastructure.database.models import Outlet, Product, ProductCategory, utcnow

router = APIRouter(prefix="/api/v1/settings", tags=["Settings"])

logger = get_logger("settings")

can_manage = require_permission(Permission.SETTINGS_MANAGE)


def _get_category(db: Session, outlet_id: UUID, category_id: UUID) -> ProductCategory:
    category = db.get(ProductCategory, category_id)
    if not category or category.outlet_id != outlet_id:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.get("/outlet", response_model=OutletInfoDTO)
def get_outlet_settings(outlet_id: UUID = Depends(require_outlet), db: Session = Depends(get_db)):
    return OutletInfoDTO.model_validate(db.get(Outlet, outlet_id))


@router.put("/outlet", response_model=OutletInfoDTO)
def update_outlet_settings(
    dto: OutletInfoDTO,
    _=Depends(can_manage),
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    outlet = db.get(Outlet, outlet_id)
    outlet.name = dto.name
    outlet.address = dto.address
    outlet.phone = dto.phone
    outlet.updated_at = utcnow()
    db.commit()
    db.refresh(outlet)
    logger.info("outlet_settings_updated", extra={"outlet_id": str(outlet.id)})
    return OutletInfoDTO.model_validate(outlet)


@router.get("/categories", response_model=list[CategoryResponseDTO])
def list_categories(outlet_id: UUID = Depends(require_outlet), db: Session = Depends(get_db)):
    categories = (
        db.query(ProductCategory)
        .filter(ProductCategory.outlet_id == outlet_id)
        .order_by(ProductCategory.name)
        .all()
    )
    return [CategoryResponseDTO.model_validate(c) for c in categories]


@router.post("/categories", response_model=CategoryResponseDTO, status_code=status.HTTP_201_CREATED)
def create_category(
    dto: CategoryCreateDTO,
    _=Depends(can_manage),
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    category = ProductCategory(name=dto.name.strip(), outlet_id=outlet_id)
    db.add(category)
    db.commit()
    db.refresh(category)
    return CategoryResponseDTO.model_validate(category)


@router.put("/categories/{category_id}", response_model=CategoryResponseDTO)
def update_category(
    category_id: UUID,
    dto: CategoryCreateDTO,
    _=Depends(can_manage),
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    category = _get_category(db, outlet_id, category_id)
    category.name = dto.name.strip()
    category.updated_at = utcnow()
    db.commit()
    db.refresh(category)
    return CategoryResponseDTO.model_validate(category)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: UUID,
    _=Depends(can_manage),
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    """Delete a category; its products become uncategorized."""
    category = _get_category(db, outlet_id, category_id)
    db.query(Product).filter(Product.category_id == category.id).update(
        {Product.category_id: None}, synchronize_session=False
    )
    db.delete(category)
    db.commit()
    logger.info("category_deleted", extra={"category_id": str(category_id)})
