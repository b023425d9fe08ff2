"""
API Routers - outlet (store branch) management.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from pos_admin.api.deps import CurrentUser, get_current_user, require_permission
from pos_admin.application.dto.pos_dto import OutletCreateDTO, OutletResponseDTO, OutletSummaryDTO
from pos_admin.core.exceptions import PermissionDeniedError
from pos_admin.core.logging_config import get_logger
from pos_admin.core.security import Permission
from pos_admin.infrastructure.database import get_db
from pos_admin.infrastructure.database.models import Outlet, Profile, utcnow

router = APIRouter(prefix="/api/v1/outlets", tags=["Outlets"])

logger = get_logger("outlets")


def _owned_outlet(db: Session, current: CurrentUser, outlet_id: UUID) -> Outlet:
    outlet = db.get(Outlet, outlet_id)
    if not outlet:
        raise HTTPException(status_code=404, detail="Outlet not found")
    if outlet.owner_id != current.id and not current.is_superadmin:
        raise PermissionDeniedError("Only the outlet owner can change this outlet")
    return outlet


def _staff_count(db: Session, outlet_id: UUID) -> int:
    return db.query(Profile).filter(Profile.outlet_id == outlet_id).count()


@router.get("", response_model=list[OutletResponseDTO])
def list_outlets(current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Superadmin sees every outlet; everyone else the outlets they own."""
    query = db.query(Outlet)
    if not current.is_superadmin:
        query = query.filter(Outlet.owner_id == current.id)
    outlets = query.order_by(Outlet.created_at.desc()).all()

    counts = dict(
        db.query(Profile.outlet_id, func.count(Profile.id))
        .filter(Profile.outlet_id.in_([o.id for o in outlets]))
        .group_by(Profile.outlet_id)
        .all()
    )
    return [
        OutletResponseDTO.model_validate(o).model_copy(update={"staff_count": counts.get(o.id, 0)})
        for o in outlets
    ]


@router.get("/active", response_model=list[OutletSummaryDTO])
def list_active_outlets(
    _: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    outlets = db.query(Outlet).filter(Outlet.is_active.is_(True)).order_by(Outlet.name).all()
    return [OutletSummaryDTO.model_validate(o) for o in outlets]


@router.post("", response_model=OutletResponseDTO, status_code=status.HTTP_201_CREATED)
def create_outlet(
    dto: OutletCreateDTO,
    current: CurrentUser = Depends(require_permission(Permission.OUTLET_MANAGE)),
    db: Session = Depends(get_db),
):
    """Create an outlet owned by the caller; a caller without an outlet is assigned to it."""
    outlet = Outlet(**dto.model_dump(), owner_id=current.id)
    db.add(outlet)
    db.flush()

    if current.profile.outlet_id is None:
        current.profile.outlet_id = outlet.id
        current.profile.updated_at = utcnow()

    db.commit()
    db.refresh(outlet)
    logger.info("outlet_created", extra={"outlet_id": str(outlet.id)})
    return OutletResponseDTO.model_validate(outlet).model_copy(
        update={"staff_count": _staff_count(db, outlet.id)}
    )


@router.put("/{outlet_id}", response_model=OutletResponseDTO)
def update_outlet(
    outlet_id: UUID,
    dto: OutletCreateDTO,
    current: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    outlet = _owned_outlet(db, current, outlet_id)
    for field, value in dto.model_dump().items():
        setattr(outlet, field, value)
    outlet.updated_at = utcnow()
    db.commit()
    db.refresh(outlet)
    logger.info("outlet_updated", extra={"outlet_id": str(outlet.id)})
    return OutletResponseDTO.model_validate(outlet).model_copy(
        update={"staff_count": _staff_count(db, outlet.id)}
    )


@router.post("/{outlet_id}/toggle-status", response_model=OutletResponseDTO)
def toggle_outlet_status(
    outlet_id: UUID,
    current: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    outlet = _owned_outlet(db, current, outlet_id)
    outlet.is_active = not outlet.is_active
    outlet.updated_at = utcnow()
    db.commit()
    db.refresh(outlet)
    logger.info("outlet_status_changed", extra={"outlet_id": str(outlet.id), "is_active": outlet.is_active})
    return OutletResponseDTO.model_validate(outlet).model_copy(
        update={"staff_count": _staff_count(db, outlet.id)}
    )
