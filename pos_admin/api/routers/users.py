"""
API Routers - user management (superadmin and admin only).
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from pos_admin.api.deps import CurrentUser, rbac, require_permission
from pos_admin.application.dto.pos_dto import ProfileResponseDTO, ProfileUpdateDTO
from pos_admin.core.exceptions import PermissionDeniedError
from pos_admin.core.logging_config import get_logger
from pos_admin.core.security import Permission, UserRole
from pos_admin.domain.services import UserDirectory
from pos_admin.infrastructure.database import get_db
from pos_admin.infrastructure.database.mappers import to_profile_card
from pos_admin.infrastructure.database.models import Outlet, Profile, utcnow

router = APIRouter(prefix="/api/v1/users", tags=["Users"])

logger = get_logger("users")

can_manage_users = require_permission(Permission.USER_MANAGE)

directory = UserDirectory()


def _outlet_names(db: Session) -> dict[UUID, str]:
    return {o.id: o.name for o in db.query(Outlet).all()}


def _to_dto(profile: Profile, names: dict[UUID, str]) -> ProfileResponseDTO:
    return ProfileResponseDTO.model_validate(profile).model_copy(
        update={"outlet_name": names.get(profile.outlet_id)}
    )


def _get_profile(db: Session, profile_id: UUID) -> Profile:
    profile = db.get(Profile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


@router.get("", response_model=list[ProfileResponseDTO])
def list_users(
    search: str | None = None,
    _: CurrentUser = Depends(can_manage_users),
    db: Session = Depends(get_db),
):
    """Profiles, newest first. Search matches name, phone or role."""
    profiles = db.query(Profile).order_by(Profile.created_at.desc()).all()
    if search:
        matched = {card.id for card in directory.search(map(to_profile_card, profiles), search)}
        profiles = [p for p in profiles if p.id in matched]

    names = _outlet_names(db)
    return [_to_dto(p, names) for p in profiles]


@router.put("/{profile_id}", response_model=ProfileResponseDTO)
def update_user(
    profile_id: UUID,
    dto: ProfileUpdateDTO,
    current: CurrentUser = Depends(can_manage_users),
    db: Session = Depends(get_db),
):
    """
    Edit a user's profile.

    - Empty strings are stored as null
    - Only a superadmin can change roles
    - The superadmin role cannot be assigned here
    """
    profile = _get_profile(db, profile_id)

    if dto.role != profile.role:
        if dto.role == UserRole.SUPERADMIN.value:
            raise PermissionDeniedError("The superadmin role cannot be assigned")
        if not rbac.can_edit_roles(current.role):
            raise PermissionDeniedError("Only a superadmin can change roles")

    outlet_id = UUID(dto.outlet_id) if dto.outlet_id else None
    if outlet_id is not None and db.get(Outlet, outlet_id) is None:
        raise HTTPException(status_code=404, detail="Outlet not found")

    profile.full_name = dto.full_name.strip() or None
    profile.phone = dto.phone.strip() or None
    profile.role = dto.role
    profile.outlet_id = outlet_id
    profile.is_active = dto.is_active
    profile.updated_at = utcnow()
    db.commit()
    db.refresh(profile)

    logger.info("user_updated", extra={"profile_id": str(profile.id), "role": profile.role})
    return _to_dto(profile, _outlet_names(db))


@router.post("/{profile_id}/toggle-status", response_model=ProfileResponseDTO)
def toggle_user_status(
    profile_id: UUID,
    _: CurrentUser = Depends(can_manage_users),
    db: Session = Depends(get_db),
):
    profile = _get_profile(db, profile_id)
    profile.is_active = not profile.is_active
    profile.updated_at = utcnow()
    db.commit()
    db.refresh(profile)

    logger.info("user_status_changed", extra={"profile_id": str(profile.id), "is_active": profile.is_active})
    return _to_dto(profile, _outlet_names(db))
