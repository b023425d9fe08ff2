"""
Request dependencies - current user, outlet scope and permission checks.
"""

from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from pos_admin.core.config import Settings, get_settings
from pos_admin.core.exceptions import (
    InactiveAccountError,
    InvalidTokenError,
    NoOutletAssignedError,
    PermissionDeniedError,
)
from pos_admin.core.logging_config import RequestContext
from pos_admin.core.security import Permission, RBACService, UserRole, decode_jwt_token
from pos_admin.infrastructure.database import get_db
from pos_admin.infrastructure.database.models import AuthSession, AuthUser, Profile, utcnow

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)

rbac = RBACService()


@dataclass
class CurrentUser:
    """The signed-in caller: auth identity, profile and session."""
    user: AuthUser
    profile: Profile
    session_id: UUID

    @property
    def id(self) -> UUID:
        return self.user.id

    @property
    def role(self) -> UserRole:
        return UserRole(self.profile.role)

    @property
    def outlet_id(self) -> UUID | None:
        return self.profile.outlet_id

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN


def resolve_session_user(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    """Dependency - resolve the bearer token to an open session."""
    if not token:
        raise InvalidTokenError("Not authenticated")

    payload = decode_jwt_token(token, settings.jwt_secret, settings.jwt_algorithm)
    if not payload or "jti" not in payload or "sub" not in payload:
        raise InvalidTokenError()

    try:
        session_id = UUID(payload["jti"])
        user_id = UUID(payload["sub"])
    except ValueError as exc:
        raise InvalidTokenError() from exc

    session = db.get(AuthSession, session_id)
    if (
        session is None
        or session.user_id != user_id
        or session.revoked_at is not None
        or session.expires_at <= utcnow()
    ):
        raise InvalidTokenError("Session expired")

    user = db.get(AuthUser, user_id)
    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    if user is None or profile is None:
        raise InvalidTokenError()
    if not profile.is_active:
        raise InactiveAccountError()

    return CurrentUser(user=user, profile=profile, session_id=session_id)


async def get_current_user(
    request: Request,
    current: CurrentUser = Depends(resolve_session_user),
) -> CurrentUser:
    """Dependency - the signed-in caller, tagged onto the request's log context.

    Runs on the event loop so the context var set here is still visible to
    the endpoint; ``request.state`` carries the id out to the middleware.
    """
    user_id = str(current.id)
    RequestContext.set(user_id=user_id)
    request.state.user_id = user_id
    return current


def require_outlet(current: CurrentUser = Depends(get_current_user)) -> UUID:
    """Dependency - outlet id of the caller; fails when none is assigned."""
    if current.outlet_id is None:
        raise NoOutletAssignedError()
    return current.outlet_id


def require_permission(permission: Permission):
    """Dependency factory - caller's role must grant ``permission``."""

    def checker(current: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not rbac.has_permission(current.role, permission):
            raise PermissionDeniedError()
        return current

    return checker
