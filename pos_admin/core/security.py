"""
Security Core - RBAC, password hashing, session tokens.
"""

import hashlib
import hmac
import os
import secrets
from datetime import UTC, datetime, timedelta
from enum import Enum
from uuid import UUID, uuid4

import jwt


class UserRole(str, Enum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    MANAGER = "manager"
    CASHIER = "cashier"
    STAFF = "staff"


class Permission(str, Enum):
    POS_CHECKOUT = "POS_CHECKOUT"
    PRODUCT_MANAGE = "PRODUCT_MANAGE"
    INVENTORY_ADJUST = "INVENTORY_ADJUST"
    CASH_RECORD = "CASH_RECORD"
    REPORT_VIEW = "REPORT_VIEW"
    REPORT_EXPORT = "REPORT_EXPORT"
    OUTLET_MANAGE = "OUTLET_MANAGE"
    SETTINGS_MANAGE = "SETTINGS_MANAGE"
    USER_MANAGE = "USER_MANAGE"
    ROLE_EDIT = "ROLE_EDIT"
    OUTLET_VIEW_ALL = "OUTLET_VIEW_ALL"


ROLE_PERMISSIONS: dict[UserRole, list[Permission]] = {
    UserRole.SUPERADMIN: list(Permission),
    UserRole.ADMIN: [
        Permission.POS_CHECKOUT,
        Permission.PRODUCT_MANAGE,
        Permission.INVENTORY_ADJUST,
        Permission.CASH_RECORD,
        Permission.REPORT_VIEW,
        Permission.REPORT_EXPORT,
        Permission.OUTLET_MANAGE,
        Permission.SETTINGS_MANAGE,
        Permission.USER_MANAGE,
    ],
    UserRole.MANAGER: [
        Permission.POS_CHECKOUT,
        Permission.PRODUCT_MANAGE,
        Permission.INVENTORY_ADJUST,
        Permission.CASH_RECORD,
        Permission.REPORT_VIEW,
        Permission.REPORT_EXPORT,
        Permission.OUTLET_MANAGE,
        Permission.SETTINGS_MANAGE,
    ],
    UserRole.CASHIER: [
        Permission.POS_CHECKOUT,
        Permission.CASH_RECORD,
        Permission.REPORT_VIEW,
    ],
    UserRole.STAFF: [
        Permission.POS_CHECKOUT,
        Permission.INVENTORY_ADJUST,
        Permission.REPORT_VIEW,
    ],
}

MIN_PASSWORD_LENGTH = 6
PBKDF2_ITERATIONS = 100000


def hash_password(password: str, salt: bytes | None = None) -> tuple[str, bytes]:
    if salt is None:
        salt = os.urandom(16)
    pw_hash = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, PBKDF2_ITERATIONS)
    return pw_hash.hex(), salt


def verify_password(password: str, password_hash: str, salt: bytes) -> bool:
    candidate, _ = hash_password(password, salt)
    return hmac.compare_digest(candidate, password_hash)


def generate_jwt_token(
    user_id: UUID,
    role: str,
    secret: str,
    expires_in: timedelta,
    session_id: UUID | None = None,
    algorithm: str = "HS256",
) -> tuple[str, UUID]:
    """Issue a signed access token bound to a session id (``jti``)."""
    jti = session_id or uuid4()
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "role": role,
        "jti": str(jti),
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, secret, algorithm=algorithm), jti


def decode_jwt_token(token: str, secret: str, algorithm: str = "HS256") -> dict | None:
    try:
        return jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.PyJWTError:
        return None


def generate_reset_token() -> tuple[str, str]:
    """Return ``(token, sha256 hex digest)``; only the digest is stored."""
    token = secrets.token_urlsafe(32)
    return token, hash_reset_token(token)


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


class RBACService:
    def has_permission(self, role: UserRole, permission: Permission) -> bool:
        return permission in ROLE_PERMISSIONS.get(role, [])

    def get_user_permissions(self, role: UserRole) -> list[Permission]:
        return ROLE_PERMISSIONS.get(role, [])

    def can_manage_users(self, role: UserRole) -> bool:
        return self.has_permission(role, Permission.USER_MANAGE)

    def can_edit_roles(self, role: UserRole) -> bool:
        return self.has_permission(role, Permission.ROLE_EDIT)

    def can_view_all_outlets(self, role: UserRole) -> bool:
        return role == UserRole.SUPERADMIN
