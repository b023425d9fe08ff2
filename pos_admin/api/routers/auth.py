"""
API Routers - sign-up, sign-in, sessions and password recovery.
"""

from datetime import timedelta

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from pos_admin.api.deps import CurrentUser, get_current_user, rbac
from pos_admin.application.dto.pos_dto import (
    ChangePasswordRequestDTO,
    CurrentUserDTO,
    ForgotPasswordRequestDTO,
    MessageDTO,
    PermissionsDTO,
    ProfileResponseDTO,
    ResetPasswordRequestDTO,
    SignInRequestDTO,
    SignUpRequestDTO,
    TokenResponseDTO,
)
from pos_admin.core.config import Settings, get_settings
from pos_admin.core.exceptions import (
    AccountLockedError,
    EmailAlreadyRegisteredError,
    InactiveAccountError,
    InvalidCredentialsError,
    InvalidTokenError,
    PasswordPolicyError,
)
from pos_admin.core.logging_config import get_logger
from pos_admin.core.security import (
    MIN_PASSWORD_LENGTH,
    UserRole,
    generate_jwt_token,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)
from pos_admin.infrastructure.database import get_db
from pos_admin.infrastructure.database.models import (
    AuthSession,
    AuthUser,
    Outlet,
    PasswordResetToken,
    Profile,
    utcnow,
)
from pos_admin.infrastructure.mailer import Mailer, get_mailer

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])

logger = get_logger("auth")

FORGOT_PASSWORD_MESSAGE = "If that email is registered, a password reset link has been sent"


def _check_password_length(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordPolicyError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def _set_password(user: AuthUser, password: str) -> None:
    password_hash, salt = hash_password(password)
    user.password_hash = password_hash
    user.password_salt = salt.hex()
    user.updated_at = utcnow()


def _current_user_dto(db: Session, user: AuthUser, profile: Profile) -> CurrentUserDTO:
    outlet = db.get(Outlet, profile.outlet_id) if profile.outlet_id else None
    base = ProfileResponseDTO.model_validate(profile)
    return CurrentUserDTO(
        **base.model_dump(exclude={"outlet_name"}),
        outlet_name=outlet.name if outlet else None,
        email=user.email,
    )


def _authenticate(db: Session, email: str, password: str, settings: Settings) -> tuple[AuthUser, Profile]:
    """Verify credentials, applying the failed-attempt lockout."""
    user = db.query(AuthUser).filter(AuthUser.email == email).first()
    if user is None:
        logger.info("sign_in_failed", extra={"reason": "unknown_email"})
        raise InvalidCredentialsError()

    now = utcnow()
    if user.locked_until and user.locked_until > now:
        raise AccountLockedError(user.locked_until)

    if not verify_password(password, user.password_hash, bytes.fromhex(user.password_salt)):
        user.failed_login_attempts += 1
        locked = user.failed_login_attempts >= settings.max_failed_logins
        if locked:
            user.locked_until = now + timedelta(minutes=settings.lockout_minutes)
            user.failed_login_attempts = 0
        db.commit()
        if locked:
            logger.warning("account_locked", extra={"user_id": str(user.id)})
            raise AccountLockedError(user.locked_until)
        logger.info("sign_in_failed", extra={"user_id": str(user.id), "reason": "bad_password"})
        raise InvalidCredentialsError()

    profile = db.query(Profile).filter(Profile.user_id == user.id).first()
    if profile is None or not profile.is_active:
        raise InactiveAccountError()

    user.failed_login_attempts = 0
    user.locked_until = None
    user.last_sign_in_at = now
    return user, profile


def _open_session(
    db: Session, user: AuthUser, profile: Profile, settings: Settings, request: Request
) -> TokenResponseDTO:
    lifetime = timedelta(hours=settings.jwt_expire_hours)
    session = AuthSession(
        user_id=user.id,
        expires_at=utcnow() + lifetime,
        user_agent=request.headers.get("user-agent"),
        ip_address=request.client.host if request.client else None,
    )
    db.add(session)
    db.commit()

    token, _ = generate_jwt_token(
        user.id,
        profile.role,
        settings.jwt_secret,
        lifetime,
        session_id=session.id,
        algorithm=settings.jwt_algorithm,
    )
    logger.info("signed_in", extra={"user_id": str(user.id)})
    return TokenResponseDTO(
        access_token=token,
        token_type="Bearer",
        expires_in=int(lifetime.total_seconds()),
    )


@router.post("/sign-up", response_model=CurrentUserDTO, status_code=status.HTTP_201_CREATED)
def sign_up(dto: SignUpRequestDTO, db: Session = Depends(get_db)):
    """
    Register an account.

    The first account becomes superadmin; later ones start as staff.
    """
    _check_password_length(dto.password)
    if db.query(AuthUser).filter(AuthUser.email == dto.email).first():
        raise EmailAlreadyRegisteredError(dto.email)

    is_first = db.query(AuthUser).count() == 0
    user = AuthUser(email=dto.email, password_hash="", password_salt="")
    _set_password(user, dto.password)
    db.add(user)
    db.flush()

    profile = Profile(
        user_id=user.id,
        full_name=dto.full_name or None,
        phone=dto.phone or None,
        role=UserRole.SUPERADMIN.value if is_first else UserRole.STAFF.value,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)

    logger.info("user_registered", extra={"user_id": str(user.id), "role": profile.role})
    return _current_user_dto(db, user, profile)


@router.post("/sign-in", response_model=TokenResponseDTO)
def sign_in(
    dto: SignInRequestDTO,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user, profile = _authenticate(db, dto.email, dto.password, settings)
    return _open_session(db, user, profile, settings, request)


@router.post("/token", response_model=TokenResponseDTO)
def token(
    request: Request,
    form: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """OAuth2 password flow for the interactive docs."""
    user, profile = _authenticate(db, form.username.strip().lower(), form.password, settings)
    return _open_session(db, user, profile, settings, request)


@router.post("/sign-out", response_model=MessageDTO)
def sign_out(current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    session = db.get(AuthSession, current.session_id)
    session.revoked_at = utcnow()
    db.commit()
    logger.info("signed_out", extra={"user_id": str(current.id)})
    return MessageDTO(message="Signed out")


@router.get("/me", response_model=CurrentUserDTO)
def me(current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return _current_user_dto(db, current.user, current.profile)


@router.get("/permissions", response_model=PermissionsDTO)
def permissions(current: CurrentUser = Depends(get_current_user)):
    role = current.role
    return PermissionsDTO(
        role=role.value,
        permissions=[p.value for p in rbac.get_user_permissions(role)],
        can_manage_users=rbac.can_manage_users(role),
        can_edit_roles=rbac.can_edit_roles(role),
        can_view_all_outlets=rbac.can_view_all_outlets(role),
    )


@router.post("/forgot-password", response_model=MessageDTO)
def forgot_password(
    dto: ForgotPasswordRequestDTO,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: Mailer = Depends(get_mailer),
):
    """Send a reset link. The answer does not reveal whether the email exists."""
    user = db.query(AuthUser).filter(AuthUser.email == dto.email).first()
    if user is None:
        logger.info("password_reset_unknown_email")
        return MessageDTO(message=FORGOT_PASSWORD_MESSAGE)

    raw_token, token_hash = generate_reset_token()
    db.add(PasswordResetToken(
        user_id=user.id,
        token_hash=token_hash,
        expires_at=utcnow() + timedelta(minutes=settings.password_reset_expire_minutes),
    ))
    db.commit()

    link = f"{settings.app_base_url}/reset-password?token={raw_token}"
    mailer.send(
        user.email,
        "Reset your password",
        f"Open the link below to choose a new password:\n\n{link}\n\n"
        f"The link expires in {settings.password_reset_expire_minutes} minutes.",
    )
    logger.info("password_reset_requested", extra={"user_id": str(user.id)})
    return MessageDTO(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=MessageDTO)
def reset_password(dto: ResetPasswordRequestDTO, db: Session = Depends(get_db)):
    if dto.password != dto.confirm_password:
        raise PasswordPolicyError("Passwords do not match")
    _check_password_length(dto.password)

    now = utcnow()
    record = db.query(PasswordResetToken).filter(
        PasswordResetToken.token_hash == hash_reset_token(dto.token)
    ).first()
    if record is None or record.used_at is not None or record.expires_at <= now:
        raise InvalidTokenError("Reset link is invalid or has expired")

    user = db.get(AuthUser, record.user_id)
    _set_password(user, dto.password)
    user.failed_login_attempts = 0
    user.locked_until = None
    record.used_at = now

    db.query(AuthSession).filter(
        AuthSession.user_id == user.id,
        AuthSession.revoked_at.is_(None),
    ).update({AuthSession.revoked_at: now}, synchronize_session=False)
    db.commit()

    logger.info("password_reset", extra={"user_id": str(user.id)})
    return MessageDTO(message="Password updated successfully")


@router.post("/change-password", response_model=MessageDTO)
def change_password(
    dto: ChangePasswordRequestDTO,
    current: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = current.user
    if not verify_password(dto.old_password, user.password_hash, bytes.fromhex(user.password_salt)):
        raise PasswordPolicyError("Current password is incorrect")
    _check_password_length(dto.new_password)

    _set_password(user, dto.new_password)
    db.commit()
    logger.info("password_changed", extra={"user_id": str(user.id)})
    return MessageDTO(message="Password updated successfully")
