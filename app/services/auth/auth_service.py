from datetime import datetime, timedelta, timezone
import secrets

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from app.models.users.user_models import User, RefreshToken
from app.models.enums.user_role import UserRole
from app.schemas.auth.auth_schemas import (
    RegisterRequest,
    AuthUser,
    LoginResponse,
    RefreshResponse,
    TokenPair,
)
from app.core.security import verify_password, hash_password, create_access_token
from app.core.config import REFRESH_TOKEN_EXPIRE_DAYS
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity, emit_user_activity
from app.utils.logger import get_logger

logger = get_logger("auth.service")


def _new_refresh_token(user_id: int) -> RefreshToken:
    return RefreshToken(
        user_id=user_id,
        token=secrets.token_urlsafe(48),
        expires_at=datetime.now(timezone.utc) + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
    )


def _access_token_for(user: User) -> str:
    return create_access_token(
        subject=user.username,
        token_version=user.token_version,
        role=UserRole(user.role).value,
    )


# =====================================================
# REGISTER
# =====================================================
async def register_customer(db: AsyncSession, payload: RegisterRequest) -> AuthUser:
    exists = await db.scalar(select(User.id).where(User.username == payload.email))
    if exists:
        raise AppException(409, "An account with this email already exists", ErrorCode.USER_EMAIL_EXISTS)

    user = User(
        username=payload.email,
        name=payload.name,
        company_name=payload.company_name,
        password_hash=hash_password(payload.password),
        role=UserRole.customer,
        is_active=True,
        is_online=False,
        token_version=0,
        version=1,
    )
    db.add(user)
    await db.flush()

    await emit_activity(
        db,
        user_id=user.id,
        username=user.username,
        code=ActivityCode.REGISTER,
        actor_email=user.username,
        company_name=user.company_name or "no company",
    )

    await db.commit()
    logger.info("Customer registered", extra={"user_id": user.id})
    return AuthUser.model_validate(user)


# =====================================================
# LOGIN
# =====================================================
async def login_user(db: AsyncSession, email: str, password: str) -> LoginResponse:
    logger.info("Authenticating user", extra={"email": email})

    result = await db.execute(
        select(User).where(User.username == email)
    )
    user = result.scalars().first()

    if not user or not verify_password(password, user.password_hash):
        logger.warning("Invalid credentials", extra={"email": email})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    if not user.is_active:
        logger.warning("Inactive user login blocked", extra={"email": email})
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive",
        )

    user.last_login = datetime.now(timezone.utc)
    user.is_online = True

    refresh = _new_refresh_token(user.id)
    db.add(refresh)

    await emit_user_activity(db, user, ActivityCode.LOGIN)
    await db.commit()

    logger.info("Login successful", extra={"user_id": user.id})

    return LoginResponse(
        auth=TokenPair(
            access_token=_access_token_for(user),
            refresh_token=refresh.token,
        ),
        user=AuthUser.model_validate(user),
    )


# =====================================================
# REFRESH
# =====================================================
async def refresh_tokens(db: AsyncSession, refresh_token_value: str) -> RefreshResponse:
    result = await db.execute(
        select(RefreshToken).where(
            RefreshToken.token == refresh_token_value,
            RefreshToken.revoked.is_(False),
            RefreshToken.expires_at > datetime.now(timezone.utc),
        )
    )
    token = result.scalars().first()

    if not token:
        logger.warning("Invalid refresh token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )

    user = await db.get(User, token.user_id)
    if not user or not user.is_active:
        logger.warning("Refresh blocked for inactive user", extra={"user_id": token.user_id})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User invalid or inactive",
        )

    # rotate: every refresh token is single-use
    token.revoked = True
    new_refresh = _new_refresh_token(user.id)
    db.add(new_refresh)

    await db.commit()

    logger.info("Token refreshed", extra={"user_id": user.id})

    return RefreshResponse(
        access_token=_access_token_for(user),
        refresh_token=new_refresh.token,
        role=user.role,
    )


# =====================================================
# LOGOUT
# =====================================================
async def logout_user(db: AsyncSession, user: User) -> None:
    logger.info("Logging out user", extra={"user_id": user.id})

    user.token_version += 1
    user.is_online = False

    await db.execute(
        update(RefreshToken)
        .where(RefreshToken.user_id == user.id)
        .values(revoked=True)
    )

    await emit_user_activity(db, user, ActivityCode.LOGOUT)
    await db.commit()

    logger.info("Logout successful", extra={"user_id": user.id})
