from fastapi import Depends, HTTPException, Header, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.db import get_db
from app.core.security import decode_access_token
from app.models.users.user_models import User
from app.utils.logger import get_logger

logger = get_logger("auth.guard")

BEARER_PREFIX = "Bearer "


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        logger.warning("Missing bearer token", extra={"path": request.url.path})
        raise _unauthorized("Not authenticated")

    token = authorization[len(BEARER_PREFIX):].strip()
    payload = decode_access_token(token)

    username = payload.get("sub")
    token_version = payload.get("token_version")

    result = await db.execute(
        select(User).where(User.username == username)
    )
    user = result.scalars().first()

    if not user:
        logger.warning("Token user not found", extra={"username": username})
        raise _unauthorized("User not found")

    if not user.is_active:
        logger.warning("Inactive user access blocked", extra={"user_id": user.id})
        raise HTTPException(status_code=403, detail="User account is inactive")

    if user.token_version != token_version:
        logger.warning("Token version mismatch", extra={"user_id": user.id})
        raise _unauthorized("Session expired")

    request.state.user = user
    return user
