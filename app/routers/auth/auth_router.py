from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.auth.auth_schemas import (
    LoginRequest,
    RegisterRequest,
    RefreshRequest,
    AuthUser,
    LoginResponse,
    RefreshResponse,
)
from app.services.auth.auth_service import (
    register_customer,
    login_user,
    refresh_tokens,
    logout_user,
)
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse
from app.utils.logger import get_logger

logger = get_logger("auth.router")

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=APIResponse[AuthUser], status_code=201)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    logger.info("Registration attempt", extra={"email": payload.email})
    user = await register_customer(db, payload)
    return success_response("Registration successful", user)


@router.post("/login", response_model=APIResponse[LoginResponse])
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    logger.info("Login attempt", extra={"email": payload.email})
    data = await login_user(db, payload.email, payload.password)
    return success_response("Login successful", data)


@router.post("/refresh", response_model=APIResponse[RefreshResponse])
async def refresh(
    payload: RefreshRequest,
    db: AsyncSession = Depends(get_db),
):
    tokens = await refresh_tokens(db, payload.refresh_token)
    return success_response("Token refreshed", tokens)


@router.post("/logout", response_model=APIResponse)
async def logout(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user),
):
    await logout_user(db, current_user)
    return success_response("Logged out successfully")


@router.get("/me", response_model=APIResponse[AuthUser])
async def me(current_user=Depends(get_current_user)):
    return success_response("Current user", AuthUser.model_validate(current_user))
