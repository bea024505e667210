from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_

from app.models.users.user_models import User
from app.models.enums.user_role import UserRole
from app.schemas.users.user_schemas import (
    UserCreateSchema,
    UserUpdateSchema,
    UserListFilters,
    UserListItemSchema,
    UserDetailSchema,
)
from app.core.security import hash_password
from app.utils.activity_helpers import emit_user_activity
from app.constants.activity_codes import ActivityCode
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def _get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise AppException(404, "User not found", ErrorCode.USER_NOT_FOUND)
    return user


async def get_customer(db: AsyncSession, user_id: int) -> User:
    user = await _get_user(db, user_id)
    if UserRole(user.role) != UserRole.customer or not user.is_active:
        raise AppException(404, "Customer not found", ErrorCode.USER_NOT_FOUND)
    return user


# =========================
# CREATE USER
# =========================
async def create_user(db: AsyncSession, payload: UserCreateSchema, admin: User) -> UserDetailSchema:
    exists = await db.scalar(select(User.id).where(User.username == payload.email))
    if exists:
        raise AppException(409, "User already exists", ErrorCode.USER_EMAIL_EXISTS)

    user = User(
        username=payload.email,
        name=payload.name,
        company_name=payload.company_name,
        password_hash=hash_password(payload.password),
        role=payload.role,
        is_active=True,
        is_online=False,
        token_version=0,
        version=1,
        created_by_admin_id=admin.id,
    )

    db.add(user)
    await db.flush()

    await emit_user_activity(
        db,
        admin,
        ActivityCode.CREATE_USER,
        target_email=user.username,
        target_role=payload.role.value.capitalize(),
    )

    await db.commit()

    logger.info("User created", extra={"user_id": user.id, "role": payload.role.value})
    return UserDetailSchema.model_validate(user)


# =========================
# LIST USERS
# =========================
async def list_users(db: AsyncSession, filters: UserListFilters) -> dict:
    base_stmt = select(User)

    if filters.search:
        pattern = f"%{filters.search}%"
        base_stmt = base_stmt.where(
            or_(
                User.username.ilike(pattern),
                User.name.ilike(pattern),
                User.company_name.ilike(pattern),
            )
        )

    if filters.role:
        base_stmt = base_stmt.where(User.role == filters.role)

    if filters.is_active is not None:
        base_stmt = base_stmt.where(User.is_active == filters.is_active)

    if filters.is_online is not None:
        base_stmt = base_stmt.where(User.is_online == filters.is_online)

    total = await db.scalar(
        select(func.count()).select_from(base_stmt.subquery())
    )

    sort_map = {
        "created_at": User.created_at,
        "username": User.username,
        "name": User.name,
    }
    sort_col = sort_map.get(filters.sort_by)
    if sort_col is None:
        raise AppException(400, "Invalid sort field", ErrorCode.VALIDATION_ERROR)

    sort_col = sort_col.desc() if filters.sort_order.lower() == "desc" else sort_col.asc()

    result = await db.execute(
        base_stmt
        .order_by(sort_col, User.id)
        .limit(filters.page_size)
        .offset((filters.page - 1) * filters.page_size)
    )

    return {
        "items": [UserListItemSchema.model_validate(u) for u in result.scalars().all()],
        "total": total or 0,
        "page": filters.page,
        "page_size": filters.page_size,
    }


# =========================
# GET USER BY ID
# =========================
async def get_user_by_id(db: AsyncSession, user_id: int) -> UserDetailSchema:
    return UserDetailSchema.model_validate(await _get_user(db, user_id))


# =========================
# UPDATE USER
# =========================
async def update_user(
    db: AsyncSession,
    user_id: int,
    payload: UserUpdateSchema,
    admin: User,
) -> UserDetailSchema:
    user = await _get_user(db, user_id)

    if user.version != payload.version:
        raise AppException(409, "User was modified by another process", ErrorCode.USER_VERSION_CONFLICT)

    prev_email = user.username
    prev_role = UserRole(user.role)
    audit: list[tuple[ActivityCode, dict]] = []

    if payload.email and payload.email != user.username:
        exists = await db.scalar(
            select(User.id).where(User.username == payload.email, User.id != user_id)
        )
        if exists:
            raise AppException(409, "Email already in use", ErrorCode.USER_EMAIL_EXISTS)
        user.username = payload.email
        audit.append((ActivityCode.UPDATE_USER_EMAIL, {"target_email": prev_email, "new_email": payload.email}))

    if payload.password:
        user.password_hash = hash_password(payload.password)
        # existing sessions must log in again with the new password
        user.token_version += 1
        audit.append((ActivityCode.UPDATE_USER_PASSWORD, {"target_email": user.username}))

    if payload.role and payload.role != prev_role:
        user.role = payload.role
        user.token_version += 1
        audit.append((
            ActivityCode.UPDATE_USER_ROLE,
            {"target_email": user.username, "old_role": prev_role.value, "new_role": payload.role.value},
        ))

    profile_changes = []
    for field in ("name", "company_name"):
        value = getattr(payload, field)
        if value is not None and value != getattr(user, field):
            setattr(user, field, value)
            profile_changes.append(field)
    if profile_changes:
        audit.append((
            ActivityCode.UPDATE_USER_PROFILE,
            {"target_email": user.username, "changes": ", ".join(profile_changes)},
        ))

    if not audit:
        raise AppException(400, "No changes provided", ErrorCode.VALIDATION_ERROR)

    user.version += 1

    for code, context in audit:
        await emit_user_activity(db, admin, code, **context)

    await db.commit()
    return UserDetailSchema.model_validate(user)


# =========================
# ACTIVATE / DEACTIVATE
# =========================
async def set_user_active(
    db: AsyncSession,
    user_id: int,
    version: int,
    active: bool,
    admin: User,
) -> UserDetailSchema:
    user = await _get_user(db, user_id)

    if user.version != version:
        raise AppException(409, "User was modified by another process", ErrorCode.USER_VERSION_CONFLICT)

    if user.is_active == active:
        raise AppException(
            409,
            "User already active" if active else "User already inactive",
            ErrorCode.CONFLICT,
        )

    if user.id == admin.id and not active:
        raise AppException(400, "You cannot deactivate your own account", ErrorCode.VALIDATION_ERROR)

    user.is_active = active
    user.version += 1
    if not active:
        user.token_version += 1
        user.is_online = False

    await emit_user_activity(
        db,
        admin,
        ActivityCode.REACTIVATE_USER if active else ActivityCode.DEACTIVATE_USER,
        target_email=user.username,
    )
    await db.commit()

    logger.info(
        "User activation changed",
        extra={"target_user_id": user.id, "is_active": active, "new_version": user.version},
    )
    return UserDetailSchema.model_validate(user)
