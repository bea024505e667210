from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from app.models.enums.user_role import UserRole


# =========================
# CREATE / UPDATE
# =========================
class UserCreateSchema(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    role: UserRole
    name: Optional[str] = Field(None, max_length=150)
    company_name: Optional[str] = Field(None, max_length=200)


class UserUpdateSchema(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8)
    role: Optional[UserRole] = None
    name: Optional[str] = Field(None, max_length=150)
    company_name: Optional[str] = Field(None, max_length=200)
    version: int


class VersionOnlySchema(BaseModel):
    version: int


# =========================
# LIST FILTERS
# =========================
class UserListFilters(BaseModel):
    search: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    is_online: Optional[bool] = None
    sort_by: str = "created_at"
    sort_order: str = "desc"
    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1, le=100)


# =========================
# RESPONSE SCHEMAS
# =========================
class UserListItemSchema(BaseModel):
    id: int
    username: EmailStr
    name: Optional[str]
    company_name: Optional[str]
    role: UserRole
    is_active: bool
    is_online: bool
    last_login: Optional[datetime]
    version: int

    class Config:
        from_attributes = True


class UserDetailSchema(UserListItemSchema):
    created_at: datetime
    updated_at: Optional[datetime]
    created_by_admin_id: Optional[int]
