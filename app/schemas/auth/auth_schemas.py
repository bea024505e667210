from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal

from app.models.enums.user_role import UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    name: str = Field(min_length=1, max_length=150)
    company_name: Optional[str] = Field(None, max_length=200)


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: Literal["bearer"] = "bearer"


class AuthUser(BaseModel):
    id: int
    username: EmailStr
    name: Optional[str]
    company_name: Optional[str]
    role: UserRole

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    auth: TokenPair
    user: AuthUser


class RefreshResponse(TokenPair):
    role: UserRole
