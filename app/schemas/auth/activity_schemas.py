# app/schemas/auth/activity_schemas.py

from datetime import datetime
from typing import Optional

from fastapi import Query
from pydantic import BaseModel


class UserActivityFilters(BaseModel):
    user_id: Optional[int] = Query(None)
    username: Optional[str] = Query(None)
    search: Optional[str] = Query(None, description="Match against the activity message")

    page: int = Query(1, ge=1)
    page_size: int = Query(20, ge=1, le=100)

    sort_by: str = Query("created_at")
    sort_order: str = Query("desc")


class UserActivityOut(BaseModel):
    id: int
    user_id: Optional[int]
    username_snapshot: str
    message: str
    created_at: datetime

    class Config:
        from_attributes = True
