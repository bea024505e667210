from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums.rfq_status import RfqStatus


class RfqCreate(BaseModel):
    project_name: str = Field(min_length=1, max_length=200)
    material: str = Field(min_length=1, max_length=150)
    material_grade: Optional[str] = Field(None, max_length=150)
    finishing: Optional[str] = Field(None, max_length=150)
    tolerance: str = Field(min_length=1, max_length=100)
    quantity: int = Field(gt=0)
    manufacturing_process: Optional[str] = Field(None, max_length=150)
    international_manufacturing_ok: bool = False
    notes: Optional[str] = None
    special_instructions: Optional[str] = None


class RfqStatusUpdate(BaseModel):
    status: RfqStatus


class RfqOut(BaseModel):
    id: int
    user_id: int
    project_name: str
    material: str
    material_grade: Optional[str]
    finishing: Optional[str]
    tolerance: str
    quantity: int
    manufacturing_process: Optional[str]
    international_manufacturing_ok: bool
    notes: Optional[str]
    special_instructions: Optional[str]
    status: RfqStatus
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
