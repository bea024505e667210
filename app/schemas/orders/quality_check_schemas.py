from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums.file_type import QualityCheckFileType
from app.models.enums.order_status import OrderStatus, QualityCheckStatus


class QualityCheckFileOut(BaseModel):
    id: int
    order_id: int
    file_name: str
    file_size: int
    file_type: QualityCheckFileType
    content_type: str
    uploaded_by_id: Optional[int]
    created_at: datetime

    class Config:
        from_attributes = True


class QualityCheckDecision(BaseModel):
    approved: bool
    notes: Optional[str] = Field(None, max_length=2000)


class QualityCheckState(BaseModel):
    order_id: int
    order_number: str
    order_status: OrderStatus
    quality_check_status: QualityCheckStatus
    quality_check_notes: Optional[str]
    customer_approved_at: Optional[datetime]


class QualityCheckQueueItem(QualityCheckState):
    user_id: int
    project_name: str
    customer_name: Optional[str]
    company_name: Optional[str]
    file_count: int
