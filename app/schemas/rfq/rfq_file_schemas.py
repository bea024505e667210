from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from app.models.enums.file_type import RfqFileType


class RfqFileOut(BaseModel):
    id: int
    rfq_id: int
    file_name: str
    file_size: int
    file_type: RfqFileType
    content_type: str
    uploaded_by_id: Optional[int]
    created_at: datetime

    class Config:
        from_attributes = True
