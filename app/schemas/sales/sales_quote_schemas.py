from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums.sales_quote_status import SalesQuoteStatus


class SalesQuoteCreate(BaseModel):
    rfq_id: int
    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    currency: str = Field("USD", min_length=3, max_length=3)
    valid_until: Optional[date] = None
    estimated_delivery_date: Optional[date] = None
    notes: Optional[str] = None


class SalesQuoteResponse(BaseModel):
    accept: bool
    customer_response: Optional[str] = None
    purchase_order_number: Optional[str] = Field(None, max_length=100)


class SalesQuoteOut(BaseModel):
    id: int
    rfq_id: int
    quote_number: str
    amount: Decimal
    currency: str
    valid_until: date
    estimated_delivery_date: Optional[date]
    notes: Optional[str]
    status: SalesQuoteStatus
    customer_response: Optional[str]
    purchase_order_number: Optional[str]
    has_purchase_order: bool
    responded_at: Optional[datetime]
    version: int
    created_at: datetime

    class Config:
        from_attributes = True
