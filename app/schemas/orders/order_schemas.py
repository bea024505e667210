from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums.order_status import OrderStatus, QualityCheckStatus, PaymentStatus
from app.services.orders.order_status_engine import StageState


# =====================================================
# CREATE
# =====================================================
class OrderFromRfqCreate(BaseModel):
    customer_purchase_order_number: Optional[str] = Field(None, max_length=100)
    estimated_completion: Optional[date] = None
    notes: Optional[str] = None


class ManualOrderCreate(BaseModel):
    user_id: int = Field(description="Customer the order belongs to")
    project_name: str = Field(min_length=1, max_length=200)
    material: str = Field(min_length=1, max_length=150)
    material_grade: Optional[str] = Field(None, max_length=150)
    finishing: Optional[str] = Field(None, max_length=150)
    tolerance: str = Field(min_length=1, max_length=100)
    quantity: int = Field(gt=0)
    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    currency: str = Field("USD", min_length=3, max_length=3)
    estimated_completion: Optional[date] = None
    customer_purchase_order_number: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


# =====================================================
# UPDATE
# =====================================================
class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    version: Optional[int] = None


class OrderTrackingUpdate(BaseModel):
    tracking_number: Optional[str] = Field(None, max_length=120)
    shipping_carrier: Optional[str] = Field(None, max_length=120)
    estimated_completion: Optional[date] = None
    version: Optional[int] = None


class OrderPaymentUpdate(BaseModel):
    payment_status: PaymentStatus
    version: Optional[int] = None


# =====================================================
# RESPONSES
# =====================================================
class OrderListItem(BaseModel):
    id: int
    order_number: str
    user_id: int
    project_name: str
    quantity: int
    quantity_shipped: int
    quantity_remaining: int
    amount: Decimal
    currency: str
    order_status: OrderStatus
    status_label: str
    status_color: str
    progress_percentage: float
    quality_check_status: QualityCheckStatus
    payment_status: PaymentStatus
    is_archived: bool
    order_date: datetime
    estimated_completion: Optional[date]


class OrderOut(OrderListItem):
    rfq_id: int
    quote_id: Optional[int]
    customer_purchase_order_number: Optional[str]
    material: str
    material_grade: Optional[str]
    finishing: Optional[str]
    tolerance: str
    notes: Optional[str]
    quality_check_notes: Optional[str]
    customer_approved_at: Optional[datetime]
    tracking_number: Optional[str]
    shipping_carrier: Optional[str]
    has_invoice: bool
    archived_at: Optional[datetime]
    version: int
    created_at: datetime
    updated_at: Optional[datetime]


class TimelineStage(BaseModel):
    status: OrderStatus
    label: str
    state: StageState


class OrderTimelineOut(BaseModel):
    order_id: int
    order_number: str
    order_status: OrderStatus
    progress_percentage: float
    stages: list[TimelineStage]


class StatusDisplayOut(BaseModel):
    status: OrderStatus
    label: str
    color: str
    index: int
    progress_percentage: float
