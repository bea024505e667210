from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums.order_status import OrderStatus
from app.models.enums.shipment_status import ShipmentStatus


class ShipmentCreate(BaseModel):
    quantity_shipped: int = Field(gt=0)
    tracking_number: Optional[str] = Field(None, max_length=120)
    shipping_carrier: Optional[str] = Field(None, max_length=120)
    notes: Optional[str] = None


class ShipmentTrackingUpdate(BaseModel):
    tracking_status: OrderStatus


class ShipmentDeliver(BaseModel):
    delivery_date: Optional[datetime] = None


class ShipmentOut(BaseModel):
    id: int
    order_id: int
    quantity_shipped: int
    tracking_number: Optional[str]
    shipping_carrier: Optional[str]
    shipment_date: datetime
    delivery_date: Optional[datetime]
    status: ShipmentStatus
    tracking_status: OrderStatus
    tracking_label: str
    tracking_color: str
    notes: Optional[str]


class ShipmentSummary(BaseModel):
    total_ordered: int
    total_shipped: int
    remaining: int
    shipment_count: int
    delivered_count: int
    all_delivered: bool


class ShipmentListOut(BaseModel):
    order_id: int
    order_number: str
    summary: ShipmentSummary
    items: list[ShipmentOut]
