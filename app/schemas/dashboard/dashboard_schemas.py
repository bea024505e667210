from decimal import Decimal

from pydantic import BaseModel


class CustomerDashboardStats(BaseModel):
    active_rfqs: int
    active_orders: int
    pending_quotes: int
    awaiting_quality_approval: int
    total_spent: Decimal


class AdminDashboardStats(BaseModel):
    orders_by_status: dict[str, int]
    active_orders: int
    awaiting_quality_approval: int
    needs_revision: int
    archived_orders: int
    open_rfqs: int
    pending_quotes: int
