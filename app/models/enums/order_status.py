# app/models/enums/order_status.py
import enum


class OrderStatus(str, enum.Enum):
    """Manufacturing stages in lifecycle order. Member order is significant."""

    pending = "pending"
    material_procurement = "material_procurement"
    manufacturing = "manufacturing"
    finishing = "finishing"
    quality_check = "quality_check"
    packing = "packing"
    shipped = "shipped"
    delivered = "delivered"


class QualityCheckStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    needs_revision = "needs_revision"


class PaymentStatus(str, enum.Enum):
    unpaid = "unpaid"
    paid = "paid"
