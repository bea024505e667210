from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    Enum,
    CheckConstraint,
)

from app.core.db import Base
from app.models.base.mixins import TimestampMixin, AuditMixin, utc_now
from app.models.enums.order_status import OrderStatus
from app.models.enums.shipment_status import ShipmentStatus


class Shipment(Base, TimestampMixin, AuditMixin):
    """One partial delivery of an order, tracked through its own stage."""

    __tablename__ = "shipments"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("sales_orders.id", ondelete="CASCADE"), nullable=False, index=True)

    quantity_shipped = Column(Integer, nullable=False)
    tracking_number = Column(String(120))
    shipping_carrier = Column(String(120))
    shipment_date = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    delivery_date = Column(DateTime(timezone=True))

    status = Column(Enum(ShipmentStatus), nullable=False, default=ShipmentStatus.shipped)
    tracking_status = Column(
        Enum(OrderStatus, name="shipment_tracking_status"),
        nullable=False,
        default=OrderStatus.material_procurement,
    )
    notes = Column(Text)

    __table_args__ = (
        CheckConstraint("quantity_shipped > 0", name="ck_shipment_quantity"),
    )

    def __repr__(self):
        return (
            f"<Shipment id={self.id} order_id={self.order_id} "
            f"qty={self.quantity_shipped} tracking={self.tracking_status}>"
        )
