from decimal import Decimal

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Date,
    DateTime,
    Numeric,
    ForeignKey,
    Enum,
    Index,
    CheckConstraint,
)

from app.core.db import Base
from app.models.base.mixins import TimestampMixin, AuditMixin, utc_now
from app.models.enums.order_status import OrderStatus, QualityCheckStatus, PaymentStatus


class SalesOrder(Base, TimestampMixin, AuditMixin):
    __tablename__ = "sales_orders"

    id = Column(Integer, primary_key=True)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    rfq_id = Column(Integer, ForeignKey("rfqs.id", ondelete="RESTRICT"), nullable=False, unique=True)
    quote_id = Column(Integer, ForeignKey("sales_quotes.id", ondelete="SET NULL"), nullable=True, index=True)

    order_number = Column(String(20), unique=True, nullable=False, index=True)
    customer_purchase_order_number = Column(String(100))

    project_name = Column(String(200), nullable=False)
    material = Column(String(150), nullable=False)
    material_grade = Column(String(150))
    finishing = Column(String(150))
    tolerance = Column(String(100), nullable=False)
    notes = Column(Text)

    quantity = Column(Integer, nullable=False)
    quantity_shipped = Column(Integer, nullable=False, default=0)
    quantity_remaining = Column(Integer, nullable=False)

    amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    currency = Column(String(3), nullable=False, default="USD")

    order_status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.pending, index=True)
    order_date = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    estimated_completion = Column(Date)

    quality_check_status = Column(
        Enum(QualityCheckStatus),
        nullable=False,
        default=QualityCheckStatus.pending,
    )
    quality_check_notes = Column(Text)
    customer_approved_at = Column(DateTime(timezone=True))

    tracking_number = Column(String(120))
    shipping_carrier = Column(String(120))

    invoice_url = Column(String(500))
    payment_status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.unpaid)
    is_archived = Column(Boolean, nullable=False, default=False, index=True)
    archived_at = Column(DateTime(timezone=True))

    version = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sales_order_quantity"),
        CheckConstraint("quantity_shipped >= 0", name="ck_sales_order_shipped"),
        CheckConstraint("quantity_remaining >= 0", name="ck_sales_order_remaining"),
        CheckConstraint(
            "quantity_shipped + quantity_remaining = quantity",
            name="ck_sales_order_quantity_balance",
        ),
        Index("ix_sales_order_user_status", "user_id", "order_status"),
    )

    def __repr__(self):
        return (
            f"<SalesOrder id={self.id} "
            f"number={self.order_number} "
            f"status={self.order_status} "
            f"qc={self.quality_check_status}>"
        )
