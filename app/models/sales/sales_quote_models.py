from decimal import Decimal

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Date,
    DateTime,
    Numeric,
    ForeignKey,
    Enum,
    CheckConstraint,
)

from app.core.db import Base
from app.models.base.mixins import TimestampMixin, AuditMixin
from app.models.enums.sales_quote_status import SalesQuoteStatus


class SalesQuote(Base, TimestampMixin, AuditMixin):
    __tablename__ = "sales_quotes"

    id = Column(Integer, primary_key=True)
    rfq_id = Column(Integer, ForeignKey("rfqs.id", ondelete="CASCADE"), nullable=False, index=True)

    quote_number = Column(String(20), unique=True, nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    currency = Column(String(3), nullable=False, default="USD")
    valid_until = Column(Date, nullable=False)
    estimated_delivery_date = Column(Date)
    notes = Column(Text)

    status = Column(Enum(SalesQuoteStatus), nullable=False, default=SalesQuoteStatus.pending, index=True)
    customer_response = Column(Text)
    purchase_order_number = Column(String(100))
    purchase_order_url = Column(String(500))
    purchase_order_file_name = Column(String(255))
    responded_at = Column(DateTime(timezone=True))

    version = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_sales_quote_amount"),
    )

    @property
    def has_purchase_order(self) -> bool:
        return bool(self.purchase_order_url)

    def __repr__(self):
        return f"<SalesQuote id={self.id} number={self.quote_number} status={self.status}>"
