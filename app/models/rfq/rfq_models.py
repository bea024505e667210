from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    ForeignKey,
    Enum,
    Index,
    CheckConstraint,
)

from app.core.db import Base
from app.models.base.mixins import TimestampMixin
from app.models.enums.rfq_status import RfqStatus


class Rfq(Base, TimestampMixin):
    __tablename__ = "rfqs"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    project_name = Column(String(200), nullable=False)
    material = Column(String(150), nullable=False)
    material_grade = Column(String(150))
    finishing = Column(String(150))
    tolerance = Column(String(100), nullable=False)
    quantity = Column(Integer, nullable=False)
    manufacturing_process = Column(String(150))
    international_manufacturing_ok = Column(Boolean, nullable=False, default=False)
    notes = Column(Text)
    special_instructions = Column(Text)

    status = Column(Enum(RfqStatus), nullable=False, default=RfqStatus.submitted)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_rfq_quantity_positive"),
        Index("ix_rfq_user_status", "user_id", "status"),
    )

    def __repr__(self):
        return f"<Rfq id={self.id} project={self.project_name!r} status={self.status}>"
