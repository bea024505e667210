from sqlalchemy import Column, Integer, String, ForeignKey, Enum

from app.core.db import Base
from app.models.base.mixins import TimestampMixin
from app.models.enums.file_type import QualityCheckFileType


class QualityCheckFile(Base, TimestampMixin):
    __tablename__ = "quality_check_files"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("sales_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    uploaded_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    file_name = Column(String(255), nullable=False)
    file_url = Column(String(500), nullable=False)
    file_size = Column(Integer, nullable=False)
    file_type = Column(Enum(QualityCheckFileType), nullable=False)
    content_type = Column(String(120), nullable=False)

    def __repr__(self):
        return f"<QualityCheckFile id={self.id} order_id={self.order_id} name={self.file_name!r}>"
