from sqlalchemy import Column, Integer, String, ForeignKey, Enum

from app.core.db import Base
from app.models.base.mixins import TimestampMixin
from app.models.enums.file_type import RfqFileType


class RfqFile(Base, TimestampMixin):
    __tablename__ = "rfq_files"

    id = Column(Integer, primary_key=True)
    rfq_id = Column(Integer, ForeignKey("rfqs.id", ondelete="CASCADE"), nullable=False, index=True)
    uploaded_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    file_name = Column(String(255), nullable=False)
    file_url = Column(String(500), nullable=False)
    file_size = Column(Integer, nullable=False)
    file_type = Column(Enum(RfqFileType), nullable=False)
    content_type = Column(String(120), nullable=False)

    def __repr__(self):
        return f"<RfqFile id={self.id} rfq_id={self.rfq_id} name={self.file_name!r}>"
