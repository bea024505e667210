from datetime import datetime, timezone

from sqlalchemy import Column, Integer, DateTime, ForeignKey
from sqlalchemy.orm import declared_attr
from sqlalchemy.sql import func


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    # Python-side values so flushed rows never carry expired timestamp
    # attributes that would need a lazy reload under AsyncSession.
    created_at = Column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        onupdate=utc_now,
    )


class AuditMixin:
    @declared_attr
    def created_by_id(cls):
        return Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    @declared_attr
    def updated_by_id(cls):
        return Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
