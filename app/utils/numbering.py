# app/utils/numbering.py
"""Human-facing document numbers: ``<PREFIX><YY><NNN>``.

The sequence restarts each calendar year and is zero-padded to three
digits; it simply grows wider past 999.
"""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

ORDER_PREFIX = "SORD-"
QUOTE_PREFIX = "SQTE-"


def year_prefix(prefix: str, when: datetime | None = None) -> str:
    when = when or datetime.now(timezone.utc)
    return f"{prefix}{when.year % 100:02d}"


def next_number(prefix: str, last_number: str | None, when: datetime | None = None) -> str:
    base = year_prefix(prefix, when)
    sequence = 1

    if last_number and last_number.startswith(base):
        tail = last_number[len(base):]
        if tail.isdigit():
            sequence = int(tail) + 1

    return f"{base}{sequence:03d}"


async def generate_number(db: AsyncSession, column, prefix: str) -> str:
    """Next free number for ``column`` (e.g. ``SalesOrder.order_number``)."""
    base = year_prefix(prefix)
    model = column.class_

    last = await db.scalar(
        select(column)
        .where(column.like(f"{base}%"))
        .order_by(model.id.desc())
        .limit(1)
    )
    return next_number(prefix, last)
