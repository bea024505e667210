from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.sales.sales_quote_models import SalesQuote
from app.models.enums.sales_quote_status import SalesQuoteStatus
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity, SYSTEM_ACTOR
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def auto_expire_sales_quotes(db: AsyncSession, today: date | None = None) -> int:
    """Expire pending quotes whose ``valid_until`` has passed. Returns the count."""
    today = today or date.today()

    result = await db.execute(
        select(SalesQuote)
        .where(
            SalesQuote.status == SalesQuoteStatus.pending,
            SalesQuote.valid_until < today,
        )
        .with_for_update(skip_locked=True)
    )
    expired = result.scalars().all()

    if not expired:
        return 0

    for quote in expired:
        quote.status = SalesQuoteStatus.expired
        quote.version += 1
        quote.updated_by_id = None

        await emit_activity(
            db,
            user_id=None,
            username="system",
            code=ActivityCode.EXPIRE_QUOTE,
            target_name=quote.quote_number,
            changes=f"valid until {quote.valid_until}, expired automatically on {today}",
            **SYSTEM_ACTOR,
        )

    await db.commit()

    logger.info("Sales quotes expired", extra={"count": len(expired)})
    return len(expired)
