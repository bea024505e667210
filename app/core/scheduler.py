from apscheduler.schedulers.asyncio import AsyncIOScheduler
from app.core.db import AsyncSessionLocal

from app.services.sales.sales_quote_expiry_service import auto_expire_sales_quotes
from app.utils.logger import get_logger

logger = get_logger(__name__)

scheduler = AsyncIOScheduler()


@scheduler.scheduled_job("cron", hour=0, minute=5)  # daily at 00:05
async def expire_sales_quotes_job():
    async with AsyncSessionLocal() as db:
        count = await auto_expire_sales_quotes(db)
    logger.info("Quote expiry job finished", extra={"expired": count})
