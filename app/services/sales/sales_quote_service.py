from datetime import date, datetime, timedelta, timezone

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.rfq.rfq_models import Rfq
from app.models.sales.sales_quote_models import SalesQuote
from app.models.users.user_models import User
from app.models.enums.rfq_status import RfqStatus
from app.models.enums.sales_quote_status import SalesQuoteStatus
from app.schemas.sales.sales_quote_schemas import (
    SalesQuoteCreate,
    SalesQuoteResponse,
    SalesQuoteOut,
)
from app.services.rfq.rfq_service import get_rfq_for_user
from app.core.config import QUOTE_VALIDITY_DAYS
from app.core.exceptions import AppException
from app.core.storage import (
    store_bytes,
    read_bytes,
    delete_object,
    check_upload_size,
    check_file_name,
    file_extension,
)
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_user_activity
from app.utils.check_roles import is_admin
from app.utils.numbering import generate_number, QUOTE_PREFIX
from app.utils.logger import get_logger

logger = get_logger(__name__)

QUOTABLE_RFQ_STATUSES = {RfqStatus.submitted, RfqStatus.quoted}
PURCHASE_ORDER_EXTENSIONS = {"pdf", "jpg", "jpeg", "png"}
PURCHASE_ORDER_QUOTE_STATUSES = {SalesQuoteStatus.pending, SalesQuoteStatus.accepted}


async def get_quote_for_user(db: AsyncSession, quote_id: int, user: User) -> tuple[SalesQuote, Rfq]:
    row = (
        await db.execute(
            select(SalesQuote, Rfq)
            .join(Rfq, Rfq.id == SalesQuote.rfq_id)
            .where(SalesQuote.id == quote_id)
        )
    ).first()

    if not row or (not is_admin(user) and row.Rfq.user_id != user.id):
        raise AppException(404, "Quote not found", ErrorCode.QUOTE_NOT_FOUND)
    return row.SalesQuote, row.Rfq


async def get_accepted_quote(db: AsyncSession, rfq_id: int) -> SalesQuote | None:
    return await db.scalar(
        select(SalesQuote)
        .where(
            SalesQuote.rfq_id == rfq_id,
            SalesQuote.status == SalesQuoteStatus.accepted,
        )
        .order_by(SalesQuote.id.desc())
        .limit(1)
    )


# =====================================================
# CREATE
# =====================================================
async def create_sales_quote(
    db: AsyncSession,
    payload: SalesQuoteCreate,
    admin: User,
) -> SalesQuoteOut:
    rfq = await get_rfq_for_user(db, payload.rfq_id, admin)

    if RfqStatus(rfq.status) not in QUOTABLE_RFQ_STATUSES:
        raise AppException(
            409,
            f"Cannot quote an RFQ that is {RfqStatus(rfq.status).value}",
            ErrorCode.RFQ_INVALID_STATE,
        )

    open_quote = await db.scalar(
        select(SalesQuote.id).where(
            SalesQuote.rfq_id == rfq.id,
            SalesQuote.status == SalesQuoteStatus.pending,
        )
    )
    if open_quote:
        raise AppException(
            409,
            "This RFQ already has a quote awaiting the customer",
            ErrorCode.QUOTE_INVALID_STATE,
        )

    valid_until = payload.valid_until or date.today() + timedelta(days=QUOTE_VALIDITY_DAYS)
    if valid_until < date.today():
        raise AppException(400, "valid_until cannot be in the past", ErrorCode.VALIDATION_ERROR)

    quote = SalesQuote(
        rfq_id=rfq.id,
        quote_number=await generate_number(db, SalesQuote.quote_number, QUOTE_PREFIX),
        amount=payload.amount,
        currency=payload.currency.upper(),
        valid_until=valid_until,
        estimated_delivery_date=payload.estimated_delivery_date,
        notes=payload.notes,
        status=SalesQuoteStatus.pending,
        version=1,
        created_by_id=admin.id,
        updated_by_id=admin.id,
    )
    db.add(quote)
    rfq.status = RfqStatus.quoted
    await db.flush()

    await emit_user_activity(
        db,
        admin,
        ActivityCode.CREATE_QUOTE,
        target_name=quote.quote_number,
        rfq_id=rfq.id,
        amount=quote.amount,
        currency=quote.currency,
    )
    await db.commit()

    logger.info("Sales quote created", extra={"quote_id": quote.id, "rfq_id": rfq.id})
    return SalesQuoteOut.model_validate(quote)


# =====================================================
# READ
# =====================================================
async def get_sales_quote(db: AsyncSession, quote_id: int, user: User) -> SalesQuoteOut:
    quote, _ = await get_quote_for_user(db, quote_id, user)
    return SalesQuoteOut.model_validate(quote)


async def list_sales_quotes(
    db: AsyncSession,
    user: User,
    status: SalesQuoteStatus | None = None,
    rfq_id: int | None = None,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    stmt = select(SalesQuote).join(Rfq, Rfq.id == SalesQuote.rfq_id)

    if not is_admin(user):
        stmt = stmt.where(Rfq.user_id == user.id)
    if status:
        stmt = stmt.where(SalesQuote.status == status)
    if rfq_id:
        stmt = stmt.where(SalesQuote.rfq_id == rfq_id)

    total = await db.scalar(select(func.count()).select_from(stmt.subquery()))

    result = await db.execute(
        stmt
        .order_by(SalesQuote.created_at.desc(), SalesQuote.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return {
        "items": [SalesQuoteOut.model_validate(q) for q in result.scalars().all()],
        "total": total or 0,
        "page": page,
        "page_size": page_size,
    }


# =====================================================
# CUSTOMER RESPONSE
# =====================================================
async def respond_to_sales_quote(
    db: AsyncSession,
    quote_id: int,
    payload: SalesQuoteResponse,
    customer: User,
) -> SalesQuoteOut:
    quote, rfq = await get_quote_for_user(db, quote_id, customer)

    if SalesQuoteStatus(quote.status) != SalesQuoteStatus.pending:
        raise AppException(
            409,
            f"Quote is already {SalesQuoteStatus(quote.status).value}",
            ErrorCode.QUOTE_INVALID_STATE,
        )

    if quote.valid_until < date.today():
        raise AppException(409, "Quote has expired", ErrorCode.QUOTE_EXPIRED)

    if payload.accept:
        quote.status = SalesQuoteStatus.accepted
        if payload.purchase_order_number:
            quote.purchase_order_number = payload.purchase_order_number
        rfq.status = RfqStatus.accepted
        code = ActivityCode.ACCEPT_QUOTE
    else:
        quote.status = SalesQuoteStatus.declined
        rfq.status = RfqStatus.declined
        code = ActivityCode.DECLINE_QUOTE

    quote.customer_response = payload.customer_response
    quote.responded_at = datetime.now(timezone.utc)
    quote.version += 1
    quote.updated_by_id = customer.id

    await emit_user_activity(db, customer, code, target_name=quote.quote_number)
    await db.commit()

    logger.info(
        "Sales quote answered",
        extra={"quote_id": quote.id, "status": SalesQuoteStatus(quote.status).value},
    )
    return SalesQuoteOut.model_validate(quote)


# =====================================================
# PURCHASE ORDER DOCUMENT
# =====================================================
async def upload_purchase_order(
    db: AsyncSession,
    quote_id: int,
    purchase_order_number: str,
    filename: str,
    data: bytes,
    customer: User,
) -> SalesQuoteOut:
    """Attach the customer's PO to a quote they are accepting or have accepted.

    A new upload replaces the previous document and PO number.
    """
    quote, rfq = await get_quote_for_user(db, quote_id, customer)
    if rfq.user_id != customer.id:
        raise AppException(404, "Quote not found", ErrorCode.QUOTE_NOT_FOUND)

    if SalesQuoteStatus(quote.status) not in PURCHASE_ORDER_QUOTE_STATUSES:
        raise AppException(
            409,
            f"Cannot attach a purchase order to a quote that is {SalesQuoteStatus(quote.status).value}",
            ErrorCode.QUOTE_INVALID_STATE,
        )

    check_file_name(filename)
    check_upload_size(len(data))
    if file_extension(filename) not in PURCHASE_ORDER_EXTENSIONS:
        raise AppException(
            400,
            "Purchase order must be a PDF, JPG or PNG file",
            ErrorCode.PURCHASE_ORDER_INVALID_FILE,
        )

    previous_key = quote.purchase_order_url
    key, _ = await store_bytes(data, f"purchase-orders/{quote.id}", filename)

    quote.purchase_order_url = key
    quote.purchase_order_file_name = filename
    quote.purchase_order_number = purchase_order_number
    quote.version += 1
    quote.updated_by_id = customer.id

    await emit_user_activity(
        db,
        customer,
        ActivityCode.UPLOAD_PURCHASE_ORDER,
        target_name=quote.quote_number,
        purchase_order_number=purchase_order_number,
    )
    await db.commit()

    if previous_key and previous_key != key:
        try:
            await delete_object(previous_key)
        except AppException:
            logger.warning("Replaced purchase order not removed", extra={"key": previous_key})

    logger.info("Purchase order attached", extra={"quote_id": quote.id})
    return SalesQuoteOut.model_validate(quote)


async def download_purchase_order(db: AsyncSession, quote_id: int, user: User) -> tuple[bytes, str]:
    quote, _ = await get_quote_for_user(db, quote_id, user)
    if not quote.purchase_order_url:
        raise AppException(404, "No purchase order attached to this quote", ErrorCode.PURCHASE_ORDER_NOT_FOUND)

    ext = file_extension(quote.purchase_order_file_name or "") or "pdf"
    filename = f"PO-{quote.purchase_order_number or quote.quote_number}.{ext}"
    return await read_bytes(quote.purchase_order_url), filename
