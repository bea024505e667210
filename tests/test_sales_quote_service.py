"""Quotes against RFQs, customer responses and nightly expiry."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.core.storage import read_bytes
from app.models.enums.rfq_status import RfqStatus
from app.models.enums.sales_quote_status import SalesQuoteStatus
from app.models.rfq.rfq_models import Rfq
from app.models.sales.sales_quote_models import SalesQuote
from app.schemas.sales.sales_quote_schemas import SalesQuoteCreate, SalesQuoteResponse
from app.services.sales.sales_quote_expiry_service import auto_expire_sales_quotes
from app.services.sales.sales_quote_service import (
    create_sales_quote,
    download_purchase_order,
    list_sales_quotes,
    respond_to_sales_quote,
    upload_purchase_order,
)
from app.utils.numbering import QUOTE_PREFIX, year_prefix
from app.utils.pdf_generators.sales_quote_pdf import render_sales_quote_pdf

from tests.factories import make_rfq


def quote_for(rfq, **fields) -> SalesQuoteCreate:
    return SalesQuoteCreate(rfq_id=rfq.id, amount=Decimal("1999.50"), **fields)


async def test_quoting_moves_rfq_to_quoted(db, admin, customer):
    rfq = await make_rfq(db, customer)

    quote = await create_sales_quote(db, quote_for(rfq), admin)

    assert quote.quote_number == f"{year_prefix(QUOTE_PREFIX)}001"
    assert quote.status == SalesQuoteStatus.pending
    assert quote.valid_until == date.today() + timedelta(days=30)
    assert RfqStatus((await db.get(Rfq, rfq.id)).status) == RfqStatus.quoted


async def test_only_one_open_quote_per_rfq(db, admin, customer):
    rfq = await make_rfq(db, customer)
    await create_sales_quote(db, quote_for(rfq), admin)

    with pytest.raises(AppException) as exc:
        await create_sales_quote(db, quote_for(rfq), admin)
    assert exc.value.error_code == ErrorCode.QUOTE_INVALID_STATE


async def test_declined_rfq_cannot_be_quoted(db, admin, customer):
    rfq = await make_rfq(db, customer, status=RfqStatus.declined)

    with pytest.raises(AppException) as exc:
        await create_sales_quote(db, quote_for(rfq), admin)
    assert exc.value.error_code == ErrorCode.RFQ_INVALID_STATE


async def test_customer_accepts_quote(db, admin, customer):
    rfq = await make_rfq(db, customer)
    quote = await create_sales_quote(db, quote_for(rfq), admin)

    answered = await respond_to_sales_quote(
        db,
        quote.id,
        SalesQuoteResponse(accept=True, customer_response="Go ahead", purchase_order_number="PO-1"),
        customer,
    )

    assert answered.status == SalesQuoteStatus.accepted
    assert answered.purchase_order_number == "PO-1"
    assert answered.responded_at is not None
    assert answered.version == 2
    assert RfqStatus((await db.get(Rfq, rfq.id)).status) == RfqStatus.accepted

    with pytest.raises(AppException) as exc:
        await respond_to_sales_quote(db, quote.id, SalesQuoteResponse(accept=False), customer)
    assert exc.value.error_code == ErrorCode.QUOTE_INVALID_STATE


async def test_other_customers_cannot_answer(db, admin, customer, other_customer):
    rfq = await make_rfq(db, customer)
    quote = await create_sales_quote(db, quote_for(rfq), admin)

    with pytest.raises(AppException) as exc:
        await respond_to_sales_quote(db, quote.id, SalesQuoteResponse(accept=True), other_customer)
    assert exc.value.status_code == 404

    listed = await list_sales_quotes(db, other_customer)
    assert listed["total"] == 0


async def test_expired_quote_cannot_be_accepted(db, admin, customer):
    rfq = await make_rfq(db, customer)
    quote = await create_sales_quote(db, quote_for(rfq), admin)

    row = await db.get(SalesQuote, quote.id)
    row.valid_until = date.today() - timedelta(days=1)
    await db.commit()

    with pytest.raises(AppException) as exc:
        await respond_to_sales_quote(db, quote.id, SalesQuoteResponse(accept=True), customer)
    assert exc.value.error_code == ErrorCode.QUOTE_EXPIRED


async def test_nightly_expiry(db, admin, customer):
    stale_rfq = await make_rfq(db, customer)
    fresh_rfq = await make_rfq(db, customer)
    stale = await create_sales_quote(db, quote_for(stale_rfq), admin)
    fresh = await create_sales_quote(db, quote_for(fresh_rfq), admin)

    today = date.today() + timedelta(days=31)
    fresh_row = await db.get(SalesQuote, fresh.id)
    fresh_row.valid_until = today
    await db.commit()

    assert await auto_expire_sales_quotes(db, today=today) == 1
    assert SalesQuoteStatus((await db.get(SalesQuote, stale.id)).status) == SalesQuoteStatus.expired
    assert SalesQuoteStatus((await db.get(SalesQuote, fresh.id)).status) == SalesQuoteStatus.pending

    assert await auto_expire_sales_quotes(db, today=today) == 0


async def test_quote_pdf_renders(db, admin, customer):
    rfq = await make_rfq(db, customer, notes="Anodise black")
    quote = await create_sales_quote(db, quote_for(rfq, notes="Includes tooling"), admin)

    pdf = render_sales_quote_pdf(await db.get(SalesQuote, quote.id), rfq, customer)

    assert pdf.startswith(b"%PDF")


# =====================
# PURCHASE ORDER DOCUMENT
# =====================

PO_PDF = ("acme-po.pdf", b"%PDF-1.4 purchase order")


async def test_customer_attaches_purchase_order_before_accepting(db, admin, customer):
    rfq = await make_rfq(db, customer)
    quote = await create_sales_quote(db, quote_for(rfq), admin)

    attached = await upload_purchase_order(db, quote.id, "7781-A", *PO_PDF, customer)
    assert attached.has_purchase_order is True
    assert attached.purchase_order_number == "7781-A"
    assert attached.status == SalesQuoteStatus.pending

    accepted = await respond_to_sales_quote(db, quote.id, SalesQuoteResponse(accept=True), customer)
    assert accepted.purchase_order_number == "7781-A"

    content, filename = await download_purchase_order(db, quote.id, admin)
    assert content == PO_PDF[1]
    assert filename == "PO-7781-A.pdf"


async def test_new_purchase_order_replaces_the_old_one(db, admin, customer):
    rfq = await make_rfq(db, customer)
    quote = await create_sales_quote(db, quote_for(rfq), admin)

    await upload_purchase_order(db, quote.id, "7781-A", *PO_PDF, customer)
    old_key = (await db.get(SalesQuote, quote.id)).purchase_order_url

    replaced = await upload_purchase_order(
        db, quote.id, "7781-B", "signed-po.png", b"\x89PNG signed", customer
    )
    assert replaced.purchase_order_number == "7781-B"

    with pytest.raises(AppException) as exc:
        await read_bytes(old_key)
    assert exc.value.status_code == 404

    _, filename = await download_purchase_order(db, quote.id, customer)
    assert filename == "PO-7781-B.png"


async def test_purchase_order_rules(db, admin, customer, other_customer):
    rfq = await make_rfq(db, customer)
    quote = await create_sales_quote(db, quote_for(rfq), admin)

    with pytest.raises(AppException) as exc:
        await download_purchase_order(db, quote.id, customer)
    assert exc.value.error_code == ErrorCode.PURCHASE_ORDER_NOT_FOUND

    with pytest.raises(AppException) as exc:
        await upload_purchase_order(db, quote.id, "1", "po.docx", b"PK\x03\x04", customer)
    assert exc.value.error_code == ErrorCode.PURCHASE_ORDER_INVALID_FILE

    with pytest.raises(AppException) as exc:
        await upload_purchase_order(db, quote.id, "1", *PO_PDF, other_customer)
    assert exc.value.error_code == ErrorCode.QUOTE_NOT_FOUND

    await respond_to_sales_quote(db, quote.id, SalesQuoteResponse(accept=False), customer)

    with pytest.raises(AppException) as exc:
        await upload_purchase_order(db, quote.id, "1", *PO_PDF, customer)
    assert exc.value.error_code == ErrorCode.QUOTE_INVALID_STATE
