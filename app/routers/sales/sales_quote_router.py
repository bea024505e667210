from fastapi import APIRouter, Depends, Query, UploadFile, File, Form
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.storage import read_upload, content_disposition, guess_content_type
from app.models.users.user_models import User
from app.models.enums.sales_quote_status import SalesQuoteStatus
from app.schemas.sales.sales_quote_schemas import (
    SalesQuoteCreate,
    SalesQuoteResponse,
    SalesQuoteOut,
)
from app.services.sales.sales_quote_service import (
    create_sales_quote,
    list_sales_quotes,
    get_sales_quote,
    get_quote_for_user,
    respond_to_sales_quote,
    upload_purchase_order,
    download_purchase_order,
)
from app.utils.pdf_generators.sales_quote_pdf import render_sales_quote_pdf
from app.utils.check_roles import require_role
from app.utils.response import success_response, APIResponse, PageData

router = APIRouter(prefix="/quotes", tags=["Sales Quotes"])


@router.post("", response_model=APIResponse[SalesQuoteOut], status_code=201)
async def create_sales_quote_api(
    payload: SalesQuoteCreate,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    quote = await create_sales_quote(db, payload, admin)
    return success_response("Quote created successfully", quote)


@router.get("", response_model=APIResponse[PageData[SalesQuoteOut]])
async def list_sales_quotes_api(
    status: SalesQuoteStatus | None = Query(None),
    rfq_id: int | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    data = await list_sales_quotes(
        db, user, status=status, rfq_id=rfq_id, page=page, page_size=page_size
    )
    return success_response("Quotes retrieved successfully", data)


@router.get("/{quote_id}", response_model=APIResponse[SalesQuoteOut])
async def get_sales_quote_api(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    quote = await get_sales_quote(db, quote_id, user)
    return success_response("Quote retrieved successfully", quote)


@router.get("/{quote_id}/pdf")
async def download_sales_quote_pdf_api(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    quote, rfq = await get_quote_for_user(db, quote_id, user)
    customer = await db.get(User, rfq.user_id)
    pdf = render_sales_quote_pdf(quote, rfq, customer)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(f"{quote.quote_number}.pdf")},
    )


@router.post("/{quote_id}/respond", response_model=APIResponse[SalesQuoteOut])
async def respond_to_sales_quote_api(
    quote_id: int,
    payload: SalesQuoteResponse,
    db: AsyncSession = Depends(get_db),
    customer=Depends(require_role(["customer"])),
):
    quote = await respond_to_sales_quote(db, quote_id, payload, customer)
    message = "Quote accepted" if payload.accept else "Quote declined"
    return success_response(message, quote)


# =====================================================
# PURCHASE ORDER DOCUMENT
# =====================================================
@router.put("/{quote_id}/purchase-order", response_model=APIResponse[SalesQuoteOut])
async def upload_purchase_order_api(
    quote_id: int,
    purchase_order_number: str = Form(..., min_length=1, max_length=100),
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    customer=Depends(require_role(["customer"])),
):
    filename, data = await read_upload(file, "purchase-order.pdf")
    quote = await upload_purchase_order(
        db, quote_id, purchase_order_number, filename, data, customer
    )
    return success_response("Purchase order uploaded", quote)


@router.get("/{quote_id}/purchase-order")
async def download_purchase_order_api(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    content, filename = await download_purchase_order(db, quote_id, user)
    return Response(
        content=content,
        media_type=guess_content_type(filename),
        headers={"Content-Disposition": content_disposition(filename)},
    )
