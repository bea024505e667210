from fastapi import APIRouter, Depends, Query, UploadFile, File
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.storage import read_upload, content_disposition
from app.models.enums.order_status import OrderStatus
from app.schemas.orders.order_schemas import (
    OrderFromRfqCreate,
    ManualOrderCreate,
    OrderStatusUpdate,
    OrderTrackingUpdate,
    OrderPaymentUpdate,
    OrderListItem,
    OrderOut,
    OrderTimelineOut,
    StatusDisplayOut,
)
from app.schemas.rfq.rfq_schemas import RfqOut
from app.services.orders.order_service import (
    create_order_from_rfq,
    create_manual_order,
    list_orders,
    get_order,
    get_order_timeline,
    list_status_display,
    set_order_status,
    move_to_packing,
    update_tracking,
    update_payment_status,
    reopen_order,
    upload_invoice,
    download_invoice,
    reorder,
)
from app.utils.check_roles import require_role
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse, PageData
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])
status_router = APIRouter(prefix="/order-statuses", tags=["Orders"])


@status_router.get("", response_model=APIResponse[list[StatusDisplayOut]])
async def list_order_statuses_api(user=Depends(get_current_user)):
    return success_response("Order statuses", list_status_display())


# =====================================================
# CREATE
# =====================================================
@router.post("/from-rfq/{rfq_id}", response_model=APIResponse[OrderOut], status_code=201)
async def create_order_from_rfq_api(
    rfq_id: int,
    payload: OrderFromRfqCreate,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    order = await create_order_from_rfq(db, rfq_id, payload, admin)
    return success_response("Order created successfully", order)


@router.post("/manual", response_model=APIResponse[OrderOut], status_code=201)
async def create_manual_order_api(
    payload: ManualOrderCreate,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    order = await create_manual_order(db, payload, admin)
    return success_response("Order created successfully", order)


# =====================================================
# READ
# =====================================================
@router.get("", response_model=APIResponse[PageData[OrderListItem]])
async def list_orders_api(
    status: OrderStatus | None = Query(None),
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    data = await list_orders(
        db, user, status=status, search=search, page=page, page_size=page_size
    )
    return success_response("Orders retrieved successfully", data)


@router.get("/archived", response_model=APIResponse[PageData[OrderListItem]])
async def list_archived_orders_api(
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    data = await list_orders(
        db, admin, archived=True, search=search, page=page, page_size=page_size
    )
    return success_response("Archived orders retrieved successfully", data)


@router.get("/{order_id}", response_model=APIResponse[OrderOut])
async def get_order_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    order = await get_order(db, order_id, user)
    return success_response("Order retrieved successfully", order)


@router.get("/{order_id}/timeline", response_model=APIResponse[OrderTimelineOut])
async def get_order_timeline_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    timeline = await get_order_timeline(db, order_id, user)
    return success_response("Order timeline retrieved", timeline)


# =====================================================
# STATUS
# =====================================================
@router.patch("/{order_id}/status", response_model=APIResponse[OrderOut])
async def set_order_status_api(
    order_id: int,
    payload: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    logger.info("Order status change", extra={"order_id": order_id, "status": payload.status.value})
    order = await set_order_status(db, order_id, payload.status, admin, payload.version)
    return success_response("Order status updated", order)


@router.post("/{order_id}/move-to-packing", response_model=APIResponse[OrderOut])
async def move_to_packing_api(
    order_id: int,
    version: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    order = await move_to_packing(db, order_id, admin, version)
    return success_response("Order moved to packing", order)


# =====================================================
# TRACKING / PAYMENT / ARCHIVE
# =====================================================
@router.patch("/{order_id}/tracking", response_model=APIResponse[OrderOut])
async def update_tracking_api(
    order_id: int,
    payload: OrderTrackingUpdate,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    order = await update_tracking(db, order_id, payload, admin)
    return success_response("Tracking information updated", order)


@router.patch("/{order_id}/payment", response_model=APIResponse[OrderOut])
async def update_payment_status_api(
    order_id: int,
    payload: OrderPaymentUpdate,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    order = await update_payment_status(db, order_id, payload, admin)
    return success_response("Payment status updated", order)


@router.patch("/{order_id}/reopen", response_model=APIResponse[OrderOut])
async def reopen_order_api(
    order_id: int,
    version: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    order = await reopen_order(db, order_id, admin, version)
    return success_response("Order reopened", order)


# =====================================================
# INVOICE
# =====================================================
@router.put("/{order_id}/invoice", response_model=APIResponse[OrderOut])
async def upload_invoice_api(
    order_id: int,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    filename, data = await read_upload(file, "invoice.pdf")
    order = await upload_invoice(db, order_id, filename, data, admin)
    return success_response("Invoice uploaded", order)


@router.get("/{order_id}/invoice")
async def download_invoice_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    content, filename = await download_invoice(db, order_id, user)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(filename)},
    )


# =====================================================
# REORDER
# =====================================================
@router.post("/{order_id}/reorder", response_model=APIResponse[RfqOut], status_code=201)
async def reorder_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    customer=Depends(require_role(["customer"])),
):
    rfq = await reorder(db, order_id, customer)
    return success_response("Reorder submitted as a new RFQ", rfq)
