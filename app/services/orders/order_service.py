from datetime import datetime, timedelta, timezone

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.orders.order_models import SalesOrder
from app.models.rfq.rfq_models import Rfq
from app.models.users.user_models import User
from app.models.enums.order_status import OrderStatus, QualityCheckStatus, PaymentStatus
from app.models.enums.rfq_status import RfqStatus
from app.schemas.orders.order_schemas import (
    OrderFromRfqCreate,
    ManualOrderCreate,
    OrderTrackingUpdate,
    OrderPaymentUpdate,
    OrderListItem,
    OrderOut,
    OrderTimelineOut,
    StatusDisplayOut,
)
from app.schemas.rfq.rfq_schemas import RfqOut
from app.services.orders.order_status_engine import (
    ORDER_STATUS_SEQUENCE,
    check_transition,
    progress_percentage,
    build_timeline,
    status_index,
)
from app.services.rfq.rfq_service import get_rfq_for_user
from app.services.sales.sales_quote_service import get_accepted_quote
from app.services.users.user_services import get_customer
from app.constants.order_status_display import status_display
from app.core.config import DEFAULT_LEAD_TIME_DAYS
from app.core.exceptions import AppException
from app.core.storage import store_bytes, read_bytes, check_upload_size, check_file_name
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_user_activity
from app.utils.check_roles import is_admin
from app.utils.numbering import generate_number, ORDER_PREFIX
from app.utils.logger import get_logger

logger = get_logger(__name__)

REORDERABLE_STATUSES = {OrderStatus.packing, OrderStatus.shipped, OrderStatus.delivered}


# =====================================================
# HELPERS
# =====================================================
async def get_order_for_user(db: AsyncSession, order_id: int, user: User) -> SalesOrder:
    order = await db.get(SalesOrder, order_id)
    if not order or (not is_admin(user) and order.user_id != user.id):
        raise AppException(404, "Order not found", ErrorCode.ORDER_NOT_FOUND)
    return order


async def get_order_for_update(db: AsyncSession, order_id: int) -> SalesOrder:
    result = await db.execute(
        select(SalesOrder)
        .where(SalesOrder.id == order_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()
    if not order:
        raise AppException(404, "Order not found", ErrorCode.ORDER_NOT_FOUND)
    return order


def check_version(order: SalesOrder, version: int | None) -> None:
    if version is not None and order.version != version:
        raise AppException(
            409,
            "Order was modified by another user. Reload and try again.",
            ErrorCode.ORDER_VERSION_CONFLICT,
            {"expected": version, "current": order.version},
        )


def ensure_not_archived(order: SalesOrder) -> None:
    if order.is_archived:
        raise AppException(409, "Archived orders are read-only", ErrorCode.ORDER_ARCHIVED)


def touch(order: SalesOrder, user: User) -> None:
    order.version += 1
    order.updated_by_id = user.id


def _display_fields(order: SalesOrder) -> dict:
    display = status_display(order.order_status)
    return {
        "status_label": display.label,
        "status_color": display.color,
        "progress_percentage": progress_percentage(order.order_status),
    }


def map_order_list_item(order: SalesOrder) -> OrderListItem:
    return OrderListItem(
        id=order.id,
        order_number=order.order_number,
        user_id=order.user_id,
        project_name=order.project_name,
        quantity=order.quantity,
        quantity_shipped=order.quantity_shipped,
        quantity_remaining=order.quantity_remaining,
        amount=order.amount,
        currency=order.currency,
        order_status=order.order_status,
        quality_check_status=order.quality_check_status,
        payment_status=order.payment_status,
        is_archived=order.is_archived,
        order_date=order.order_date,
        estimated_completion=order.estimated_completion,
        **_display_fields(order),
    )


def map_order(order: SalesOrder) -> OrderOut:
    return OrderOut(
        **map_order_list_item(order).model_dump(),
        rfq_id=order.rfq_id,
        quote_id=order.quote_id,
        customer_purchase_order_number=order.customer_purchase_order_number,
        material=order.material,
        material_grade=order.material_grade,
        finishing=order.finishing,
        tolerance=order.tolerance,
        notes=order.notes,
        quality_check_notes=order.quality_check_notes,
        customer_approved_at=order.customer_approved_at,
        tracking_number=order.tracking_number,
        shipping_carrier=order.shipping_carrier,
        has_invoice=bool(order.invoice_url),
        archived_at=order.archived_at,
        version=order.version,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


async def _new_order(
    db: AsyncSession,
    *,
    rfq: Rfq,
    admin: User,
    amount,
    currency: str,
    quote_id: int | None,
    estimated_completion,
    customer_purchase_order_number: str | None,
    notes: str | None,
) -> SalesOrder:
    now = datetime.now(timezone.utc)

    order = SalesOrder(
        user_id=rfq.user_id,
        rfq_id=rfq.id,
        quote_id=quote_id,
        order_number=await generate_number(db, SalesOrder.order_number, ORDER_PREFIX),
        customer_purchase_order_number=customer_purchase_order_number,
        project_name=rfq.project_name,
        material=rfq.material,
        material_grade=rfq.material_grade,
        finishing=rfq.finishing,
        tolerance=rfq.tolerance,
        notes=notes if notes is not None else rfq.notes,
        quantity=rfq.quantity,
        quantity_shipped=0,
        quantity_remaining=rfq.quantity,
        amount=amount,
        currency=currency,
        order_status=OrderStatus.pending,
        order_date=now,
        estimated_completion=estimated_completion
        or (now + timedelta(days=DEFAULT_LEAD_TIME_DAYS)).date(),
        quality_check_status=QualityCheckStatus.pending,
        payment_status=PaymentStatus.unpaid,
        is_archived=False,
        version=1,
        created_by_id=admin.id,
        updated_by_id=admin.id,
    )
    db.add(order)
    await db.flush()

    await emit_user_activity(
        db,
        admin,
        ActivityCode.CREATE_ORDER,
        target_name=order.order_number,
        project_name=order.project_name,
    )
    return order


# =====================================================
# CREATE
# =====================================================
async def create_order_from_rfq(
    db: AsyncSession,
    rfq_id: int,
    payload: OrderFromRfqCreate,
    admin: User,
) -> OrderOut:
    rfq = await get_rfq_for_user(db, rfq_id, admin)

    existing = await db.scalar(select(SalesOrder.id).where(SalesOrder.rfq_id == rfq.id))
    if existing:
        raise AppException(
            409,
            "An order already exists for this RFQ",
            ErrorCode.ORDER_ALREADY_EXISTS,
            {"order_id": existing},
        )

    quote = await get_accepted_quote(db, rfq.id)
    if not quote:
        raise AppException(
            409,
            "The RFQ has no accepted quote",
            ErrorCode.QUOTE_INVALID_STATE,
        )

    order = await _new_order(
        db,
        rfq=rfq,
        admin=admin,
        amount=quote.amount,
        currency=quote.currency,
        quote_id=quote.id,
        estimated_completion=payload.estimated_completion or quote.estimated_delivery_date,
        customer_purchase_order_number=(
            payload.customer_purchase_order_number or quote.purchase_order_number
        ),
        notes=payload.notes,
    )
    rfq.status = RfqStatus.accepted

    await db.commit()

    logger.info("Order created from RFQ", extra={"order_id": order.id, "rfq_id": rfq.id})
    return map_order(order)


async def create_manual_order(
    db: AsyncSession,
    payload: ManualOrderCreate,
    admin: User,
) -> OrderOut:
    customer = await get_customer(db, payload.user_id)

    # orders always hang off an RFQ; a manual order records an accepted one
    rfq = Rfq(
        user_id=customer.id,
        project_name=payload.project_name,
        material=payload.material,
        material_grade=payload.material_grade,
        finishing=payload.finishing,
        tolerance=payload.tolerance,
        quantity=payload.quantity,
        notes=payload.notes,
        international_manufacturing_ok=False,
        status=RfqStatus.accepted,
    )
    db.add(rfq)
    await db.flush()

    order = await _new_order(
        db,
        rfq=rfq,
        admin=admin,
        amount=payload.amount,
        currency=payload.currency.upper(),
        quote_id=None,
        estimated_completion=payload.estimated_completion,
        customer_purchase_order_number=payload.customer_purchase_order_number,
        notes=payload.notes,
    )

    await db.commit()

    logger.info("Manual order created", extra={"order_id": order.id, "customer_id": customer.id})
    return map_order(order)


# =====================================================
# READ
# =====================================================
async def list_orders(
    db: AsyncSession,
    user: User,
    status: OrderStatus | None = None,
    archived: bool = False,
    search: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    stmt = select(SalesOrder).where(SalesOrder.is_archived.is_(archived))

    if not is_admin(user):
        stmt = stmt.where(SalesOrder.user_id == user.id)

    if status:
        stmt = stmt.where(SalesOrder.order_status == status)

    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(
            or_(
                SalesOrder.order_number.ilike(pattern),
                SalesOrder.project_name.ilike(pattern),
            )
        )

    total = await db.scalar(select(func.count()).select_from(stmt.subquery()))

    sort_col = SalesOrder.archived_at if archived else SalesOrder.order_date
    result = await db.execute(
        stmt
        .order_by(sort_col.desc(), SalesOrder.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return {
        "items": [map_order_list_item(o) for o in result.scalars().all()],
        "total": total or 0,
        "page": page,
        "page_size": page_size,
    }


async def get_order(db: AsyncSession, order_id: int, user: User) -> OrderOut:
    return map_order(await get_order_for_user(db, order_id, user))


async def get_order_timeline(db: AsyncSession, order_id: int, user: User) -> OrderTimelineOut:
    order = await get_order_for_user(db, order_id, user)
    return OrderTimelineOut(
        order_id=order.id,
        order_number=order.order_number,
        order_status=order.order_status,
        progress_percentage=progress_percentage(order.order_status),
        stages=build_timeline(order.order_status),
    )


def list_status_display() -> list[StatusDisplayOut]:
    return [
        StatusDisplayOut(
            status=status,
            label=status_display(status).label,
            color=status_display(status).color,
            index=status_index(status),
            progress_percentage=progress_percentage(status),
        )
        for status in ORDER_STATUS_SEQUENCE
    ]


# =====================================================
# STATUS ENGINE
# =====================================================
async def set_order_status(
    db: AsyncSession,
    order_id: int,
    new_status: OrderStatus,
    admin: User,
    version: int | None = None,
) -> OrderOut:
    order = await get_order_for_update(db, order_id)
    check_version(order, version)
    ensure_not_archived(order)

    old_status = OrderStatus(order.order_status)
    check_transition(old_status, new_status, order.quality_check_status)

    order.order_status = new_status
    touch(order, admin)

    await emit_user_activity(
        db,
        admin,
        ActivityCode.UPDATE_ORDER_STATUS,
        target_name=order.order_number,
        old_status=old_status.value,
        new_status=new_status.value,
    )
    await db.commit()

    logger.info(
        "Order status changed",
        extra={"order_id": order.id, "from": old_status.value, "to": new_status.value},
    )
    return map_order(order)


async def move_to_packing(
    db: AsyncSession,
    order_id: int,
    admin: User,
    version: int | None = None,
) -> OrderOut:
    order = await get_order_for_user(db, order_id, admin)
    if OrderStatus(order.order_status) != OrderStatus.quality_check:
        raise AppException(
            409,
            "Only orders in quality check can be moved to packing",
            ErrorCode.ORDER_INVALID_STATE,
        )
    return await set_order_status(db, order_id, OrderStatus.packing, admin, version)


# =====================================================
# TRACKING / PAYMENT / ARCHIVE
# =====================================================
async def update_tracking(
    db: AsyncSession,
    order_id: int,
    payload: OrderTrackingUpdate,
    admin: User,
) -> OrderOut:
    order = await get_order_for_update(db, order_id)
    check_version(order, payload.version)
    ensure_not_archived(order)

    changes = []
    for field in ("tracking_number", "shipping_carrier", "estimated_completion"):
        value = getattr(payload, field)
        if value is not None and value != getattr(order, field):
            setattr(order, field, value)
            changes.append(f"{field}={value}")

    if not changes:
        raise AppException(400, "No changes provided", ErrorCode.VALIDATION_ERROR)

    touch(order, admin)
    await emit_user_activity(
        db,
        admin,
        ActivityCode.UPDATE_ORDER_TRACKING,
        target_name=order.order_number,
        changes=", ".join(changes),
    )
    await db.commit()
    return map_order(order)


async def update_payment_status(
    db: AsyncSession,
    order_id: int,
    payload: OrderPaymentUpdate,
    admin: User,
) -> OrderOut:
    order = await get_order_for_update(db, order_id)
    check_version(order, payload.version)

    if PaymentStatus(order.payment_status) == payload.payment_status:
        raise AppException(
            400,
            f"Order is already {payload.payment_status.value}",
            ErrorCode.VALIDATION_ERROR,
        )

    order.payment_status = payload.payment_status
    touch(order, admin)

    await emit_user_activity(
        db,
        admin,
        ActivityCode.UPDATE_ORDER_PAYMENT,
        target_name=order.order_number,
        payment_status=payload.payment_status.value,
    )

    # settled orders leave the active board
    if payload.payment_status == PaymentStatus.paid and not order.is_archived:
        order.is_archived = True
        order.archived_at = datetime.now(timezone.utc)
        await emit_user_activity(db, admin, ActivityCode.ARCHIVE_ORDER, target_name=order.order_number)

    await db.commit()

    logger.info(
        "Order payment updated",
        extra={"order_id": order.id, "payment_status": payload.payment_status.value},
    )
    return map_order(order)


async def reopen_order(
    db: AsyncSession,
    order_id: int,
    admin: User,
    version: int | None = None,
) -> OrderOut:
    order = await get_order_for_update(db, order_id)
    check_version(order, version)

    if not order.is_archived:
        raise AppException(409, "Order is not archived", ErrorCode.ORDER_INVALID_STATE)

    order.is_archived = False
    order.archived_at = None
    order.payment_status = PaymentStatus.unpaid
    touch(order, admin)

    await emit_user_activity(db, admin, ActivityCode.REOPEN_ORDER, target_name=order.order_number)
    await db.commit()
    return map_order(order)


# =====================================================
# INVOICE
# =====================================================
def validate_invoice_pdf(filename: str, data: bytes) -> None:
    if not filename.lower().endswith(".pdf") or not data.startswith(b"%PDF"):
        raise AppException(400, "Invoice must be a PDF document", ErrorCode.INVOICE_INVALID_FILE)


async def upload_invoice(
    db: AsyncSession,
    order_id: int,
    filename: str,
    data: bytes,
    admin: User,
) -> OrderOut:
    check_file_name(filename)
    check_upload_size(len(data))
    validate_invoice_pdf(filename, data)

    order = await get_order_for_update(db, order_id)

    key, _ = await store_bytes(data, f"invoices/{order.id}", filename)
    order.invoice_url = key
    touch(order, admin)

    await emit_user_activity(
        db,
        admin,
        ActivityCode.UPLOAD_INVOICE,
        target_name=order.order_number,
        file_name=filename,
    )
    await db.commit()
    return map_order(order)


async def download_invoice(db: AsyncSession, order_id: int, user: User) -> tuple[bytes, str]:
    order = await get_order_for_user(db, order_id, user)
    if not order.invoice_url:
        raise AppException(404, "No invoice uploaded for this order", ErrorCode.INVOICE_NOT_FOUND)
    return await read_bytes(order.invoice_url), f"invoice-{order.order_number}.pdf"


# =====================================================
# REORDER
# =====================================================
async def reorder(db: AsyncSession, order_id: int, customer: User) -> RfqOut:
    order = await get_order_for_user(db, order_id, customer)

    if not order.is_archived and OrderStatus(order.order_status) not in REORDERABLE_STATUSES:
        raise AppException(
            409,
            "Orders can be reordered once packed, shipped, delivered or archived",
            ErrorCode.ORDER_INVALID_STATE,
        )

    source = await db.get(Rfq, order.rfq_id)

    rfq = Rfq(
        user_id=customer.id,
        project_name=f"REORDER: {order.project_name}"[:200],
        material=order.material,
        material_grade=order.material_grade,
        finishing=order.finishing,
        tolerance=order.tolerance,
        quantity=order.quantity,
        manufacturing_process=source.manufacturing_process if source else None,
        international_manufacturing_ok=(
            source.international_manufacturing_ok if source else False
        ),
        special_instructions=source.special_instructions if source else None,
        notes=f"Reorder of {order.order_number}",
        status=RfqStatus.submitted,
    )
    db.add(rfq)
    await db.flush()

    await emit_user_activity(
        db,
        customer,
        ActivityCode.REORDER,
        target_name=order.order_number,
        rfq_id=rfq.id,
    )
    await db.commit()

    logger.info("Reorder submitted", extra={"order_id": order.id, "rfq_id": rfq.id})
    return RfqOut.model_validate(rfq)
