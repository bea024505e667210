from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.orders.order_models import SalesOrder
from app.models.orders.shipment_models import Shipment
from app.models.users.user_models import User
from app.models.enums.order_status import OrderStatus
from app.models.enums.shipment_status import ShipmentStatus
from app.schemas.orders.shipment_schemas import (
    ShipmentCreate,
    ShipmentOut,
    ShipmentSummary,
    ShipmentListOut,
)
from app.services.orders.order_service import (
    get_order_for_user,
    get_order_for_update,
    ensure_not_archived,
    touch,
)
from app.services.orders.order_status_engine import can_transition
from app.constants.order_status_display import status_display
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_user_activity
from app.utils.logger import get_logger

logger = get_logger(__name__)


def map_shipment(shipment: Shipment) -> ShipmentOut:
    display = status_display(shipment.tracking_status)
    return ShipmentOut(
        id=shipment.id,
        order_id=shipment.order_id,
        quantity_shipped=shipment.quantity_shipped,
        tracking_number=shipment.tracking_number,
        shipping_carrier=shipment.shipping_carrier,
        shipment_date=shipment.shipment_date,
        delivery_date=shipment.delivery_date,
        status=shipment.status,
        tracking_status=shipment.tracking_status,
        tracking_label=display.label,
        tracking_color=display.color,
        notes=shipment.notes,
    )


def summarize(order: SalesOrder, shipments: list[Shipment]) -> ShipmentSummary:
    total_shipped = sum(s.quantity_shipped for s in shipments)
    delivered = sum(1 for s in shipments if ShipmentStatus(s.status) == ShipmentStatus.delivered)
    return ShipmentSummary(
        total_ordered=order.quantity,
        total_shipped=total_shipped,
        remaining=max(order.quantity - total_shipped, 0),
        shipment_count=len(shipments),
        delivered_count=delivered,
        all_delivered=bool(shipments) and delivered == len(shipments),
    )


async def _get_shipment(db: AsyncSession, shipment_id: int) -> tuple[Shipment, SalesOrder]:
    row = (
        await db.execute(
            select(Shipment, SalesOrder)
            .join(SalesOrder, SalesOrder.id == Shipment.order_id)
            .where(Shipment.id == shipment_id)
        )
    ).first()
    if not row:
        raise AppException(404, "Shipment not found", ErrorCode.SHIPMENT_NOT_FOUND)
    return row.Shipment, row.SalesOrder


# =====================================================
# CREATE
# =====================================================
async def create_shipment(
    db: AsyncSession,
    order_id: int,
    payload: ShipmentCreate,
    admin: User,
) -> ShipmentOut:
    # row lock keeps concurrent partial shipments from overshooting the order
    order = await get_order_for_update(db, order_id)
    ensure_not_archived(order)

    remaining = order.quantity_remaining - payload.quantity_shipped
    if remaining < 0:
        raise AppException(
            409,
            "Cannot ship more than remaining quantity",
            ErrorCode.SHIPMENT_QUANTITY_EXCEEDED,
            {"requested": payload.quantity_shipped, "remaining": order.quantity_remaining},
        )

    shipment = Shipment(
        order_id=order.id,
        quantity_shipped=payload.quantity_shipped,
        tracking_number=payload.tracking_number,
        shipping_carrier=payload.shipping_carrier,
        shipment_date=datetime.now(timezone.utc),
        status=ShipmentStatus.shipped,
        tracking_status=OrderStatus.material_procurement,
        notes=payload.notes,
        created_by_id=admin.id,
        updated_by_id=admin.id,
    )
    db.add(shipment)

    order.quantity_shipped += payload.quantity_shipped
    order.quantity_remaining = remaining

    if payload.tracking_number and not order.tracking_number:
        order.tracking_number = payload.tracking_number
    if payload.shipping_carrier and not order.shipping_carrier:
        order.shipping_carrier = payload.shipping_carrier

    if remaining == 0 and can_transition(
        order.order_status, OrderStatus.shipped, order.quality_check_status
    ):
        order.order_status = OrderStatus.shipped

    touch(order, admin)
    await db.flush()

    await emit_user_activity(
        db,
        admin,
        ActivityCode.CREATE_SHIPMENT,
        target_name=order.order_number,
        quantity=payload.quantity_shipped,
        remaining=remaining,
    )
    await db.commit()

    logger.info(
        "Shipment recorded",
        extra={
            "order_id": order.id,
            "shipment_id": shipment.id,
            "quantity": payload.quantity_shipped,
            "remaining": remaining,
        },
    )
    return map_shipment(shipment)


# =====================================================
# READ
# =====================================================
async def list_shipments(db: AsyncSession, order_id: int, user: User) -> ShipmentListOut:
    order = await get_order_for_user(db, order_id, user)

    result = await db.execute(
        select(Shipment)
        .where(Shipment.order_id == order.id)
        .order_by(Shipment.shipment_date.desc(), Shipment.id.desc())
    )
    shipments = list(result.scalars().all())

    return ShipmentListOut(
        order_id=order.id,
        order_number=order.order_number,
        summary=summarize(order, shipments),
        items=[map_shipment(s) for s in shipments],
    )


# =====================================================
# TRACKING
# =====================================================
async def update_tracking_status(
    db: AsyncSession,
    shipment_id: int,
    tracking_status: OrderStatus,
    admin: User,
) -> ShipmentOut:
    shipment, order = await _get_shipment(db, shipment_id)
    ensure_not_archived(order)

    if ShipmentStatus(shipment.status) == ShipmentStatus.delivered:
        raise AppException(
            409,
            "Delivered shipments can no longer be re-tracked",
            ErrorCode.SHIPMENT_INVALID_STATE,
        )

    if tracking_status == OrderStatus.delivered:
        raise AppException(
            400,
            "Use the deliver action to mark a shipment delivered",
            ErrorCode.SHIPMENT_INVALID_STATE,
        )

    shipment.tracking_status = tracking_status
    shipment.updated_by_id = admin.id

    await emit_user_activity(
        db,
        admin,
        ActivityCode.UPDATE_SHIPMENT_TRACKING,
        shipment_id=shipment.id,
        target_name=order.order_number,
        tracking_status=tracking_status.value,
    )
    await db.commit()
    return map_shipment(shipment)


async def mark_delivered(
    db: AsyncSession,
    shipment_id: int,
    admin: User,
    delivery_date: datetime | None = None,
) -> ShipmentOut:
    shipment, order = await _get_shipment(db, shipment_id)
    ensure_not_archived(order)

    if OrderStatus(shipment.tracking_status) != OrderStatus.shipped:
        raise AppException(
            409,
            "Only shipments in transit can be marked delivered",
            ErrorCode.SHIPMENT_INVALID_STATE,
            {"tracking_status": OrderStatus(shipment.tracking_status).value},
        )

    shipment.status = ShipmentStatus.delivered
    shipment.tracking_status = OrderStatus.delivered
    shipment.delivery_date = delivery_date or datetime.now(timezone.utc)
    shipment.updated_by_id = admin.id

    await emit_user_activity(
        db,
        admin,
        ActivityCode.DELIVER_SHIPMENT,
        shipment_id=shipment.id,
        target_name=order.order_number,
    )
    await db.commit()

    logger.info("Shipment delivered", extra={"shipment_id": shipment.id, "order_id": order.id})
    return map_shipment(shipment)
