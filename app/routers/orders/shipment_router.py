from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.orders.shipment_schemas import (
    ShipmentCreate,
    ShipmentTrackingUpdate,
    ShipmentDeliver,
    ShipmentOut,
    ShipmentListOut,
)
from app.services.orders.shipment_service import (
    create_shipment,
    list_shipments,
    update_tracking_status,
    mark_delivered,
)
from app.utils.check_roles import require_role
from app.utils.response import success_response, APIResponse

order_shipments_router = APIRouter(prefix="/orders/{order_id}/shipments", tags=["Shipments"])
router = APIRouter(prefix="/shipments", tags=["Shipments"])


@order_shipments_router.post("", response_model=APIResponse[ShipmentOut], status_code=201)
async def create_shipment_api(
    order_id: int,
    payload: ShipmentCreate,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    shipment = await create_shipment(db, order_id, payload, admin)
    return success_response("Shipment recorded", shipment)


@order_shipments_router.get("", response_model=APIResponse[ShipmentListOut])
async def list_shipments_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    data = await list_shipments(db, order_id, user)
    return success_response("Shipments retrieved", data)


@router.patch("/{shipment_id}/tracking-status", response_model=APIResponse[ShipmentOut])
async def update_tracking_status_api(
    shipment_id: int,
    payload: ShipmentTrackingUpdate,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    shipment = await update_tracking_status(db, shipment_id, payload.tracking_status, admin)
    return success_response("Shipment tracking updated", shipment)


@router.post("/{shipment_id}/deliver", response_model=APIResponse[ShipmentOut])
async def mark_delivered_api(
    shipment_id: int,
    payload: ShipmentDeliver | None = None,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    shipment = await mark_delivered(
        db, shipment_id, admin, payload.delivery_date if payload else None
    )
    return success_response("Shipment marked delivered", shipment)
