from fastapi import APIRouter, Depends, UploadFile, File
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.storage import read_upload, content_disposition
from app.schemas.orders.quality_check_schemas import (
    QualityCheckFileOut,
    QualityCheckDecision,
    QualityCheckState,
    QualityCheckQueueItem,
)
from app.services.orders.quality_check_service import (
    upload_quality_check_files,
    list_quality_check_files,
    download_quality_check_file,
    delete_quality_check_file,
    get_quality_check_state,
    record_quality_check_decision,
    list_quality_check_orders,
    list_quality_check_notifications,
)
from app.utils.check_roles import require_role
from app.utils.response import success_response, APIResponse
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/orders/{order_id}/quality-check", tags=["Quality Check"])
queue_router = APIRouter(prefix="/quality-checks", tags=["Quality Check"])


@router.get("", response_model=APIResponse[QualityCheckState])
async def get_quality_check_state_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    state = await get_quality_check_state(db, order_id, user)
    return success_response("Quality check status", state)


@router.post("/files", response_model=APIResponse[list[QualityCheckFileOut]], status_code=201)
async def upload_quality_check_files_api(
    order_id: int,
    files: list[UploadFile] = File(...),
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    payload = [await read_upload(f) for f in files]
    logger.info("Quality check upload", extra={"order_id": order_id, "count": len(payload)})
    created = await upload_quality_check_files(db, order_id, payload, admin)
    return success_response("Quality check files uploaded", created)


@router.get("/files", response_model=APIResponse[list[QualityCheckFileOut]])
async def list_quality_check_files_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    files = await list_quality_check_files(db, order_id, user)
    return success_response("Quality check files", files)


@router.get("/files/{file_id}/download")
async def download_quality_check_file_api(
    order_id: int,
    file_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    content, qc_file = await download_quality_check_file(db, order_id, file_id, user)
    return Response(
        content=content,
        media_type=qc_file.content_type,
        headers={"Content-Disposition": content_disposition(qc_file.file_name)},
    )


@router.delete("/files/{file_id}", response_model=APIResponse)
async def delete_quality_check_file_api(
    order_id: int,
    file_id: int,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    await delete_quality_check_file(db, order_id, file_id, admin)
    return success_response("Quality check file deleted")


@router.post("/approval", response_model=APIResponse[QualityCheckState])
async def record_quality_check_decision_api(
    order_id: int,
    payload: QualityCheckDecision,
    db: AsyncSession = Depends(get_db),
    customer=Depends(require_role(["customer"])),
):
    state = await record_quality_check_decision(db, order_id, payload, customer)
    message = "Quality check approved" if payload.approved else "Revision requested"
    return success_response(message, state)


@queue_router.get("/orders", response_model=APIResponse[list[QualityCheckQueueItem]])
async def list_quality_check_orders_api(
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    orders = await list_quality_check_orders(db)
    return success_response("Orders in quality check", orders)


@queue_router.get("/notifications", response_model=APIResponse[list[QualityCheckQueueItem]])
async def list_quality_check_notifications_api(
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    items = await list_quality_check_notifications(db)
    return success_response("Quality check notifications", items)
