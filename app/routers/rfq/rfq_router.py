from fastapi import APIRouter, Depends, Query, UploadFile, File
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.storage import read_upload, content_disposition
from app.models.enums.rfq_status import RfqStatus
from app.schemas.rfq.rfq_schemas import RfqCreate, RfqOut, RfqStatusUpdate
from app.schemas.rfq.rfq_file_schemas import RfqFileOut
from app.services.rfq.rfq_service import (
    submit_rfq,
    list_rfqs,
    get_rfq,
    update_rfq_status,
)
from app.services.rfq.rfq_file_service import (
    upload_rfq_files,
    list_rfq_files,
    download_rfq_file,
)
from app.utils.check_roles import require_role
from app.utils.response import success_response, APIResponse, PageData

router = APIRouter(prefix="/rfqs", tags=["RFQs"])


@router.post("", response_model=APIResponse[RfqOut], status_code=201)
async def submit_rfq_api(
    payload: RfqCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer"])),
):
    rfq = await submit_rfq(db, payload, user)
    return success_response("RFQ submitted successfully", rfq)


@router.get("", response_model=APIResponse[PageData[RfqOut]])
async def list_rfqs_api(
    status: RfqStatus | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    data = await list_rfqs(db, user, status=status, page=page, page_size=page_size)
    return success_response("RFQs retrieved successfully", data)


@router.get("/{rfq_id}", response_model=APIResponse[RfqOut])
async def get_rfq_api(
    rfq_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    rfq = await get_rfq(db, rfq_id, user)
    return success_response("RFQ retrieved successfully", rfq)


@router.patch("/{rfq_id}/status", response_model=APIResponse[RfqOut])
async def update_rfq_status_api(
    rfq_id: int,
    payload: RfqStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    rfq = await update_rfq_status(db, rfq_id, payload.status, admin)
    return success_response("RFQ status updated", rfq)


# =====================================================
# ATTACHMENTS
# =====================================================
@router.post("/{rfq_id}/files", response_model=APIResponse[list[RfqFileOut]], status_code=201)
async def upload_rfq_files_api(
    rfq_id: int,
    files: list[UploadFile] = File(...),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    payload = [await read_upload(f) for f in files]
    created = await upload_rfq_files(db, rfq_id, payload, user)
    return success_response("RFQ files uploaded", created)


@router.get("/{rfq_id}/files", response_model=APIResponse[list[RfqFileOut]])
async def list_rfq_files_api(
    rfq_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    files = await list_rfq_files(db, rfq_id, user)
    return success_response("RFQ files", files)


@router.get("/{rfq_id}/files/{file_id}/download")
async def download_rfq_file_api(
    rfq_id: int,
    file_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    content, rfq_file = await download_rfq_file(db, rfq_id, file_id, user)
    return Response(
        content=content,
        media_type=rfq_file.content_type,
        headers={"Content-Disposition": content_disposition(rfq_file.file_name)},
    )
