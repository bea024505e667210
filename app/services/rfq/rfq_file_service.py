"""Drawings and specification documents attached to an RFQ.

Customers attach files to their own RFQs while the RFQ is still open;
admins may attach to any RFQ. Downloads follow the RFQ ownership rule.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.rfq.rfq_file_models import RfqFile
from app.models.users.user_models import User
from app.models.enums.file_type import RfqFileType
from app.models.enums.rfq_status import RfqStatus
from app.schemas.rfq.rfq_file_schemas import RfqFileOut
from app.services.rfq.rfq_service import get_rfq_for_user
from app.core.exceptions import AppException
from app.core.storage import (
    store_bytes,
    read_bytes,
    check_upload_size,
    check_file_name,
    file_extension,
)
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_user_activity
from app.utils.check_roles import is_admin
from app.utils.logger import get_logger

logger = get_logger(__name__)

RFQ_FILE_TYPES_BY_EXTENSION = {
    "step": RfqFileType.step,
    "stp": RfqFileType.step,
    "pdf": RfqFileType.pdf,
    "xls": RfqFileType.excel,
    "xlsx": RfqFileType.excel,
    "jpg": RfqFileType.image,
    "jpeg": RfqFileType.image,
    "png": RfqFileType.image,
    "gif": RfqFileType.image,
}

OPEN_RFQ_STATUSES = {RfqStatus.submitted, RfqStatus.quoted}


def classify_rfq_file(filename: str) -> RfqFileType:
    file_type = RFQ_FILE_TYPES_BY_EXTENSION.get(file_extension(filename))
    if not file_type:
        raise AppException(
            400,
            f"Unsupported file type for {filename}. Allowed: STEP, PDF, Excel, JPG, PNG, GIF",
            ErrorCode.RFQ_FILE_INVALID,
        )
    return file_type


async def upload_rfq_files(
    db: AsyncSession,
    rfq_id: int,
    files: list[tuple[str, bytes]],
    user: User,
) -> list[RfqFileOut]:
    if not files:
        raise AppException(400, "No files uploaded", ErrorCode.VALIDATION_ERROR)

    rfq = await get_rfq_for_user(db, rfq_id, user)

    if not is_admin(user) and RfqStatus(rfq.status) not in OPEN_RFQ_STATUSES:
        raise AppException(
            409,
            f"Files cannot be attached to an RFQ that is {RfqStatus(rfq.status).value}",
            ErrorCode.RFQ_INVALID_STATE,
        )

    classified = []
    for filename, data in files:
        check_file_name(filename)
        check_upload_size(len(data))
        classified.append((filename, data, classify_rfq_file(filename)))

    created: list[RfqFile] = []
    for filename, data, file_type in classified:
        key, content_type = await store_bytes(data, f"rfqs/{rfq.id}", filename)
        rfq_file = RfqFile(
            rfq_id=rfq.id,
            uploaded_by_id=user.id,
            file_name=filename,
            file_url=key,
            file_size=len(data),
            file_type=file_type,
            content_type=content_type,
        )
        db.add(rfq_file)
        created.append(rfq_file)

        await emit_user_activity(
            db,
            user,
            ActivityCode.UPLOAD_RFQ_FILE,
            rfq_id=rfq.id,
            file_name=filename,
        )

    await db.commit()

    logger.info("RFQ files uploaded", extra={"rfq_id": rfq.id, "count": len(created)})
    return [RfqFileOut.model_validate(f) for f in created]


async def list_rfq_files(db: AsyncSession, rfq_id: int, user: User) -> list[RfqFileOut]:
    rfq = await get_rfq_for_user(db, rfq_id, user)

    result = await db.execute(
        select(RfqFile)
        .where(RfqFile.rfq_id == rfq.id)
        .order_by(RfqFile.created_at.desc(), RfqFile.id.desc())
    )
    return [RfqFileOut.model_validate(f) for f in result.scalars().all()]


async def download_rfq_file(
    db: AsyncSession,
    rfq_id: int,
    file_id: int,
    user: User,
) -> tuple[bytes, RfqFile]:
    rfq = await get_rfq_for_user(db, rfq_id, user)

    rfq_file = await db.get(RfqFile, file_id)
    if not rfq_file or rfq_file.rfq_id != rfq.id:
        raise AppException(404, "RFQ file not found", ErrorCode.RFQ_FILE_NOT_FOUND)

    return await read_bytes(rfq_file.file_url), rfq_file
