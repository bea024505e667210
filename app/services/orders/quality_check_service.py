"""Quality-check inspection files and the customer approval gate.

Admins upload inspection documents while an order sits in
``quality_check``; the owning customer then approves or asks for a
revision. ``order_status_engine.check_transition`` refuses to move an order
past the gate until ``quality_check_status`` is ``approved``.
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import select, func, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.orders.order_models import SalesOrder
from app.models.orders.quality_check_models import QualityCheckFile
from app.models.users.user_models import User
from app.models.enums.file_type import QualityCheckFileType
from app.models.enums.order_status import OrderStatus, QualityCheckStatus
from app.schemas.orders.quality_check_schemas import (
    QualityCheckFileOut,
    QualityCheckDecision,
    QualityCheckState,
    QualityCheckQueueItem,
)
from app.services.orders.order_service import (
    get_order_for_user,
    get_order_for_update,
    ensure_not_archived,
    touch,
)
from app.services.orders.order_status_engine import status_index, QUALITY_GATE
from app.core.config import QC_NOTIFICATION_WINDOW_DAYS
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
from app.utils.logger import get_logger

logger = get_logger(__name__)

FILE_TYPES_BY_EXTENSION = {
    "pdf": QualityCheckFileType.pdf,
    "xls": QualityCheckFileType.excel,
    "xlsx": QualityCheckFileType.excel,
    "jpg": QualityCheckFileType.image,
    "jpeg": QualityCheckFileType.image,
    "png": QualityCheckFileType.image,
    "gif": QualityCheckFileType.image,
}


def classify_file(filename: str) -> QualityCheckFileType:
    file_type = FILE_TYPES_BY_EXTENSION.get(file_extension(filename))
    if not file_type:
        raise AppException(
            400,
            f"Unsupported file type for {filename}. Allowed: PDF, Excel, JPG, PNG, GIF",
            ErrorCode.QUALITY_CHECK_FILE_INVALID,
        )
    return file_type


def customer_can_view_files(order: SalesOrder) -> bool:
    return (
        status_index(order.order_status) >= status_index(QUALITY_GATE)
        or QualityCheckStatus(order.quality_check_status) != QualityCheckStatus.pending
    )


def map_state(order: SalesOrder) -> QualityCheckState:
    return QualityCheckState(
        order_id=order.id,
        order_number=order.order_number,
        order_status=order.order_status,
        quality_check_status=order.quality_check_status,
        quality_check_notes=order.quality_check_notes,
        customer_approved_at=order.customer_approved_at,
    )


async def _get_visible_order(db: AsyncSession, order_id: int, user: User) -> SalesOrder:
    order = await get_order_for_user(db, order_id, user)
    if not is_admin(user) and not customer_can_view_files(order):
        raise AppException(404, "Quality check files are not available yet", ErrorCode.QUALITY_CHECK_FILE_NOT_FOUND)
    return order


async def _get_file(db: AsyncSession, order_id: int, file_id: int) -> QualityCheckFile:
    qc_file = await db.get(QualityCheckFile, file_id)
    if not qc_file or qc_file.order_id != order_id:
        raise AppException(404, "Quality check file not found", ErrorCode.QUALITY_CHECK_FILE_NOT_FOUND)
    return qc_file


# =====================================================
# FILES
# =====================================================
async def upload_quality_check_files(
    db: AsyncSession,
    order_id: int,
    files: list[tuple[str, bytes]],
    admin: User,
) -> list[QualityCheckFileOut]:
    if not files:
        raise AppException(400, "No files uploaded", ErrorCode.VALIDATION_ERROR)

    classified = []
    for filename, data in files:
        check_file_name(filename)
        check_upload_size(len(data))
        classified.append((filename, data, classify_file(filename)))

    order = await get_order_for_update(db, order_id)
    ensure_not_archived(order)

    created: list[QualityCheckFile] = []
    for filename, data, file_type in classified:
        key, content_type = await store_bytes(data, f"quality-checks/{order.id}", filename)
        qc_file = QualityCheckFile(
            order_id=order.id,
            uploaded_by_id=admin.id,
            file_name=filename,
            file_url=key,
            file_size=len(data),
            file_type=file_type,
            content_type=content_type,
        )
        db.add(qc_file)
        created.append(qc_file)

        await emit_user_activity(
            db,
            admin,
            ActivityCode.UPLOAD_QC_FILE,
            target_name=order.order_number,
            file_name=filename,
        )

    # new inspection evidence after a revision request starts a fresh review
    if QualityCheckStatus(order.quality_check_status) == QualityCheckStatus.needs_revision:
        order.quality_check_status = QualityCheckStatus.pending
        order.customer_approved_at = None
        order.quality_check_notes = None
        await emit_user_activity(
            db, admin, ActivityCode.RESTART_QUALITY_CHECK, target_name=order.order_number
        )

    touch(order, admin)
    await db.commit()

    logger.info(
        "Quality check files uploaded",
        extra={"order_id": order.id, "count": len(created)},
    )
    return [QualityCheckFileOut.model_validate(f) for f in created]


async def list_quality_check_files(
    db: AsyncSession,
    order_id: int,
    user: User,
) -> list[QualityCheckFileOut]:
    order = await get_order_for_user(db, order_id, user)
    if not is_admin(user) and not customer_can_view_files(order):
        return []

    result = await db.execute(
        select(QualityCheckFile)
        .where(QualityCheckFile.order_id == order.id)
        .order_by(QualityCheckFile.created_at.desc(), QualityCheckFile.id.desc())
    )
    return [QualityCheckFileOut.model_validate(f) for f in result.scalars().all()]


async def download_quality_check_file(
    db: AsyncSession,
    order_id: int,
    file_id: int,
    user: User,
) -> tuple[bytes, QualityCheckFile]:
    order = await _get_visible_order(db, order_id, user)
    qc_file = await _get_file(db, order.id, file_id)
    return await read_bytes(qc_file.file_url), qc_file


async def delete_quality_check_file(
    db: AsyncSession,
    order_id: int,
    file_id: int,
    admin: User,
) -> None:
    order = await get_order_for_user(db, order_id, admin)
    qc_file = await _get_file(db, order.id, file_id)
    key = qc_file.file_url

    await db.delete(qc_file)
    await emit_user_activity(
        db,
        admin,
        ActivityCode.DELETE_QC_FILE,
        target_name=order.order_number,
        file_name=qc_file.file_name,
    )
    await db.commit()

    # the row is gone either way; a leftover object is only wasted space
    try:
        await delete_object(key)
    except AppException:
        logger.warning("Stored quality check file not removed", extra={"key": key})


# =====================================================
# APPROVAL GATE
# =====================================================
async def get_quality_check_state(db: AsyncSession, order_id: int, user: User) -> QualityCheckState:
    return map_state(await get_order_for_user(db, order_id, user))


async def record_quality_check_decision(
    db: AsyncSession,
    order_id: int,
    decision: QualityCheckDecision,
    customer: User,
) -> QualityCheckState:
    order = await get_order_for_user(db, order_id, customer)
    if order.user_id != customer.id:
        raise AppException(404, "Order not found", ErrorCode.ORDER_NOT_FOUND)

    order = await get_order_for_update(db, order.id)

    if OrderStatus(order.order_status) != OrderStatus.quality_check:
        raise AppException(
            409,
            "Order is not awaiting quality check approval",
            ErrorCode.ORDER_INVALID_STATE,
            {"order_status": OrderStatus(order.order_status).value},
        )

    if QualityCheckStatus(order.quality_check_status) != QualityCheckStatus.pending:
        raise AppException(
            409,
            "Quality check has already been decided",
            ErrorCode.QUALITY_CHECK_ALREADY_DECIDED,
            {"quality_check_status": QualityCheckStatus(order.quality_check_status).value},
        )

    order.quality_check_status = (
        QualityCheckStatus.approved if decision.approved else QualityCheckStatus.needs_revision
    )
    order.quality_check_notes = decision.notes
    order.customer_approved_at = datetime.now(timezone.utc)
    touch(order, customer)

    if decision.approved:
        await emit_user_activity(
            db, customer, ActivityCode.APPROVE_QUALITY_CHECK, target_name=order.order_number
        )
    else:
        await emit_user_activity(
            db,
            customer,
            ActivityCode.REJECT_QUALITY_CHECK,
            target_name=order.order_number,
            notes=decision.notes or "no notes",
        )

    await db.commit()

    logger.info(
        "Quality check decided",
        extra={
            "order_id": order.id,
            "quality_check_status": QualityCheckStatus(order.quality_check_status).value,
        },
    )
    return map_state(order)


# =====================================================
# ADMIN QUEUES
# =====================================================
def _queue_query():
    file_count = (
        select(func.count(QualityCheckFile.id))
        .where(QualityCheckFile.order_id == SalesOrder.id)
        .correlate(SalesOrder)
        .scalar_subquery()
    )
    return (
        select(
            SalesOrder,
            User.name.label("customer_name"),
            User.company_name.label("company_name"),
            file_count.label("file_count"),
        )
        .join(User, User.id == SalesOrder.user_id)
        .where(SalesOrder.is_archived.is_(False))
    )


def _map_queue_row(row) -> QualityCheckQueueItem:
    order = row.SalesOrder
    return QualityCheckQueueItem(
        **map_state(order).model_dump(),
        user_id=order.user_id,
        project_name=order.project_name,
        customer_name=row.customer_name,
        company_name=row.company_name,
        file_count=row.file_count or 0,
    )


async def list_quality_check_orders(db: AsyncSession) -> list[QualityCheckQueueItem]:
    result = await db.execute(
        _queue_query()
        .where(SalesOrder.order_status == OrderStatus.quality_check)
        .order_by(SalesOrder.updated_at.desc(), SalesOrder.id.desc())
    )
    return [_map_queue_row(r) for r in result.all()]


async def list_quality_check_notifications(
    db: AsyncSession,
    now: datetime | None = None,
) -> list[QualityCheckQueueItem]:
    """Orders awaiting a decision, recently approved, or sent back for revision."""
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=QC_NOTIFICATION_WINDOW_DAYS)

    result = await db.execute(
        _queue_query()
        .where(
            or_(
                and_(
                    SalesOrder.order_status == OrderStatus.quality_check,
                    SalesOrder.quality_check_status == QualityCheckStatus.pending,
                ),
                and_(
                    SalesOrder.quality_check_status == QualityCheckStatus.approved,
                    SalesOrder.customer_approved_at >= cutoff,
                ),
                SalesOrder.quality_check_status == QualityCheckStatus.needs_revision,
            )
        )
        .order_by(
            func.coalesce(SalesOrder.customer_approved_at, SalesOrder.updated_at, SalesOrder.created_at).desc(),
            SalesOrder.id.desc(),
        )
    )
    return [_map_queue_row(r) for r in result.all()]
