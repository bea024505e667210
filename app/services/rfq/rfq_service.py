from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.rfq.rfq_models import Rfq
from app.models.users.user_models import User
from app.models.enums.rfq_status import RfqStatus
from app.schemas.rfq.rfq_schemas import RfqCreate, RfqOut
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_user_activity
from app.utils.check_roles import is_admin
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def get_rfq_for_user(db: AsyncSession, rfq_id: int, user: User) -> Rfq:
    rfq = await db.get(Rfq, rfq_id)
    # customers never learn whether another customer's RFQ exists
    if not rfq or (not is_admin(user) and rfq.user_id != user.id):
        raise AppException(404, "RFQ not found", ErrorCode.RFQ_NOT_FOUND)
    return rfq


async def submit_rfq(db: AsyncSession, payload: RfqCreate, user: User) -> RfqOut:
    rfq = Rfq(
        user_id=user.id,
        status=RfqStatus.submitted,
        **payload.model_dump(),
    )
    db.add(rfq)
    await db.flush()

    await emit_user_activity(
        db,
        user,
        ActivityCode.SUBMIT_RFQ,
        rfq_id=rfq.id,
        target_name=rfq.project_name,
    )
    await db.commit()

    logger.info("RFQ submitted", extra={"rfq_id": rfq.id, "user_id": user.id})
    return RfqOut.model_validate(rfq)


async def list_rfqs(
    db: AsyncSession,
    user: User,
    status: RfqStatus | None = None,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    stmt = select(Rfq)

    if not is_admin(user):
        stmt = stmt.where(Rfq.user_id == user.id)

    if status:
        stmt = stmt.where(Rfq.status == status)

    total = await db.scalar(select(func.count()).select_from(stmt.subquery()))

    result = await db.execute(
        stmt
        .order_by(Rfq.created_at.desc(), Rfq.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return {
        "items": [RfqOut.model_validate(r) for r in result.scalars().all()],
        "total": total or 0,
        "page": page,
        "page_size": page_size,
    }


async def get_rfq(db: AsyncSession, rfq_id: int, user: User) -> RfqOut:
    return RfqOut.model_validate(await get_rfq_for_user(db, rfq_id, user))


async def update_rfq_status(
    db: AsyncSession,
    rfq_id: int,
    status: RfqStatus,
    admin: User,
) -> RfqOut:
    rfq = await get_rfq_for_user(db, rfq_id, admin)

    if rfq.status == status:
        raise AppException(400, f"RFQ is already {status.value}", ErrorCode.RFQ_INVALID_STATE)

    old_status = RfqStatus(rfq.status)
    rfq.status = status

    await emit_user_activity(
        db,
        admin,
        ActivityCode.UPDATE_RFQ_STATUS,
        rfq_id=rfq.id,
        old_status=old_status.value,
        new_status=status.value,
    )
    await db.commit()

    return RfqOut.model_validate(rfq)
