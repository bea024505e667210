from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.orders.order_models import SalesOrder
from app.models.rfq.rfq_models import Rfq
from app.models.sales.sales_quote_models import SalesQuote
from app.models.users.user_models import User
from app.models.enums.order_status import OrderStatus, QualityCheckStatus
from app.models.enums.rfq_status import RfqStatus
from app.models.enums.sales_quote_status import SalesQuoteStatus
from app.schemas.dashboard.dashboard_schemas import (
    CustomerDashboardStats,
    AdminDashboardStats,
)

OPEN_RFQ_STATUSES = (RfqStatus.submitted, RfqStatus.quoted)


async def get_customer_dashboard_stats(db: AsyncSession, customer: User) -> CustomerDashboardStats:
    ordered_rfqs = select(SalesOrder.rfq_id)

    active_rfqs = await db.scalar(
        select(func.count(Rfq.id)).where(
            Rfq.user_id == customer.id,
            Rfq.status.in_(OPEN_RFQ_STATUSES),
            Rfq.id.not_in(ordered_rfqs),
        )
    )

    order_row = (
        await db.execute(
            select(
                func.count(SalesOrder.id)
                .filter(
                    SalesOrder.order_status != OrderStatus.delivered,
                    SalesOrder.is_archived.is_(False),
                )
                .label("active_orders"),
                func.count(SalesOrder.id)
                .filter(
                    SalesOrder.order_status == OrderStatus.quality_check,
                    SalesOrder.quality_check_status == QualityCheckStatus.pending,
                )
                .label("awaiting_quality_approval"),
                func.coalesce(func.sum(SalesOrder.amount), 0).label("total_spent"),
            ).where(SalesOrder.user_id == customer.id)
        )
    ).one()

    pending_quotes = await db.scalar(
        select(func.count(SalesQuote.id))
        .join(Rfq, Rfq.id == SalesQuote.rfq_id)
        .where(
            Rfq.user_id == customer.id,
            SalesQuote.status == SalesQuoteStatus.pending,
        )
    )

    return CustomerDashboardStats(
        active_rfqs=active_rfqs or 0,
        active_orders=order_row.active_orders or 0,
        pending_quotes=pending_quotes or 0,
        awaiting_quality_approval=order_row.awaiting_quality_approval or 0,
        total_spent=Decimal(str(order_row.total_spent or 0)),
    )


async def get_admin_dashboard_stats(db: AsyncSession) -> AdminDashboardStats:
    rows = await db.execute(
        select(SalesOrder.order_status, func.count(SalesOrder.id))
        .where(SalesOrder.is_archived.is_(False))
        .group_by(SalesOrder.order_status)
    )
    by_status = {status.value: 0 for status in OrderStatus}
    for status, count in rows.all():
        by_status[OrderStatus(status).value] = count

    qc_row = (
        await db.execute(
            select(
                func.count(SalesOrder.id)
                .filter(
                    SalesOrder.order_status == OrderStatus.quality_check,
                    SalesOrder.quality_check_status == QualityCheckStatus.pending,
                )
                .label("awaiting"),
                func.count(SalesOrder.id)
                .filter(SalesOrder.quality_check_status == QualityCheckStatus.needs_revision)
                .label("needs_revision"),
                func.count(SalesOrder.id)
                .filter(SalesOrder.is_archived.is_(True))
                .label("archived"),
            )
        )
    ).one()

    open_rfqs = await db.scalar(
        select(func.count(Rfq.id)).where(Rfq.status == RfqStatus.submitted)
    )
    pending_quotes = await db.scalar(
        select(func.count(SalesQuote.id)).where(SalesQuote.status == SalesQuoteStatus.pending)
    )

    return AdminDashboardStats(
        orders_by_status=by_status,
        active_orders=sum(
            count for status, count in by_status.items() if status != OrderStatus.delivered.value
        ),
        awaiting_quality_approval=qc_row.awaiting or 0,
        needs_revision=qc_row.needs_revision or 0,
        archived_orders=qc_row.archived or 0,
        open_rfqs=open_rfqs or 0,
        pending_quotes=pending_quotes or 0,
    )
