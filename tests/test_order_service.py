"""Order lifecycle against a real (in-memory) database."""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.models.enums.order_status import OrderStatus, QualityCheckStatus, PaymentStatus
from app.models.enums.rfq_status import RfqStatus
from app.models.rfq.rfq_models import Rfq
from app.models.support.activity_models import UserActivity
from app.schemas.orders.order_schemas import (
    ManualOrderCreate,
    OrderFromRfqCreate,
    OrderPaymentUpdate,
    OrderTrackingUpdate,
)
from app.schemas.sales.sales_quote_schemas import SalesQuoteCreate, SalesQuoteResponse
from app.services.orders.order_service import (
    create_manual_order,
    create_order_from_rfq,
    download_invoice,
    get_order,
    get_order_timeline,
    list_orders,
    list_status_display,
    move_to_packing,
    reopen_order,
    reorder,
    set_order_status,
    update_payment_status,
    update_tracking,
    upload_invoice,
)
from app.services.orders.order_status_engine import StageState
from app.services.sales.sales_quote_service import create_sales_quote, respond_to_sales_quote
from app.utils.numbering import year_prefix, ORDER_PREFIX

from tests.factories import make_order, make_rfq

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"


async def accepted_rfq(db, admin, customer, **fields):
    rfq = await make_rfq(db, customer, **fields)
    quote = await create_sales_quote(
        db,
        SalesQuoteCreate(
            rfq_id=rfq.id,
            amount=Decimal("4800.00"),
            estimated_delivery_date=date.today() + timedelta(days=45),
        ),
        admin,
    )
    await respond_to_sales_quote(
        db, quote.id, SalesQuoteResponse(accept=True, purchase_order_number="PO-7781"), customer
    )
    return rfq, quote


# =====================
# CREATE
# =====================

async def test_create_order_from_accepted_quote(db, admin, customer):
    rfq, quote = await accepted_rfq(db, admin, customer, quantity=250)

    order = await create_order_from_rfq(db, rfq.id, OrderFromRfqCreate(), admin)

    assert order.order_number == f"{year_prefix(ORDER_PREFIX)}001"
    assert order.order_status == OrderStatus.pending
    assert order.status_label == "Order Confirmed"
    assert order.progress_percentage == pytest.approx(12.5)
    assert order.quantity == 250
    assert order.quantity_remaining == 250
    assert order.amount == Decimal("4800.00")
    assert order.quote_id == quote.id
    assert order.customer_purchase_order_number == "PO-7781"
    assert order.estimated_completion == quote.estimated_delivery_date
    assert order.quality_check_status == QualityCheckStatus.pending
    assert order.payment_status == PaymentStatus.unpaid
    assert not order.has_invoice

    refreshed = await db.get(Rfq, rfq.id)
    assert RfqStatus(refreshed.status) == RfqStatus.accepted


async def test_order_numbers_increment(db, admin, customer):
    first_rfq, _ = await accepted_rfq(db, admin, customer)
    second_rfq, _ = await accepted_rfq(db, admin, customer)

    first = await create_order_from_rfq(db, first_rfq.id, OrderFromRfqCreate(), admin)
    second = await create_order_from_rfq(db, second_rfq.id, OrderFromRfqCreate(), admin)

    assert second.order_number == f"{year_prefix(ORDER_PREFIX)}002"
    assert first.order_number != second.order_number


async def test_one_order_per_rfq(db, admin, customer):
    rfq, _ = await accepted_rfq(db, admin, customer)
    await create_order_from_rfq(db, rfq.id, OrderFromRfqCreate(), admin)

    with pytest.raises(AppException) as exc:
        await create_order_from_rfq(db, rfq.id, OrderFromRfqCreate(), admin)

    assert exc.value.error_code == ErrorCode.ORDER_ALREADY_EXISTS


async def test_rfq_without_accepted_quote_cannot_become_an_order(db, admin, customer):
    rfq = await make_rfq(db, customer)

    with pytest.raises(AppException) as exc:
        await create_order_from_rfq(db, rfq.id, OrderFromRfqCreate(), admin)

    assert exc.value.status_code == 409
    assert exc.value.error_code == ErrorCode.QUOTE_INVALID_STATE


async def test_manual_order_records_an_accepted_rfq(db, admin, customer):
    order = await create_manual_order(
        db,
        ManualOrderCreate(
            user_id=customer.id,
            project_name="Pump impeller",
            material="Stainless 316",
            tolerance="ISO 2768-m",
            quantity=40,
            amount=Decimal("900.00"),
            currency="eur",
        ),
        admin,
    )

    assert order.user_id == customer.id
    assert order.currency == "EUR"
    assert order.quote_id is None
    assert order.estimated_completion is not None

    rfq = await db.get(Rfq, order.rfq_id)
    assert RfqStatus(rfq.status) == RfqStatus.accepted


async def test_manual_order_requires_a_customer(db, admin):
    with pytest.raises(AppException) as exc:
        await create_manual_order(
            db,
            ManualOrderCreate(
                user_id=admin.id,
                project_name="X",
                material="Steel",
                tolerance="0.1",
                quantity=1,
                amount=Decimal("1"),
            ),
            admin,
        )

    assert exc.value.error_code == ErrorCode.USER_NOT_FOUND


# =====================
# READ
# =====================

async def test_customers_only_see_their_own_orders(db, admin, customer, other_customer):
    mine = await make_order(db, customer)
    await make_order(db, other_customer)

    data = await list_orders(db, customer)
    assert [o.id for o in data["items"]] == [mine.id]
    assert data["total"] == 1

    everything = await list_orders(db, admin)
    assert everything["total"] == 2

    with pytest.raises(AppException) as exc:
        await get_order(db, mine.id, other_customer)
    assert exc.value.status_code == 404


async def test_archived_orders_are_listed_separately(db, admin, customer):
    await make_order(db, customer)
    archived = await make_order(db, customer, is_archived=True)

    active = await list_orders(db, admin)
    archive = await list_orders(db, admin, archived=True)

    assert archived.id not in [o.id for o in active["items"]]
    assert [o.id for o in archive["items"]] == [archived.id]


async def test_list_orders_filters_by_status_and_search(db, admin, customer):
    await make_order(db, customer, status=OrderStatus.manufacturing, project_name="Gearbox cover")
    await make_order(db, customer, status=OrderStatus.pending, project_name="Valve body")

    by_status = await list_orders(db, admin, status=OrderStatus.manufacturing)
    assert [o.project_name for o in by_status["items"]] == ["Gearbox cover"]

    by_search = await list_orders(db, admin, search="valve")
    assert [o.project_name for o in by_search["items"]] == ["Valve body"]


async def test_timeline_marks_completed_current_and_upcoming(db, customer):
    order = await make_order(db, customer, status=OrderStatus.finishing)

    timeline = await get_order_timeline(db, order.id, customer)
    states = [stage.state for stage in timeline.stages]

    assert timeline.progress_percentage == pytest.approx(50.0)
    assert states[:3] == [StageState.completed] * 3
    assert states[3] == StageState.current
    assert states[4:] == [StageState.upcoming] * 4


def test_status_display_list_covers_every_stage():
    rows = list_status_display()

    assert [row.index for row in rows] == list(range(8))
    assert rows[0].label == "Order Confirmed"
    assert rows[-1].progress_percentage == 100.0


# =====================
# STATUS CHANGES
# =====================

async def test_status_moves_forward_and_bumps_version(db, admin, customer):
    order = await make_order(db, customer)

    updated = await set_order_status(db, order.id, OrderStatus.manufacturing, admin, version=1)

    assert updated.order_status == OrderStatus.manufacturing
    assert updated.version == 2
    assert updated.status_label == "Manufacturing"

    messages = (await db.execute(select(UserActivity.message))).scalars().all()
    assert any("from pending to manufacturing" in m for m in messages)


async def test_status_cannot_move_backwards(db, admin, customer):
    order = await make_order(db, customer, status=OrderStatus.finishing)

    with pytest.raises(AppException) as exc:
        await set_order_status(db, order.id, OrderStatus.manufacturing, admin)

    assert exc.value.error_code == ErrorCode.ORDER_INVALID_TRANSITION


async def test_stale_version_is_rejected(db, admin, customer):
    order = await make_order(db, customer)
    await set_order_status(db, order.id, OrderStatus.material_procurement, admin)

    with pytest.raises(AppException) as exc:
        await set_order_status(db, order.id, OrderStatus.manufacturing, admin, version=1)

    assert exc.value.error_code == ErrorCode.ORDER_VERSION_CONFLICT


async def test_packing_requires_customer_approval(db, admin, customer):
    order = await make_order(db, customer, status=OrderStatus.quality_check)

    with pytest.raises(AppException) as exc:
        await move_to_packing(db, order.id, admin)
    assert exc.value.error_code == ErrorCode.QUALITY_CHECK_NOT_APPROVED

    approved = await make_order(
        db,
        customer,
        status=OrderStatus.quality_check,
        quality_check_status=QualityCheckStatus.approved,
    )
    moved = await move_to_packing(db, approved.id, admin)
    assert moved.order_status == OrderStatus.packing


async def test_move_to_packing_only_from_quality_check(db, admin, customer):
    order = await make_order(db, customer, status=OrderStatus.manufacturing)

    with pytest.raises(AppException) as exc:
        await move_to_packing(db, order.id, admin)

    assert exc.value.error_code == ErrorCode.ORDER_INVALID_STATE


async def test_archived_order_status_is_frozen(db, admin, customer):
    order = await make_order(db, customer, is_archived=True)

    with pytest.raises(AppException) as exc:
        await set_order_status(db, order.id, OrderStatus.manufacturing, admin)

    assert exc.value.error_code == ErrorCode.ORDER_ARCHIVED


# =====================
# TRACKING / PAYMENT
# =====================

async def test_update_tracking(db, admin, customer):
    order = await make_order(db, customer)

    updated = await update_tracking(
        db,
        order.id,
        OrderTrackingUpdate(tracking_number="1Z999", shipping_carrier="UPS"),
        admin,
    )

    assert updated.tracking_number == "1Z999"
    assert updated.shipping_carrier == "UPS"

    with pytest.raises(AppException) as exc:
        await update_tracking(db, order.id, OrderTrackingUpdate(tracking_number="1Z999"), admin)
    assert exc.value.status_code == 400


async def test_paid_orders_are_archived_and_can_be_reopened(db, admin, customer):
    order = await make_order(db, customer, status=OrderStatus.delivered)

    paid = await update_payment_status(
        db, order.id, OrderPaymentUpdate(payment_status=PaymentStatus.paid), admin
    )
    assert paid.is_archived
    assert paid.archived_at is not None

    reopened = await reopen_order(db, order.id, admin)
    assert not reopened.is_archived
    assert reopened.payment_status == PaymentStatus.unpaid

    with pytest.raises(AppException) as exc:
        await reopen_order(db, order.id, admin)
    assert exc.value.error_code == ErrorCode.ORDER_INVALID_STATE


# =====================
# INVOICE
# =====================

async def test_invoice_upload_and_download(db, admin, customer):
    order = await make_order(db, customer)

    updated = await upload_invoice(db, order.id, "INV-2041.pdf", PDF_BYTES, admin)
    assert updated.has_invoice

    content, filename = await download_invoice(db, order.id, customer)
    assert content == PDF_BYTES
    assert filename == f"invoice-{order.order_number}.pdf"


async def test_invoice_must_be_a_pdf(db, admin, customer):
    order = await make_order(db, customer)

    with pytest.raises(AppException) as exc:
        await upload_invoice(db, order.id, "invoice.pdf", b"not a pdf", admin)

    assert exc.value.error_code == ErrorCode.INVOICE_INVALID_FILE


async def test_missing_invoice_is_404(db, customer):
    order = await make_order(db, customer)

    with pytest.raises(AppException) as exc:
        await download_invoice(db, order.id, customer)

    assert exc.value.error_code == ErrorCode.INVOICE_NOT_FOUND


# =====================
# REORDER
# =====================

async def test_reorder_copies_specs_into_a_new_rfq(db, customer):
    order = await make_order(db, customer, status=OrderStatus.delivered, quantity=75)

    rfq = await reorder(db, order.id, customer)

    assert rfq.status == RfqStatus.submitted
    assert rfq.project_name == f"REORDER: {order.project_name}"
    assert rfq.quantity == 75
    assert rfq.notes == f"Reorder of {order.order_number}"


async def test_reorder_waits_until_packing(db, customer):
    order = await make_order(db, customer, status=OrderStatus.manufacturing)

    with pytest.raises(AppException) as exc:
        await reorder(db, order.id, customer)

    assert exc.value.error_code == ErrorCode.ORDER_INVALID_STATE

