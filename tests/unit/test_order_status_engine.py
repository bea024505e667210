"""Pure ordering rules: progress, timeline and the quality gate."""

import pytest

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.models.enums.order_status import OrderStatus, QualityCheckStatus
from app.services.orders.order_status_engine import (
    ORDER_STATUS_SEQUENCE,
    TOTAL_STAGES,
    StageState,
    build_timeline,
    can_transition,
    check_transition,
    classify_stage,
    crosses_quality_gate,
    progress_percentage,
    status_index,
)


# =====================
# SEQUENCE / PROGRESS
# =====================

def test_sequence_has_eight_stages_in_lifecycle_order():
    assert TOTAL_STAGES == 8
    assert ORDER_STATUS_SEQUENCE[0] == OrderStatus.pending
    assert ORDER_STATUS_SEQUENCE[4] == OrderStatus.quality_check
    assert ORDER_STATUS_SEQUENCE[-1] == OrderStatus.delivered


def test_status_index_accepts_raw_strings():
    assert status_index("manufacturing") == 2
    assert status_index(OrderStatus.packing) == 5


@pytest.mark.parametrize(
    "status, expected",
    [
        (OrderStatus.pending, 12.5),
        (OrderStatus.material_procurement, 25.0),
        (OrderStatus.quality_check, 62.5),
        (OrderStatus.shipped, 87.5),
        (OrderStatus.delivered, 100.0),
    ],
)
def test_progress_percentage(status, expected):
    assert progress_percentage(status) == pytest.approx(expected)


def test_progress_is_monotonic():
    values = [progress_percentage(s) for s in ORDER_STATUS_SEQUENCE]
    assert values == sorted(values)
    assert all(0 < v <= 100 for v in values)


# =====================
# TIMELINE
# =====================

def test_classify_stage_relative_to_current():
    current = OrderStatus.finishing
    assert classify_stage(OrderStatus.pending, current) == StageState.completed
    assert classify_stage(OrderStatus.finishing, current) == StageState.current
    assert classify_stage(OrderStatus.packing, current) == StageState.upcoming


def test_delivered_order_has_no_current_stage():
    states = [stage["state"] for stage in build_timeline(OrderStatus.delivered)]
    assert states == [StageState.completed] * TOTAL_STAGES


def test_timeline_for_pending_order():
    timeline = build_timeline(OrderStatus.pending)

    assert len(timeline) == TOTAL_STAGES
    assert timeline[0] == {
        "status": OrderStatus.pending,
        "label": "Order Confirmed",
        "state": StageState.current,
    }
    assert all(stage["state"] == StageState.upcoming for stage in timeline[1:])


# =====================
# TRANSITIONS
# =====================

def test_forward_move_is_allowed():
    check_transition(OrderStatus.pending, OrderStatus.material_procurement, QualityCheckStatus.pending)


def test_skipping_stages_before_the_gate_is_allowed():
    check_transition(OrderStatus.pending, OrderStatus.quality_check, QualityCheckStatus.pending)


@pytest.mark.parametrize(
    "current, target",
    [
        (OrderStatus.manufacturing, OrderStatus.manufacturing),
        (OrderStatus.manufacturing, OrderStatus.pending),
        (OrderStatus.delivered, OrderStatus.shipped),
    ],
)
def test_backward_or_same_moves_are_rejected(current, target):
    with pytest.raises(AppException) as exc:
        check_transition(current, target, QualityCheckStatus.approved)

    assert exc.value.status_code == 409
    assert exc.value.error_code == ErrorCode.ORDER_INVALID_TRANSITION


@pytest.mark.parametrize(
    "qc_status", [QualityCheckStatus.pending, QualityCheckStatus.needs_revision]
)
def test_gate_blocks_packing_without_approval(qc_status):
    with pytest.raises(AppException) as exc:
        check_transition(OrderStatus.quality_check, OrderStatus.packing, qc_status)

    assert exc.value.error_code == ErrorCode.QUALITY_CHECK_NOT_APPROVED


def test_gate_blocks_jumping_over_quality_check():
    assert crosses_quality_gate(OrderStatus.manufacturing, OrderStatus.shipped)
    assert not can_transition(
        OrderStatus.manufacturing, OrderStatus.shipped, QualityCheckStatus.pending
    )


def test_approved_order_passes_the_gate():
    check_transition(OrderStatus.quality_check, OrderStatus.packing, QualityCheckStatus.approved)
    assert can_transition(OrderStatus.quality_check, OrderStatus.delivered, QualityCheckStatus.approved)


def test_moves_after_the_gate_do_not_recheck_approval():
    assert not crosses_quality_gate(OrderStatus.packing, OrderStatus.shipped)
    check_transition(OrderStatus.packing, OrderStatus.shipped, QualityCheckStatus.pending)
