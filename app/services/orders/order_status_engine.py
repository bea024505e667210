# app/services/orders/order_status_engine.py
"""Ordering rules for the manufacturing lifecycle.

Everything here is pure: it answers questions about ``OrderStatus`` values
and never touches the database. ``order_service`` applies the answers.
"""

from enum import Enum

from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.order_status_display import status_display
from app.models.enums.order_status import OrderStatus, QualityCheckStatus

ORDER_STATUS_SEQUENCE: tuple[OrderStatus, ...] = tuple(OrderStatus)
TOTAL_STAGES = len(ORDER_STATUS_SEQUENCE)

# Moving from at-or-before this stage to beyond it needs a customer approval.
QUALITY_GATE = OrderStatus.quality_check


class StageState(str, Enum):
    completed = "completed"
    current = "current"
    upcoming = "upcoming"


def status_index(status: OrderStatus) -> int:
    return ORDER_STATUS_SEQUENCE.index(OrderStatus(status))


def progress_percentage(status: OrderStatus) -> float:
    status = OrderStatus(status)
    if status == OrderStatus.delivered:
        return 100.0
    return (status_index(status) + 1) / TOTAL_STAGES * 100


def classify_stage(stage: OrderStatus, current: OrderStatus) -> StageState:
    stage_idx = status_index(stage)
    current_idx = status_index(current)

    if stage_idx < current_idx:
        return StageState.completed
    if stage_idx == current_idx:
        if OrderStatus(current) == OrderStatus.delivered:
            return StageState.completed
        return StageState.current
    return StageState.upcoming


def crosses_quality_gate(current: OrderStatus, target: OrderStatus) -> bool:
    gate = status_index(QUALITY_GATE)
    return status_index(current) <= gate < status_index(target)


def check_transition(
    current: OrderStatus,
    target: OrderStatus,
    quality_check_status: QualityCheckStatus,
) -> None:
    """Raise ``AppException`` unless ``current -> target`` is allowed.

    Orders only move forward. Stages may be skipped, but nothing passes
    the quality gate until the customer has approved the inspection.
    """
    if status_index(target) <= status_index(current):
        raise AppException(
            409,
            f"Cannot move order from {current.value} to {target.value}",
            ErrorCode.ORDER_INVALID_TRANSITION,
            {"current": current.value, "requested": target.value},
        )

    if (
        crosses_quality_gate(current, target)
        and QualityCheckStatus(quality_check_status) != QualityCheckStatus.approved
    ):
        raise AppException(
            409,
            "Customer approval of the quality check is required first",
            ErrorCode.QUALITY_CHECK_NOT_APPROVED,
            {"quality_check_status": QualityCheckStatus(quality_check_status).value},
        )


def can_transition(
    current: OrderStatus,
    target: OrderStatus,
    quality_check_status: QualityCheckStatus,
) -> bool:
    try:
        check_transition(current, target, quality_check_status)
    except AppException:
        return False
    return True


def build_timeline(current: OrderStatus) -> list[dict]:
    return [
        {
            "status": stage,
            "label": status_display(stage).label,
            "state": classify_stage(stage, current),
        }
        for stage in ORDER_STATUS_SEQUENCE
    ]
