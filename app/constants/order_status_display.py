# app/constants/order_status_display.py
"""Display labels and badge colours for order statuses.

One row per ``OrderStatus`` member, so the table is total over the enum.
Anything else (legacy rows, typos coming from clients) renders through
``status_display`` with a title-cased label and the neutral colour.
"""

from typing import NamedTuple

from app.models.enums.order_status import OrderStatus


class StatusDisplay(NamedTuple):
    label: str
    color: str


FALLBACK_COLOR = "bg-gray-100 text-gray-800"

ORDER_STATUS_DISPLAY: dict[OrderStatus, StatusDisplay] = {
    OrderStatus.pending: StatusDisplay(
        "Order Confirmed", "bg-yellow-100 text-yellow-800 border-yellow-300"
    ),
    OrderStatus.material_procurement: StatusDisplay(
        "Material Procurement", "bg-blue-100 text-blue-800 border-blue-300"
    ),
    OrderStatus.manufacturing: StatusDisplay(
        "Manufacturing", "bg-purple-100 text-purple-800 border-purple-300"
    ),
    OrderStatus.finishing: StatusDisplay(
        "Finishing", "bg-indigo-100 text-indigo-800 border-indigo-300"
    ),
    OrderStatus.quality_check: StatusDisplay(
        "Quality Check", "bg-orange-100 text-orange-800 border-orange-300"
    ),
    OrderStatus.packing: StatusDisplay(
        "Packing", "bg-cyan-100 text-cyan-800 border-cyan-300"
    ),
    OrderStatus.shipped: StatusDisplay(
        "Shipped", "bg-green-100 text-green-800 border-green-300"
    ),
    OrderStatus.delivered: StatusDisplay(
        "Delivered", "bg-gray-100 text-gray-800 border-gray-300"
    ),
}


def humanize(raw: str) -> str:
    return " ".join(word.capitalize() for word in raw.replace("-", "_").split("_") if word)


def status_display(status) -> StatusDisplay:
    try:
        return ORDER_STATUS_DISPLAY[OrderStatus(status)]
    except ValueError:
        return StatusDisplay(humanize(str(status)), FALLBACK_COLOR)
