# app/routers/__init__.py

from .auth.auth_router import router as auth_router
from .auth.activity_router import router as activity_router
from .users.user_router import router as user_router

from .rfq.rfq_router import router as rfq_router
from .sales.sales_quote_router import router as sales_quote_router

from .orders.order_router import router as order_router, status_router as order_status_router
from .orders.quality_check_router import router as quality_check_router, queue_router as quality_check_queue_router
from .orders.shipment_router import router as shipment_router, order_shipments_router

from .dashboard.dashboard_router import router as dashboard_router


__all__ = [
    "auth_router",
    "activity_router",
    "user_router",
    "rfq_router",
    "sales_quote_router",
    "order_router",
    "order_status_router",
    "quality_check_router",
    "quality_check_queue_router",
    "shipment_router",
    "order_shipments_router",
    "dashboard_router",
]
