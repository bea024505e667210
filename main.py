# main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError

from app.routers import (
    auth_router,
    activity_router,
    user_router,
    rfq_router,
    sales_quote_router,
    order_router,
    order_status_router,
    quality_check_router,
    quality_check_queue_router,
    shipment_router,
    order_shipments_router,
    dashboard_router,
)

from app.core import config
from app.core.db import init_models
from app.core.scheduler import scheduler
from app.core.exceptions import AppException
from app.core.logging import setup_logging
from app.middleware.request_logging import request_logging_middleware
from app.core.error_handlers import (
    app_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    integrity_error_handler,
    unhandled_exception_handler,
)
from app.utils.logger import get_logger

APP_NAME = "S-Hub Manufacturing Portal API"

# ------------------------------------------------------------------------------
# LOGGING
# ------------------------------------------------------------------------------
setup_logging()
logger = get_logger(__name__)


# ------------------------------------------------------------------------------
# LIFESPAN
# ------------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application", extra={"environment": config.APP_ENV})

    if config.APP_ENV == "development":
        await init_models()
        logger.info("Database models initialized (development)")
    else:
        logger.info("init_models() skipped outside development")

    if not config.IS_PRODUCTION or config.ENABLE_SCHEDULER:
        scheduler.start()
        logger.info("Scheduler started")
    else:
        logger.info("Scheduler disabled (production)")

    yield

    logger.info("Shutting down application")
    if scheduler.running:
        scheduler.shutdown()


# ------------------------------------------------------------------------------
# APP INIT
# ------------------------------------------------------------------------------
app = FastAPI(
    title=APP_NAME,
    description="Quote-to-order portal: RFQs, quotes, order tracking, quality checks and shipments",
    version=config.APP_VERSION,
    docs_url="/docs" if not config.IS_PRODUCTION else None,
    redoc_url=None,
    lifespan=lifespan,
)

# ------------------------------------------------------------------------------
# EXCEPTION HANDLERS
# ------------------------------------------------------------------------------
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(IntegrityError, integrity_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# ------------------------------------------------------------------------------
# MIDDLEWARE
# ------------------------------------------------------------------------------
app.middleware("http")(request_logging_middleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------------------------
# HEALTH CHECK
# ------------------------------------------------------------------------------
@app.get("/", tags=["Health"])
async def health_check():
    return {
        "status": "ok",
        "service": "s-hub-api",
        "environment": config.APP_ENV,
        "version": config.APP_VERSION,
    }


# ------------------------------------------------------------------------------
# ROUTERS
# ------------------------------------------------------------------------------
app.include_router(auth_router)
app.include_router(user_router)
app.include_router(activity_router)
app.include_router(rfq_router)
app.include_router(sales_quote_router)
app.include_router(order_status_router)
app.include_router(order_router)
app.include_router(quality_check_router)
app.include_router(quality_check_queue_router)
app.include_router(order_shipments_router)
app.include_router(shipment_router)
app.include_router(dashboard_router)
