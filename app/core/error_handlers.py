from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _error_body(message, error_code: ErrorCode, details=None) -> dict:
    return {
        "success": False,
        "message": message,
        "error_code": error_code,
        "details": details,
    }


# -------------------------
# APP EXCEPTIONS
# -------------------------
async def app_exception_handler(request: Request, exc: AppException):
    logger.info(
        "Request rejected",
        extra={
            "path": request.url.path,
            "status_code": exc.status_code,
            "error_code": exc.error_code,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail, exc.error_code, exc.details),
    )


# -------------------------
# FASTAPI VALIDATION
# -------------------------
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
):
    return JSONResponse(
        status_code=422,
        content=_error_body(
            "Invalid request data",
            ErrorCode.VALIDATION_ERROR,
            jsonable_encoder(exc.errors()),
        ),
    )


# -------------------------
# HTTP EXCEPTIONS (mapped)
# -------------------------
HTTP_STATUS_TO_ERROR_CODE = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.PERMISSION_DENIED,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.VALIDATION_ERROR,
    409: ErrorCode.CONFLICT,
    413: ErrorCode.PAYLOAD_TOO_LARGE,
    422: ErrorCode.VALIDATION_ERROR,
}


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
):
    error_code = HTTP_STATUS_TO_ERROR_CODE.get(
        exc.status_code,
        ErrorCode.INTERNAL_ERROR,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail, error_code),
        headers=getattr(exc, "headers", None),
    )


# -------------------------
# DB INTEGRITY ERRORS
# -------------------------
async def integrity_error_handler(
    request: Request, exc: IntegrityError
):
    logger.exception("DB integrity error", extra={"path": request.url.path})

    return JSONResponse(
        status_code=409,
        content=_error_body("Database constraint violation", ErrorCode.CONFLICT),
    )


# -------------------------
# LAST RESORT
# -------------------------
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content=_error_body(
            "Something went wrong. Please try again.",
            ErrorCode.INTERNAL_ERROR,
        ),
    )
