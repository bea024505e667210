from fastapi import HTTPException
from app.constants.error_codes import ErrorCode


class AppException(HTTPException):
    """Domain error rendered by ``app_exception_handler`` as the error envelope."""

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: ErrorCode,
        details: dict | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
        self.details = details

    def __repr__(self):
        return f"<AppException {self.status_code} {self.error_code.value}: {self.detail}>"
