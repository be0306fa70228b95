"""HTTP error rendering

Use-case errors are raised as ClientError and rendered as
``{"error": {"code": ..., "message": ...}}``. The diagnostic `reason` is
logged, never returned, so raw storage errors do not reach staff or
customers.
"""

import logging
from typing import NoReturn
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from libs.result import Error
from src.app.use_cases.loyalty import errors

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    errors.INVALID_AMOUNT: status.HTTP_400_BAD_REQUEST,
    errors.INVALID_RATE: status.HTTP_400_BAD_REQUEST,
    errors.ACCOUNT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    errors.AMBIGUOUS_MATCH: status.HTTP_409_CONFLICT,
    errors.INSUFFICIENT_BALANCE: status.HTTP_409_CONFLICT,
    errors.RATE_UPDATE_CONFLICT: status.HTTP_409_CONFLICT,
    errors.CONFIGURATION_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    errors.HISTORY_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    errors.REPORT_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class ClientError(Exception):
    def __init__(self, error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code


def raise_for_error(error: Error) -> NoReturn:
    """Raise the ClientError matching a use-case error code"""
    if error.code in STATUS_BY_CODE:
        status_code = STATUS_BY_CODE[error.code]
    elif error.code.endswith("_FAILED"):
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    raise ClientError(error, status_code=status_code)


async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    if exc.error.reason:
        logger.info(f"{request.method} {request.url.path} -> {exc.error.code}: {exc.error.reason}")

    headers = None
    if exc.error.code in errors.TRANSIENT_CODES:
        headers = {"Retry-After": "1"}

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": exc.error.code, "message": exc.error.message}},
        headers=headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": errors.VALIDATION_ERROR,
                "message": "Invalid request parameters",
                "details": [
                    {"loc": list(e.get("loc", [])), "msg": e.get("msg")}
                    for e in exc.errors()
                ],
            }
        },
    )
