"""
Central error handling for the HRMS leave service

Domain failures of the leave engine are HTTPException subclasses carrying a
stable ``code`` so that callers can branch on the kind of failure while the
detail string stays human readable.
"""
import logging
import traceback
from datetime import date
from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LeaveError(HTTPException):
    """Base class for leave engine failures"""

    code = "LEAVE_ERROR"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(status_code=self.http_status, detail=detail)


class InvalidRangeError(LeaveError):
    code = "INVALID_RANGE"

    def __init__(self, start_date: date, end_date: date):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(f"Start date {start_date} cannot be after end date {end_date}")


class BalanceNotFoundError(LeaveError):
    code = "BALANCE_NOT_FOUND"
    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, leave_type: str, year: int):
        super().__init__(
            f"Leave balance not found for {leave_type} leave in {year}. Please contact HR."
        )


class InsufficientBalanceError(LeaveError):
    code = "INSUFFICIENT_BALANCE"

    def __init__(self, available: int, requested: int):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient leave balance (available: {available}, requested: {requested})"
        )


class OverlappingRequestError(LeaveError):
    code = "OVERLAPPING_REQUEST"
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, start_date: date, end_date: date, status_value: str):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"You already have a {status_value} leave request from {start_date} to {end_date} "
            f"that overlaps this period"
        )


class NotFoundError(LeaveError):
    code = "NOT_FOUND"
    http_status = status.HTTP_404_NOT_FOUND


class ForbiddenError(LeaveError):
    code = "FORBIDDEN"
    http_status = status.HTTP_403_FORBIDDEN


class AlreadyReviewedError(LeaveError):
    code = "ALREADY_REVIEWED"

    def __init__(self, status_value: str):
        super().__init__(f"This leave request has already been reviewed (status {status_value})")


class InvalidStateError(LeaveError):
    code = "INVALID_STATE"


class IntegrityFaultError(LeaveError):
    code = "INTEGRITY_FAULT"
    http_status = status.HTTP_409_CONFLICT


class ConcurrentUpdateError(LeaveError):
    code = "CONCURRENT_UPDATE"
    http_status = status.HTTP_409_CONFLICT


_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "*",
    "Access-Control-Allow-Headers": "*",
}


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle HTTPException (and leave engine errors) with consistent JSON response format

    Args:
        request: FastAPI request object
        exc: HTTPException instance

    Returns:
        JSONResponse with error details
    """
    code: Optional[str] = getattr(exc, "code", None)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "status_code": exc.status_code,
            "code": code,
            "detail": exc.detail,
            "path": str(request.url.path)
        },
        headers=_CORS_HEADERS,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle RequestValidationError with consistent JSON response format

    Does not leak internal validation details in production.
    """
    from app.core.config import settings

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "status_code": 422,
                "detail": "Validation error: Invalid request data",
                "path": str(request.url.path)
            }
        )

    # Sanitize for JSON: e.g. ctx.error ValueError -> str
    errors = []
    for e in exc.errors():
        err = dict(e)
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {
                k: (str(v) if not isinstance(v, (str, int, float, bool, type(None))) else v)
                for k, v in err["ctx"].items()
            }
        errors.append(err)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": True,
            "status_code": 422,
            "detail": "Validation error",
            "errors": errors,
            "path": str(request.url.path)
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions with consistent JSON response format

    Does not leak internal error details in production.
    """
    from app.core.config import settings

    logger.error("Unhandled exception: %s", exc, exc_info=True)

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "status_code": 500,
                "detail": "Internal server error",
                "path": str(request.url.path)
            },
            headers=_CORS_HEADERS,
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": True,
            "status_code": 500,
            "detail": str(exc),
            "path": str(request.url.path),
            "traceback": traceback.format_exc() if settings.APP_ENV == "local" else None
        },
        headers=_CORS_HEADERS,
    )
