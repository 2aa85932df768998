"""
Error taxonomy for the scheduling core and the FastAPI handlers that turn
each error into an ``{error, details}`` response.

- InvalidRequest       400  missing/malformed input, not retried
- NotFound             404  mentor or session absent
- ConstraintViolation  422  reschedule rule broken, caller must correct input
- UpstreamFailure      503  store error or timeout, retryable
- PartialDataLoss      never sent to the caller; logged during aggregation
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.utils.response import error_response

logger = logging.getLogger(__name__)


class SchedulingError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    retryable = False

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidRequest(SchedulingError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(SchedulingError):
    status_code = status.HTTP_404_NOT_FOUND


class ConstraintViolation(SchedulingError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class UpstreamFailure(SchedulingError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True


class PartialDataLoss(SchedulingError):
    """One cohort timeline could not be read during an aggregation run."""

    def __init__(self, timeline_id: str, cause: Exception):
        super().__init__(
            f"Skipped timeline {timeline_id}",
            details=getattr(cause, "details", None) or str(cause),
        )
        self.timeline_id = timeline_id
        self.cause = cause


def _validation_message(exc: RequestValidationError) -> tuple[str, str]:
    errors = exc.errors()
    if not errors:
        return "Invalid request", ""
    first = errors[0]
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path")]
    field = ".".join(loc) or "request"
    if first.get("type") == "missing":
        message = f"{field} is required"
    else:
        message = f"Invalid value for {field}"
    return message, first.get("msg", "")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(SchedulingError)
    async def scheduling_error_handler(request: Request, exc: SchedulingError):
        if isinstance(exc, UpstreamFailure):
            logger.error("Upstream failure on %s: %s (%s)", request.url.path, exc.message, exc.details)
        headers = {"Retry-After": "5"} if exc.retryable else None
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.message, exc.details),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message, details = _validation_message(exc)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_response(message, details),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response("Something went wrong", str(exc)),
        )
