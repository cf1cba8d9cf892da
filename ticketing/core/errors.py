"""
Domain error taxonomy for the booking core.

Each error carries a stable code and the HTTP status it maps to at the API
boundary. Messages are user-safe: storage and delivery failures keep their
internal detail in the logs, never in the response.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ticketing.core.logging import get_logger

logger = get_logger(__name__)


class TicketingError(Exception):
    """Base domain error with code and user-safe message."""

    code = "error"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ValidationError(TicketingError):
    code = "validation-error"
    status_code = 400


class InvalidStatusError(TicketingError):
    code = "invalid-status"
    status_code = 400

    def __init__(self, value: str):
        super().__init__(f"Invalid status value: {value!r}")
        self.value = value


class NotFoundError(TicketingError):
    code = "not-found"
    status_code = 404


class ConflictError(TicketingError):
    code = "conflict"
    status_code = 409


class CapacityExhaustedError(TicketingError):
    code = "capacity-exhausted"
    status_code = 503


class StorageError(TicketingError):
    code = "storage-error"
    status_code = 500


class DeliveryError(TicketingError):
    code = "delivery-error"
    status_code = 502


class UpstreamUnavailableError(TicketingError):
    code = "upstream-unavailable"
    status_code = 503


async def ticketing_error_handler(request: Request, exc: TicketingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_domain_error", code=exc.code, message=exc.message)
    else:
        logger.info("request_rejected", code=exc.code, message=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TicketingError, ticketing_error_handler)
