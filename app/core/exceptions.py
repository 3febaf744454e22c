"""
Domain errors and global exception handlers — prevents stack-trace leakage to clients.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.config import settings

logger = logging.getLogger(__name__)


# ── Domain errors (business-rule violations → 400) ──────────────────
class DomainError(Exception):
    status_code = 400
    default_message = "Request violates a business rule"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AlreadyClockedIn(DomainError):
    default_message = "Already clocked in today"


class NoClockInFound(DomainError):
    default_message = "No clock in record found for today"


class AlreadyClockedOut(DomainError):
    default_message = "Already clocked out today"


class InvalidPeriod(DomainError):
    default_message = "Valid period (YYYY-MM) required"


class InvalidStatus(DomainError):
    default_message = "Status must be 'approved' or 'rejected'"


class LeaveAlreadyDecided(DomainError):
    default_message = "Leave request has already been decided"


# ── Handlers ────────────────────────────────────────────────────────
async def _domain_error_handler(_request: Request, exc: DomainError) -> JSONResponse:
    logger.info("Rejected by business rule: %s", exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "success": False},
    )


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for error in exc.errors():
        # loc is usually ("body", "field") / ("query", "field") / ("path", "id")
        loc = [str(part) for part in error.get("loc", ())]
        field = ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc) or "unknown"
        errors.append({"field": field, "message": error.get("msg", "Invalid value")})

    logger.warning("Validation failed: %s", errors)
    return JSONResponse(
        status_code=400,
        content={"detail": "Validation failed", "errors": errors, "success": False},
    )


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
        headers=getattr(exc, "headers", None),
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=409,
        content={"detail": "Database constraint violation", "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal database error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    content = {"detail": "Internal server error", "success": False}
    if not settings.is_production:
        content["message"] = str(exc)
    return JSONResponse(status_code=500, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(DomainError, _domain_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
