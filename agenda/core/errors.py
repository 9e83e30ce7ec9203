import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "An internal server error occurred."
INVALID_PAYLOAD_MESSAGE = "Invalid request payload."


class OperationFailed(Exception):
    """A request failed for a reason other than a missing record."""

    def __init__(self, message: str, detail: str):
        super().__init__(message)
        self.message = message
        self.detail = detail


def error_detail(exc: BaseException) -> str:
    """Best-effort description of a store error.

    Driver exceptions (asyncpg) carry ``detail`` and ``hint``; prefer those and
    fall back to the driver message, then to the exception itself.
    """
    source = exc.orig if isinstance(exc, DBAPIError) and exc.orig is not None else exc
    # SQLAlchemy's asyncpg adapter keeps the driver exception as the cause
    for candidate in (source, source.__cause__):
        for attr in ("detail", "hint"):
            value = getattr(candidate, attr, None)
            if value:
                return str(value)
    return str(source) or exc.__class__.__name__


@asynccontextmanager
async def failure_boundary(
    message: str = DEFAULT_FAILURE_MESSAGE,
    db: Optional[AsyncSession] = None,
) -> AsyncIterator[None]:
    """Turn any unexpected error inside the block into an ``OperationFailed``.

    ``HTTPException`` (404s raised by services) passes through untouched.
    """
    try:
        yield
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Operation failed: %s", message)
        if db is not None:
            await db.rollback()
        raise OperationFailed(message, error_detail(e)) from e


async def operation_failed_handler(request: Request, exc: OperationFailed) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": exc.message, "error": exc.detail},
    )


async def validation_failed_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        detail = INVALID_PAYLOAD_MESSAGE
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, detail)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": INVALID_PAYLOAD_MESSAGE, "error": detail},
    )
