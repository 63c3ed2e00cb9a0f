"""Domain exceptions raised by services and their HTTP translation.

Services never build HTTP responses themselves: they raise one of the
exceptions below and the handler registered by :func:`register_exception_handlers`
turns it into a JSON ``{"detail": ...}`` body, matching what
``fastapi.HTTPException`` produces.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import logger


class AraError(RuntimeError):
    """Base class of expected, client-facing failures.

    Args:
        message: Human-readable message returned to the client.
        technical_detail: Optional detail for logs only.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, technical_detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.technical_detail = technical_detail


class NotFoundError(AraError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: object) -> None:
        super().__init__(f"{resource} '{resource_id}' not found")


class ConflictError(AraError):
    status_code = status.HTTP_409_CONFLICT


class BadRequestError(AraError):
    status_code = status.HTTP_400_BAD_REQUEST


class SettingValidationError(BadRequestError):
    """A setting value was refused by its definition."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


def register_exception_handlers(app: FastAPI) -> None:
    """Register the ``AraError`` handler on the FastAPI app."""

    @app.exception_handler(AraError)
    async def ara_error_handler(request: Request, exc: AraError) -> JSONResponse:
        if exc.technical_detail:
            logger.info(
                "%s %s failed: %s (%s)",
                request.method,
                request.url.path,
                exc.message,
                exc.technical_detail,
            )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def commit_or_conflict(db: AsyncSession, message: str) -> None:
    """Commit the session, turning constraint violations into ``ConflictError``.

    Unknown foreign keys (project, team) and unique constraints both surface
    as ``IntegrityError`` at commit; the transaction is rolled back first.
    """

    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError(message, technical_detail=str(exc.orig)) from exc
