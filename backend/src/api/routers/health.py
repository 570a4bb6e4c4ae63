"""Health check endpoint."""
import logging

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_async_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class DatabaseStatus(BaseModel):
    """Result of the database check query."""

    status: str  # "up" or "down"
    message: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "ok" or "error"
    database: DatabaseStatus


@router.get(
    "/health",
    response_model=HealthResponse,
    response_model_exclude_none=True,
    responses={503: {"model": HealthResponse, "description": "Database unreachable"}},
)
async def health_check(
    response: Response,
    db: AsyncSession = Depends(get_async_session),
) -> HealthResponse:
    """Report whether the database answers a trivial query."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.exception("Database health check failed")
        await db.rollback()
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(
            status="error",
            database=DatabaseStatus(status="down", message=str(e)),
        )

    return HealthResponse(status="ok", database=DatabaseStatus(status="up"))
