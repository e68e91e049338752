"""
Service status endpoints.

/health answers as long as the process is serving requests. /ready also
needs the database: it counts the shared card cache, which is the first
table every collection upload and stored-collection build reads.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from commanderforge.db.database import get_session
from commanderforge.models.db import CardCacheDB

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    database: str | None = None
    cached_cards: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """The process is up. Touches nothing else."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """Ready to build decks; 503 while the database cannot be read."""
    try:
        cached = await session.scalar(select(func.count()).select_from(CardCacheDB))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database unavailable: %s", e)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected")
    return HealthResponse(status="ready", database="connected", cached_cards=cached or 0)
