"""
Health check endpoints.

Liveness says the process is up. Readiness also proves the catalog tables
answer a query.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardshop.db.database import get_session
from cardshop.models.db import CardDB

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str | None = None
    catalog_cards: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe. Does not touch the database."""
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
    """
    Readiness probe.

    Counts catalog cards; returns 503 if the database cannot answer.
    """
    try:
        result = await session.execute(select(func.count(CardDB.id)))
        card_count = int(result.scalar_one())
    except SQLAlchemyError:
        logger.warning("READINESS_CHECK_FAILED", exc_info=True)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected")

    return HealthResponse(status="ready", database="connected", catalog_cards=card_count)
