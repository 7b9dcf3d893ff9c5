"""Caution feed endpoints.

Read path for the persona feed plus a manual refresh trigger. Store and
lookup errors are mapped to HTTP responses by the application's
exception handlers.
"""

import math
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from caution_feed.api.dependencies import get_feed_scheduler, get_read_store, get_settings
from caution_feed.api.schemas import (
    CategoriesResponse,
    CautionListResponse,
    ErrorResponse,
    PersonaStatsResponse,
    RefreshResponse,
)
from caution_feed.core.config import Config
from caution_feed.core.logging import get_logger
from caution_feed.models.caution_item import Severity
from caution_feed.models.source import CautionCategory
from caution_feed.services.feeds.base import CautionItemView
from caution_feed.services.feeds.read_store import FeedReadStore
from caution_feed.services.feeds.scheduler import FeedScheduler

logger = get_logger(__name__)
router = APIRouter(prefix="/api/cautions", tags=["cautions"])

_ERROR_RESPONSES = {503: {"model": ErrorResponse}}


def _require_known_persona(persona_id: str, settings: Config) -> None:
    if persona_id not in settings.known_personas:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown persona: {persona_id}",
        )


@router.get(
    "",
    response_model=CautionListResponse,
    responses=_ERROR_RESPONSES,
    summary="List cautions for a persona",
)
async def list_cautions(
    persona_id: str = Query(..., min_length=1, description="Persona identifier"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    category: CautionCategory | None = Query(default=None),
    severity: Severity | None = Query(default=None),
    start_date: datetime | None = Query(default=None, description="Published on or after"),
    settings: Config = Depends(get_settings),
    store: FeedReadStore = Depends(get_read_store),
) -> CautionListResponse:
    _require_known_persona(persona_id, settings)

    result = await store.query(
        persona_id,
        limit=limit,
        offset=(page - 1) * limit,
        category=category,
        severity=severity,
        published_after=start_date,
    )
    return CautionListResponse(
        items=result.items,
        total=result.total,
        page=page,
        limit=limit,
        pages=math.ceil(result.total / limit),
    )


@router.get(
    "/categories",
    response_model=CategoriesResponse,
    responses=_ERROR_RESPONSES,
    summary="List caution categories",
)
async def list_categories(
    store: FeedReadStore = Depends(get_read_store),
) -> CategoriesResponse:
    in_use = await store.list_categories()
    return CategoriesResponse(
        categories=[category.value for category in CautionCategory],
        in_use=[category.value for category in in_use],
    )


@router.get(
    "/stats/summary",
    response_model=PersonaStatsResponse,
    responses=_ERROR_RESPONSES,
    summary="Dashboard statistics for a persona",
)
async def stats_summary(
    persona_id: str = Query(..., min_length=1, description="Persona identifier"),
    settings: Config = Depends(get_settings),
    store: FeedReadStore = Depends(get_read_store),
) -> PersonaStatsResponse:
    _require_known_persona(persona_id, settings)

    stats = await store.stats_by_persona(persona_id)
    return PersonaStatsResponse(persona_id=persona_id, **stats.model_dump())


@router.post(
    "/refresh",
    response_model=RefreshResponse,
    responses=_ERROR_RESPONSES,
    summary="Trigger an out-of-cycle poll sweep",
)
async def refresh_feeds(
    all_sources: bool = Query(
        default=False, description="Poll every active source, not only due ones"
    ),
    scheduler: FeedScheduler = Depends(get_feed_scheduler),
) -> RefreshResponse:
    report = await scheduler.run_poll_sweep(ignore_interval=all_sources)
    response = RefreshResponse.from_report(report)

    if report.skipped:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=response.message)

    logger.info(
        "Manual refresh completed",
        sources=len(report.results),
        new_count=response.new_count,
        failed=response.failed_count,
    )
    return response


@router.get(
    "/{item_id}",
    response_model=CautionItemView,
    responses={404: {"model": ErrorResponse}, **_ERROR_RESPONSES},
    summary="Get a caution item",
)
async def get_caution(
    item_id: uuid.UUID,
    store: FeedReadStore = Depends(get_read_store),
) -> CautionItemView:
    await store.increment_view_count(item_id)
    return await store.get_item(item_id)


__all__ = ["router"]
