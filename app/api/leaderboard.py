from typing import Annotated

from fastapi import APIRouter, Query

from app.schemas.common import APIResponse, PaginatedResponse, PaginationData
from app.schemas.leaderboard import CacheStats, LeaderboardPage
from app.services.leaderboard import MAX_PAGE_SIZE, LeaderboardServiceDep

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("/")
async def get_leaderboard(
    service: LeaderboardServiceDep,
    offset: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = 50,
    include_details: bool = True,
) -> PaginatedResponse[LeaderboardPage]:
    """
    Get a page of the player leaderboard.

    The first page (offset 0) lists the pinned players in their curated order.
    Later pages continue with everyone else; advance `offset` by the number of
    players already received. `pagination.total_items` is the total player count.
    """
    page = await service.get_page(offset=offset, limit=limit, include_details=include_details)
    pagination = PaginationData(
        offset=offset, limit=limit, total_items=page.count, has_more=page.has_more
    )
    return PaginatedResponse(data=page, pagination=pagination)


@router.get("/cache")
async def get_cache_stats(service: LeaderboardServiceDep) -> APIResponse[list[CacheStats]]:
    return APIResponse(data=service.cache_stats())
