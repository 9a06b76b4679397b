import logging
import math
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.room_repo import RoomRepository
from app.schemas.filters import FilterParameters
from app.schemas.room import PaginationOut, RoomOut, RoomSearchResponse
from app.services.response_cache import ResponseCache

logger = logging.getLogger(__name__)


def total_pages_for(total_rooms: int, limit: int) -> int:
    if total_rooms <= limit:
        return 1
    return math.ceil(total_rooms / limit)


def user_cache_prefix(user_id: int) -> str:
    return f"user={user_id}&"


def search_cache_key(filters: FilterParameters, favorite_user_id: int | None = None) -> str:
    signature = filters.to_query_string(include_paging=True)
    # favorites are per user, so their responses are too
    if filters.favorite_only and favorite_user_id is not None:
        return f"{user_cache_prefix(favorite_user_id)}{signature}"
    return signature


@dataclass
class RoomSearchViewModel:
    filters: FilterParameters
    rooms: list[RoomOut] = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 1
    total_rooms: int = 0
    limit: int = 10

    def to_payload(self) -> dict[str, Any]:
        response = RoomSearchResponse(
            rooms=self.rooms,
            pagination=PaginationOut(
                current_page=self.current_page,
                total_pages=self.total_pages,
                total_rooms=self.total_rooms,
                limit=self.limit,
            ),
        )
        return response.model_dump(mode="json", by_alias=True)

    @classmethod
    async def search(
        cls,
        session: AsyncSession,
        filters: FilterParameters,
        favorite_user_id: int | None = None,
    ) -> "RoomSearchViewModel":
        repo = RoomRepository(session)
        matches = await repo.search(filters, favorite_user_id=favorite_user_id)

        start = (filters.page - 1) * filters.limit
        page_rooms = matches[start:start + filters.limit]

        return cls(
            filters=filters,
            rooms=[RoomOut.model_validate(room) for room in page_rooms],
            current_page=filters.page,
            total_pages=total_pages_for(len(matches), filters.limit),
            total_rooms=len(matches),
            limit=filters.limit,
        )

    @classmethod
    async def cached_payload(
        cls,
        session: AsyncSession,
        cache: ResponseCache,
        filters: FilterParameters,
        favorite_user_id: int | None = None,
    ) -> dict[str, Any]:
        """The `{rooms, pagination}` payload, served from `cache` while fresh."""
        key = search_cache_key(filters, favorite_user_id)
        cached = cache.get(key)
        if cached is not None:
            logger.info("Returning cached search result for: %s", key)
            return cached

        logger.info("Processing search for: %s", key)
        vm = await cls.search(session, filters, favorite_user_id=favorite_user_id)
        payload = vm.to_payload()
        cache.set(key, payload)
        return payload
