import logging

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.errors import CatalogQueryError
from app.models.feature import Feature, room_features
from app.models.room import Room
from app.models.user import Favorite
from app.repositories.base import BaseRepository
from app.schemas.filters import FilterParameters

logger = logging.getLogger(__name__)

ORDER_COLUMNS = {
    "name": Room.name,
    "price": Room.price,
    "capacity": Room.capacity,
}


def build_room_query(filters: FilterParameters, favorite_user_id: int | None = None) -> Select:
    """Build the room selection for a filter set.

    Every predicate is optional and AND-ed; values are always bound
    parameters. The feature tables only enter the statement when at least one
    feature is requested.
    """
    stmt = select(Room).options(selectinload(Room.features))

    if filters.name:
        stmt = stmt.where(Room.name.icontains(filters.name, autoescape=True))
    if (price_min := filters.price_min_value) is not None:
        stmt = stmt.where(Room.price >= price_min)
    if (price_max := filters.price_max_value) is not None:
        stmt = stmt.where(Room.price <= price_max)
    if (capacity := filters.capacity_value) is not None:
        stmt = stmt.where(Room.capacity == capacity)

    # one membership subquery per feature: the room must have all of them
    for label in filters.requested_features:
        has_feature = (
            select(room_features.c.room_id)
            .join(Feature, Feature.id == room_features.c.feature_id)
            .where(Feature.name == label)
        )
        stmt = stmt.where(Room.id.in_(has_feature))

    if favorite_user_id is not None:
        favorites = select(Favorite.room_id).where(Favorite.user_id == favorite_user_id)
        stmt = stmt.where(Room.id.in_(favorites))

    column = ORDER_COLUMNS.get(filters.order_by)
    if column is not None:
        stmt = stmt.order_by(column.desc() if filters.order_direction == "desc" else column.asc(), Room.id.asc())
    else:
        stmt = stmt.order_by(Room.id.asc())
    return stmt


class RoomRepository(BaseRepository[Room]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, Room)

    async def search(self, filters: FilterParameters, favorite_user_id: int | None = None) -> list[Room]:
        """Ordered rooms matching `filters`, each with its full feature list. No pagination."""
        stmt = build_room_query(filters, favorite_user_id=favorite_user_id)
        try:
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            logger.exception("Room search failed for filters: %s", filters)
            raise CatalogQueryError() from exc

    async def get_with_features(self, room_id: int) -> Room | None:
        stmt = select(Room).options(selectinload(Room.features)).where(Room.id == room_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def exists(self, room_id: int) -> bool:
        stmt = select(Room.id).where(Room.id == room_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None
