from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import AuthToken, Favorite, User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_favorite_ids(self, user_id: int) -> list[int]:
        stmt = select(Favorite.room_id).where(Favorite.user_id == user_id).order_by(Favorite.room_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def add_favorite(self, user_id: int, room_id: int) -> None:
        stmt = (
            sqlite_insert(Favorite)
            .values(user_id=user_id, room_id=room_id)
            .on_conflict_do_nothing(index_elements=["user_id", "room_id"])
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def remove_favorite(self, user_id: int, room_id: int) -> bool:
        stmt = delete(Favorite).where(Favorite.user_id == user_id, Favorite.room_id == room_id)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0


class TokenRepository(BaseRepository[AuthToken]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, AuthToken)

    async def revoke(self, token: str) -> None:
        await self.session.execute(delete(AuthToken).where(AuthToken.token == token))
        await self.session.flush()

    async def purge_expired(self, user_id: int, now: datetime) -> None:
        stmt = delete(AuthToken).where(AuthToken.user_id == user_id, AuthToken.expires_at <= now)
        await self.session.execute(stmt)
        await self.session.flush()
