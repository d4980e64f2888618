"""Repository for user records."""

from sqlalchemy.ext.asyncio import AsyncSession

from usersync.db.models.user import UserRow
from usersync.repositories.base import BaseRepository


class UserRepository(BaseRepository[UserRow]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, UserRow)

    async def get(self, external_id: str) -> UserRow | None:
        return await self.get_by_id("external_id", external_id)
