from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from documents_view.database.models import User, UserGroup
from documents_view.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for users and the groups documents can be assigned to."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, User)

    async def search_users(self, search: Optional[str] = None, limit: int = 25) -> List[User]:
        query = select(User).where(User.is_active.is_(True))
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(User.username.ilike(pattern), User.full_name.ilike(pattern)))

        query = query.order_by(User.username).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_group_by_id(self, group_id: int) -> Optional[UserGroup]:
        result = await self.session.execute(select(UserGroup).where(UserGroup.id == group_id))
        return result.scalar_one_or_none()

    async def search_groups(self, search: Optional[str] = None, limit: int = 25) -> List[UserGroup]:
        query = select(UserGroup).where(UserGroup.is_active.is_(True))
        if search:
            query = query.where(UserGroup.name.ilike(f"%{search}%"))

        query = query.order_by(UserGroup.name).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())
