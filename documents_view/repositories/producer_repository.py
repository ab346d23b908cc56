from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from documents_view.database.models import Producer
from documents_view.repositories.base_repository import BaseRepository


class ProducerRepository(BaseRepository[Producer]):
    """Repository for Producer records."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Producer)

    async def search_options(self, search: Optional[str] = None, limit: int = 25) -> List[Producer]:
        query = select(Producer).where(Producer.is_active.is_(True))
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(Producer.number.ilike(pattern), Producer.name.ilike(pattern)))

        query = query.order_by(Producer.number).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())
