from typing import List, Optional

from sqlalchemy import String, cast, select
from sqlalchemy.ext.asyncio import AsyncSession

from documents_view.database.models import Claimant, MapLossClaimant
from documents_view.repositories.base_repository import BaseRepository


class ClaimantRepository(BaseRepository[Claimant]):
    """Repository for Claimant records."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Claimant)

    async def options_for_loss(
        self, loss_id: int, search: Optional[str] = None, limit: int = 25
    ) -> List[Claimant]:
        """Active claimants linked to ``loss_id``, ordered by sequence."""
        query = (
            select(Claimant)
            .join(MapLossClaimant, MapLossClaimant.claimant_id == Claimant.id)
            .where(MapLossClaimant.loss_id == loss_id, Claimant.is_active.is_(True))
        )
        if search:
            display = cast(Claimant.sequence, String) + " - " + Claimant.name
            query = query.where(display.ilike(f"%{search}%"))

        query = query.order_by(Claimant.sequence).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())
