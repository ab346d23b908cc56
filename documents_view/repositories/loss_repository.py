from typing import List, Optional

from sqlalchemy import String, cast, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from documents_view.database.models import Loss, MapLossClaimant, MapPolicyLoss
from documents_view.repositories.base_repository import BaseRepository


class LossRepository(BaseRepository[Loss]):
    """Repository for Loss records and the loss/claimant association."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Loss)

    async def options_for_policy(
        self, policy_id: int, search: Optional[str] = None, limit: int = 25
    ) -> List[Loss]:
        """Active losses linked to ``policy_id``, ordered by sequence."""
        query = (
            select(Loss)
            .join(MapPolicyLoss, MapPolicyLoss.loss_id == Loss.id)
            .where(MapPolicyLoss.policy_id == policy_id, Loss.is_active.is_(True))
        )
        if search:
            display = cast(Loss.sequence, String) + " - " + Loss.name
            query = query.where(display.ilike(f"%{search}%"))

        query = query.order_by(Loss.sequence).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def claimant_belongs_to_loss(self, claimant_id: int, loss_id: int) -> bool:
        query = select(
            exists().where(
                MapLossClaimant.loss_id == loss_id, MapLossClaimant.claimant_id == claimant_id
            )
        )
        result = await self.session.execute(query)
        return bool(result.scalar())
