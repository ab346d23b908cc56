from typing import List, Optional

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from documents_view.database.models import MapPolicyLoss, MapProducerPolicy, Policy
from documents_view.repositories.base_repository import BaseRepository


class PolicyRepository(BaseRepository[Policy]):
    """Repository for Policy records and the policy/loss association."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Policy)

    async def search_options(
        self,
        search: Optional[str] = None,
        producer_id: Optional[int] = None,
        limit: int = 25,
    ) -> List[Policy]:
        """Active policies for a dropdown, optionally scoped to a producer.

        Args:
            search: Text matched against "PREFIX-NUMBER"
            producer_id: Only policies written by this producer
            limit: Maximum number of rows

        Returns:
            Policies ordered by prefix and number
        """
        query = select(Policy).where(Policy.is_active.is_(True))
        if producer_id is not None:
            query = query.join(MapProducerPolicy, MapProducerPolicy.policy_id == Policy.id).where(
                MapProducerPolicy.producer_id == producer_id
            )
        if search:
            formatted = Policy.prefix + "-" + Policy.number
            query = query.where(formatted.ilike(f"%{search}%"))

        query = query.order_by(Policy.prefix, Policy.number).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def loss_belongs_to_policy(self, loss_id: int, policy_id: int) -> bool:
        query = select(
            exists().where(MapPolicyLoss.policy_id == policy_id, MapPolicyLoss.loss_id == loss_id)
        )
        result = await self.session.execute(query)
        return bool(result.scalar())
