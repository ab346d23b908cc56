from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from documents_view.database.models import DocumentAction
from documents_view.repositories.base_repository import BaseRepository


class ActionRepository(BaseRepository[DocumentAction]):
    """Repository for document history entries."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, DocumentAction)

    async def get_history(
        self,
        document_id: int,
        action_type: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[DocumentAction], int]:
        """Page through a document's history, newest first.

        Args:
            document_id: Document ID
            action_type: Only entries of this type
            limit: Page size
            offset: Page offset

        Returns:
            Tuple of (entries, total matching count)
        """
        conditions = [DocumentAction.document_id == document_id]
        if action_type:
            conditions.append(DocumentAction.action_type == action_type)

        total_query = select(func.count()).select_from(DocumentAction).where(*conditions)
        total = (await self.session.execute(total_query)).scalar_one()

        query = (
            select(DocumentAction)
            .where(*conditions)
            .options(selectinload(DocumentAction.user))
            .order_by(DocumentAction.created_at.desc(), DocumentAction.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def get_last_of_type(self, document_id: int, action_type: str) -> Optional[DocumentAction]:
        query = (
            select(DocumentAction)
            .where(DocumentAction.document_id == document_id, DocumentAction.action_type == action_type)
            .options(selectinload(DocumentAction.user))
            .order_by(DocumentAction.created_at.desc(), DocumentAction.id.desc())
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_action_types(self, document_id: int) -> List[str]:
        """Distinct action types present in a document's history."""
        query = (
            select(DocumentAction.action_type)
            .where(DocumentAction.document_id == document_id)
            .distinct()
            .order_by(DocumentAction.action_type)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
