from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from documents_view.database.models import Document, DocumentStatus
from documents_view.repositories.base_repository import BaseRepository
from documents_view.utils.logging import get_logger

LOGGER = get_logger(__name__)

# Exact-match filters accepted by ``list_documents``.
DOCUMENT_FILTER_FIELDS = (
    "status",
    "policy_id",
    "loss_id",
    "claimant_id",
    "producer_id",
    "assigned_user_id",
    "assigned_group_id",
    "created_by_id",
    "updated_by_id",
)

_RELATIONS = (
    Document.policy,
    Document.loss,
    Document.claimant,
    Document.producer,
    Document.assigned_user,
    Document.assigned_group,
    Document.created_by,
    Document.updated_by,
)


class DocumentRepository(BaseRepository[Document]):
    """Repository for managing Document records."""

    def __init__(self, session: AsyncSession):
        """Initialize document repository.

        Args:
            session: SQLAlchemy async session
        """
        super().__init__(session, Document)

    async def get_with_relations(self, document_id: int) -> Optional[Document]:
        """Load a document with every metadata link eagerly loaded.

        Args:
            document_id: Document ID

        Returns:
            Document or None
        """
        try:
            query = (
                select(Document)
                .where(Document.id == document_id)
                .options(*(selectinload(relation) for relation in _RELATIONS))
            )
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            LOGGER.error(
                f"Error loading document {document_id}: {str(e)}",
                exc_info=True
            )
            raise

    async def list_documents(
        self,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Document], int]:
        """List documents matching filters, newest first.

        Trashed documents are hidden unless ``status`` asks for them.

        Args:
            filters: Exact-match filters plus optional ``search`` text
            limit: Page size
            offset: Page offset

        Returns:
            Tuple of (documents, total matching count)
        """
        filters = dict(filters or {})
        search = filters.pop("search", None)

        conditions = []
        for field in DOCUMENT_FILTER_FIELDS:
            value = filters.get(field)
            if value is not None:
                conditions.append(getattr(Document, field) == value)
        if filters.get("status") is None:
            conditions.append(Document.status != DocumentStatus.TRASHED)
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(Document.filename.ilike(pattern), Document.description.ilike(pattern))
            )

        try:
            total_query = select(func.count()).select_from(Document).where(*conditions)
            total = (await self.session.execute(total_query)).scalar_one()

            query = (
                select(Document)
                .where(*conditions)
                .options(*(selectinload(relation) for relation in _RELATIONS))
                .order_by(Document.created_at.desc(), Document.id.desc())
                .offset(offset)
                .limit(limit)
            )
            result = await self.session.execute(query)
            return list(result.scalars().all()), total
        except SQLAlchemyError as e:
            LOGGER.error(
                f"Error listing documents: {str(e)}",
                exc_info=True,
                extra={"filters": filters}
            )
            raise
