"""Document service: listing, lifecycle actions and history."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from documents_view.core.config import settings
from documents_view.core.exceptions import (
    DocumentLockedError,
    DocumentNotFoundError,
    MetadataValidationError,
)
from documents_view.database.models import Document, DocumentStatus
from documents_view.metadata.fields import get_field_configs
from documents_view.repositories.action_repository import ActionRepository
from documents_view.repositories.document_repository import DocumentRepository
from documents_view.schemas.documents import (
    DocumentHistoryResponse,
    DocumentListResponse,
    DocumentResponse,
    LastEditedResponse,
)
from documents_view.services.audit_logger import AuditLogger, DocumentActionType
from documents_view.services.base_service import BaseService
from documents_view.services.serializers import (
    action_response,
    document_metadata,
    document_response,
    user_ref,
)
from documents_view.utils.logging import get_logger

LOGGER = get_logger(__name__)


class DocumentService(BaseService):
    """Service for document retrieval, processing, trash and history."""

    def __init__(self, session: AsyncSession):
        """Initialize document service.

        Args:
            session: Database session
        """
        super().__init__(session)
        self.documents = DocumentRepository(session)
        self.actions = ActionRepository(session)
        self.audit = AuditLogger(session)

    async def run(self, document_id: int, process: bool, user_id: Optional[int] = None) -> DocumentResponse:
        return await self.process_document(document_id, process, user_id)

    async def _load_document(self, document_id: int) -> Document:
        document = await self.documents.get_with_relations(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document with ID {document_id} not found")
        return document

    async def _reload(self, document: Document) -> DocumentResponse:
        self.session.expire(document)
        return document_response(await self._load_document(document.id))

    async def list_documents(
        self,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> DocumentListResponse:
        documents, total = await self.documents.list_documents(filters, limit=limit, offset=offset)
        return DocumentListResponse(
            items=[document_response(document) for document in documents],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def get_document(self, document_id: int, user_id: Optional[int]) -> DocumentResponse:
        """Return a document and record that the user viewed it.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        async with self.unit_of_work("record document view"):
            document = await self._load_document(document_id)
            await self.audit.log_view(document_id, user_id)

        return document_response(document)

    def missing_required_metadata(self, document: Document) -> Dict[str, str]:
        """Required form fields the document has no value for, with their messages."""
        metadata = document_metadata(document)
        missing: Dict[str, str] = {}
        for config in get_field_configs():
            if not config.required:
                continue
            value = getattr(metadata, config.id_path or config.name.value)
            if value is None or (isinstance(value, str) and not value.strip()):
                rule = next((r for r in config.validation if r.type == "required"), None)
                missing[config.name.value] = rule.message if rule else f"{config.label} is required"
        return missing

    async def process_document(
        self, document_id: int, process: bool, user_id: Optional[int]
    ) -> DocumentResponse:
        """Mark a document processed or unprocessed.

        Args:
            document_id: Document ID
            process: True to process, False to unprocess
            user_id: Acting user

        Returns:
            The refreshed document

        Raises:
            DocumentNotFoundError: If the document does not exist
            DocumentLockedError: If the document is in the trash
            MetadataValidationError: If required metadata is missing when processing
        """
        async with self.unit_of_work("change document processing state"):
            document = await self._load_document(document_id)
            if document.is_trashed:
                raise DocumentLockedError(f"Document {document_id} is in the trash")

            target = DocumentStatus.PROCESSED if process else DocumentStatus.UNPROCESSED
            if document.status == target:
                LOGGER.debug(
                    "Document already in requested state",
                    extra={"document_id": document_id, "status": target},
                )
                return document_response(document)

            if process and settings.metadata.require_metadata_for_processing:
                missing = self.missing_required_metadata(document)
                if missing:
                    raise MetadataValidationError(
                        missing, message="Required metadata is missing"
                    )

            document.status = target
            document.updated_by_id = user_id
            await self.session.flush()

            if process:
                await self.audit.log_process(document_id, user_id)
            else:
                await self.audit.log_unprocess(document_id, user_id)

        LOGGER.info(
            "Document processing state changed",
            extra={"document_id": document_id, "status": target, "user_id": user_id},
        )
        return await self._reload(document)

    async def trash_document(self, document_id: int, user_id: Optional[int]) -> DocumentResponse:
        async with self.unit_of_work("trash document"):
            document = await self._load_document(document_id)
            if document.is_trashed:
                return document_response(document)

            document.status = DocumentStatus.TRASHED
            document.trashed_at = datetime.now(timezone.utc)
            document.updated_by_id = user_id
            await self.session.flush()
            await self.audit.log_trash(document_id, user_id)

        LOGGER.info("Document trashed", extra={"document_id": document_id, "user_id": user_id})
        return await self._reload(document)

    async def restore_document(self, document_id: int, user_id: Optional[int]) -> DocumentResponse:
        """Bring a trashed document back as unprocessed."""
        async with self.unit_of_work("restore document"):
            document = await self._load_document(document_id)
            if not document.is_trashed:
                return document_response(document)

            document.status = DocumentStatus.UNPROCESSED
            document.trashed_at = None
            document.updated_by_id = user_id
            await self.session.flush()
            await self.audit.log_restore(document_id, user_id)

        LOGGER.info("Document restored", extra={"document_id": document_id, "user_id": user_id})
        return await self._reload(document)

    async def get_history(
        self,
        document_id: int,
        action_type: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> DocumentHistoryResponse:
        await self._load_document(document_id)
        actions, total = await self.actions.get_history(
            document_id, action_type=action_type, limit=limit, offset=offset
        )
        return DocumentHistoryResponse(
            items=[action_response(action) for action in actions],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def get_last_edited(self, document_id: int) -> LastEditedResponse:
        await self._load_document(document_id)
        action = await self.actions.get_last_of_type(document_id, DocumentActionType.EDIT.value)
        if action is None:
            return LastEditedResponse()
        return LastEditedResponse(user=user_ref(action.user), edited_at=action.created_at)

    async def get_action_types(self, document_id: int) -> List[str]:
        await self._load_document(document_id)
        return await self.actions.get_action_types(document_id)
