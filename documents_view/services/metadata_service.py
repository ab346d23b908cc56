"""Metadata service: reading, validating and updating document metadata."""

from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from documents_view.core.config import settings
from documents_view.core.exceptions import (
    DocumentLockedError,
    DocumentNotFoundError,
    MetadataValidationError,
)
from documents_view.database.models import Document
from documents_view.metadata.fields import get_field_config
from documents_view.metadata.models import MetadataFieldName
from documents_view.repositories.claimant_repository import ClaimantRepository
from documents_view.repositories.document_repository import DocumentRepository
from documents_view.repositories.loss_repository import LossRepository
from documents_view.repositories.policy_repository import PolicyRepository
from documents_view.repositories.producer_repository import ProducerRepository
from documents_view.repositories.user_repository import UserRepository
from documents_view.schemas.documents import DocumentResponse
from documents_view.schemas.metadata import (
    DocumentMetadataResponse,
    DocumentMetadataUpdateRequest,
    DropdownOption,
)
from documents_view.services.audit_logger import AuditLogger, ChangeSet
from documents_view.services.base_service import BaseService
from documents_view.services.serializers import document_metadata, document_response
from documents_view.utils.logging import get_logger

LOGGER = get_logger(__name__)

RELATIONSHIP_MESSAGES = {
    "policy_missing": "The selected policy does not exist.",
    "loss_missing": "The selected loss does not exist.",
    "claimant_missing": "The selected claimant does not exist.",
    "producer_missing": "The selected producer does not exist.",
    "user_missing": "The selected user does not exist.",
    "group_missing": "The selected user group does not exist.",
    "loss_required": "A loss must be selected when a claimant is specified.",
    "loss_not_in_policy": "The selected loss does not belong to the selected policy.",
    "claimant_not_in_loss": "The selected claimant does not belong to the selected loss.",
    "assignee_type_required": "An assignee type is required when an assignee is specified.",
}


def _label(field: MetadataFieldName) -> str:
    return get_field_config(field).label


def _option(id: Any, label: str, **metadata: Any) -> DropdownOption:
    return DropdownOption(id=id, value=id, label=label, metadata=metadata)


class MetadataService(BaseService):
    """Service for document metadata and the dropdown options behind it."""

    def __init__(self, session: AsyncSession):
        """Initialize metadata service.

        Args:
            session: Database session
        """
        super().__init__(session)
        self.documents = DocumentRepository(session)
        self.policies = PolicyRepository(session)
        self.losses = LossRepository(session)
        self.claimants = ClaimantRepository(session)
        self.producers = ProducerRepository(session)
        self.users = UserRepository(session)
        self.audit = AuditLogger(session)

    async def run(
        self,
        document_id: int,
        request: DocumentMetadataUpdateRequest,
        user_id: Optional[int] = None,
    ) -> DocumentResponse:
        return await self.update_document_metadata(document_id, request, user_id)

    async def _load_document(self, document_id: int) -> Document:
        document = await self.documents.get_with_relations(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document with ID {document_id} not found")
        return document

    async def get_document_metadata(self, document_id: int) -> DocumentMetadataResponse:
        """Return the metadata block of a document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        document = await self._load_document(document_id)
        return document_metadata(document)

    async def validate_metadata_relationships(
        self,
        request: DocumentMetadataUpdateRequest,
        document: Optional[Document] = None,
    ) -> Dict[str, str]:
        """Check referenced rows and the policy/loss/claimant chain.

        Identifiers omitted from the request fall back to the document's
        current links, so a partial update cannot break the chain.

        Args:
            request: Incoming update
            document: Document being updated, if any

        Returns:
            Mapping of request field to message; empty when consistent
        """
        data = request.sent_fields()
        errors: Dict[str, str] = {}

        def effective(name: str) -> Optional[int]:
            if name in data:
                return data[name]
            return getattr(document, name, None) if document is not None else None

        checks = (
            ("policy_id", self.policies, "policy_missing"),
            ("loss_id", self.losses, "loss_missing"),
            ("claimant_id", self.claimants, "claimant_missing"),
            ("producer_id", self.producers, "producer_missing"),
        )
        for name, repository, message_key in checks:
            if data.get(name) is not None and not await repository.exists(data[name]):
                errors[name] = RELATIONSHIP_MESSAGES[message_key]

        assigned_to_id = data.get("assigned_to_id")
        if assigned_to_id is not None:
            assigned_to_type = data.get("assigned_to_type")
            if assigned_to_type is None:
                errors["assigned_to_type"] = RELATIONSHIP_MESSAGES["assignee_type_required"]
            elif assigned_to_type == "user" and not await self.users.exists(assigned_to_id):
                errors["assigned_to_id"] = RELATIONSHIP_MESSAGES["user_missing"]
            elif assigned_to_type == "group" and await self.users.get_group_by_id(assigned_to_id) is None:
                errors["assigned_to_id"] = RELATIONSHIP_MESSAGES["group_missing"]

        policy_id = effective("policy_id")
        loss_id = effective("loss_id")
        claimant_id = effective("claimant_id")

        if claimant_id is not None and loss_id is None and "claimant_id" not in errors:
            errors["loss_id"] = RELATIONSHIP_MESSAGES["loss_required"]

        touches_policy_loss = "policy_id" in data or "loss_id" in data
        if (
            touches_policy_loss
            and policy_id is not None
            and loss_id is not None
            and "policy_id" not in errors
            and "loss_id" not in errors
            and not await self.policies.loss_belongs_to_policy(loss_id, policy_id)
        ):
            errors["loss_id"] = RELATIONSHIP_MESSAGES["loss_not_in_policy"]

        touches_loss_claimant = "loss_id" in data or "claimant_id" in data
        if (
            touches_loss_claimant
            and loss_id is not None
            and claimant_id is not None
            and "loss_id" not in errors
            and "claimant_id" not in errors
            and not await self.losses.claimant_belongs_to_loss(claimant_id, loss_id)
        ):
            errors["claimant_id"] = RELATIONSHIP_MESSAGES["claimant_not_in_loss"]

        return errors

    async def _track_changes(self, document: Document, data: Dict[str, Any]) -> ChangeSet:
        """Old and new display values of every link the update changes, by label."""
        changes: ChangeSet = {}

        if "policy_id" in data and data["policy_id"] != document.policy_id:
            new = await self.policies.get_by_id(data["policy_id"]) if data["policy_id"] is not None else None
            changes[_label(MetadataFieldName.POLICY_NUMBER)] = (
                document.policy.formatted_number if document.policy else None,
                new.formatted_number if new else None,
            )

        if "loss_id" in data and data["loss_id"] != document.loss_id:
            new = await self.losses.get_by_id(data["loss_id"]) if data["loss_id"] is not None else None
            changes[_label(MetadataFieldName.LOSS_SEQUENCE)] = (
                document.loss.display_name if document.loss else None,
                new.display_name if new else None,
            )

        if "claimant_id" in data and data["claimant_id"] != document.claimant_id:
            new = await self.claimants.get_by_id(data["claimant_id"]) if data["claimant_id"] is not None else None
            changes[_label(MetadataFieldName.CLAIMANT)] = (
                document.claimant.display_name if document.claimant else None,
                new.display_name if new else None,
            )

        if "producer_id" in data and data["producer_id"] != document.producer_id:
            new = await self.producers.get_by_id(data["producer_id"]) if data["producer_id"] is not None else None
            changes[_label(MetadataFieldName.PRODUCER_NUMBER)] = (
                document.producer.display_name if document.producer else None,
                new.display_name if new else None,
            )

        if "document_description" in data and data["document_description"] != document.description:
            changes[_label(MetadataFieldName.DOCUMENT_DESCRIPTION)] = (
                document.description,
                data["document_description"],
            )

        if "assigned_to_id" in data:
            current = document_metadata(document)
            new_type = data.get("assigned_to_type") if data["assigned_to_id"] is not None else None
            if (data["assigned_to_id"], new_type) != (current.assigned_to_id, current.assigned_to_type):
                new_label = None
                if new_type == "user":
                    user = await self.users.get_by_id(data["assigned_to_id"])
                    new_label = user.display_name if user else None
                elif new_type == "group":
                    group = await self.users.get_group_by_id(data["assigned_to_id"])
                    new_label = group.name if group else None
                changes[_label(MetadataFieldName.ASSIGNED_TO)] = (current.assigned_to, new_label)

        return changes

    @staticmethod
    def _apply(document: Document, data: Dict[str, Any]) -> None:
        for name in ("policy_id", "loss_id", "claimant_id", "producer_id"):
            if name in data:
                setattr(document, name, data[name])

        if "document_description" in data:
            document.description = data["document_description"]

        if "assigned_to_id" in data:
            assigned_to_id = data["assigned_to_id"]
            assigned_to_type = data.get("assigned_to_type")
            document.assigned_user_id = assigned_to_id if assigned_to_type == "user" else None
            document.assigned_group_id = assigned_to_id if assigned_to_type == "group" else None

    async def update_document_metadata(
        self,
        document_id: int,
        request: DocumentMetadataUpdateRequest,
        user_id: Optional[int],
    ) -> DocumentResponse:
        """Apply a partial metadata update atomically.

        Args:
            document_id: Document to update
            request: Fields to change; omitted fields are left untouched
            user_id: Acting user

        Returns:
            The refreshed document

        Raises:
            DocumentNotFoundError: If the document does not exist
            DocumentLockedError: If the document is processed or trashed
            MetadataValidationError: If the links are inconsistent
            DatabaseError: If the update cannot be committed
        """
        async with self.unit_of_work("update document metadata"):
            document = await self._load_document(document_id)

            if document.is_processed or document.is_trashed:
                LOGGER.warning(
                    "Attempted to update locked document",
                    extra={"document_id": document_id, "user_id": user_id, "status": document.status},
                )
                raise DocumentLockedError(
                    f"Document {document_id} is {document.status} and cannot be modified"
                )

            errors = await self.validate_metadata_relationships(request, document)
            if errors:
                LOGGER.info(
                    "Metadata update rejected",
                    extra={"document_id": document_id, "errors": errors},
                )
                raise MetadataValidationError(errors)

            data = request.sent_fields()
            changes = await self._track_changes(document, data)
            self._apply(document, data)
            document.updated_by_id = user_id
            await self.session.flush()

            if changes:
                await self.audit.log_edit(document_id, user_id, changes)

        LOGGER.info(
            "Document metadata updated",
            extra={"document_id": document_id, "user_id": user_id, "changed": list(changes)},
        )

        # Relations were loaded before the update; reload them.
        self.session.expire(document)
        refreshed = await self._load_document(document_id)
        return document_response(refreshed)

    async def get_policy_options(
        self,
        search: Optional[str] = None,
        producer_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[DropdownOption]:
        policies = await self.policies.search_options(
            search=search, producer_id=producer_id, limit=limit or settings.options_limit
        )
        return [_option(policy.id, policy.formatted_number) for policy in policies]

    async def get_loss_options(
        self, policy_id: int, search: Optional[str] = None, limit: Optional[int] = None
    ) -> List[DropdownOption]:
        losses = await self.losses.options_for_policy(
            policy_id, search=search, limit=limit or settings.options_limit
        )
        return [_option(loss.id, loss.display_name) for loss in losses]

    async def get_claimant_options(
        self, loss_id: int, search: Optional[str] = None, limit: Optional[int] = None
    ) -> List[DropdownOption]:
        claimants = await self.claimants.options_for_loss(
            loss_id, search=search, limit=limit or settings.options_limit
        )
        return [_option(claimant.id, claimant.display_name) for claimant in claimants]

    async def get_producer_options(
        self, search: Optional[str] = None, limit: Optional[int] = None
    ) -> List[DropdownOption]:
        producers = await self.producers.search_options(
            search=search, limit=limit or settings.options_limit
        )
        return [_option(producer.id, producer.display_name) for producer in producers]

    async def get_assignee_options(
        self,
        search: Optional[str] = None,
        type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[DropdownOption]:
        """Users and groups a document can be assigned to.

        Args:
            search: Text filter
            type: "user", "group" or None for both
            limit: Maximum rows per kind

        Returns:
            Options whose metadata carries the assignee ``type``
        """
        limit = limit or settings.options_limit
        options: List[DropdownOption] = []
        if type in (None, "user"):
            users = await self.users.search_users(search=search, limit=limit)
            options.extend(_option(user.id, user.display_name, type="user") for user in users)
        if type in (None, "group"):
            groups = await self.users.search_groups(search=search, limit=limit)
            options.extend(_option(group.id, group.name, type="group") for group in groups)
        return options

    def get_document_description_options(self) -> List[DropdownOption]:
        return [
            DropdownOption(id=index, value=description, label=description)
            for index, description in enumerate(settings.metadata.document_descriptions, start=1)
        ]
