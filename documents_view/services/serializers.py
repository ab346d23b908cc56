"""ORM to schema conversion shared by the services."""

from typing import Optional

from documents_view.database.models import Document, DocumentAction, User
from documents_view.schemas.documents import DocumentActionResponse, DocumentResponse, DocumentUserRef
from documents_view.schemas.metadata import DocumentMetadataResponse


def user_ref(user: Optional[User]) -> Optional[DocumentUserRef]:
    if user is None:
        return None
    return DocumentUserRef(id=user.id, username=user.username)


def document_metadata(document: Document) -> DocumentMetadataResponse:
    """Build the metadata block from a document with relations loaded."""
    assigned_to = None
    assigned_to_id = None
    assigned_to_type = None
    if document.assigned_user_id is not None:
        assigned_to_id = document.assigned_user_id
        assigned_to_type = "user"
        assigned_to = document.assigned_user.display_name if document.assigned_user else None
    elif document.assigned_group_id is not None:
        assigned_to_id = document.assigned_group_id
        assigned_to_type = "group"
        assigned_to = document.assigned_group.name if document.assigned_group else None

    return DocumentMetadataResponse(
        policy_number=document.policy.formatted_number if document.policy else None,
        policy_id=document.policy_id,
        loss_sequence=document.loss.display_name if document.loss else None,
        loss_id=document.loss_id,
        claimant=document.claimant.display_name if document.claimant else None,
        claimant_id=document.claimant_id,
        document_description=document.description,
        assigned_to=assigned_to,
        assigned_to_id=assigned_to_id,
        assigned_to_type=assigned_to_type,
        producer_number=document.producer.display_name if document.producer else None,
        producer_id=document.producer_id,
    )


def document_response(document: Document) -> DocumentResponse:
    return DocumentResponse(
        id=document.id,
        filename=document.filename,
        file_url=document.file_path,
        description=document.description,
        status=document.status,
        is_processed=document.is_processed,
        is_trashed=document.is_trashed,
        created_at=document.created_at,
        updated_at=document.updated_at,
        created_by=user_ref(document.created_by),
        updated_by=user_ref(document.updated_by),
        metadata=document_metadata(document),
    )


def action_response(action: DocumentAction) -> DocumentActionResponse:
    return DocumentActionResponse(
        id=action.id,
        document_id=action.document_id,
        action_type=action.action_type,
        description=action.description,
        timestamp=action.created_at,
        user=user_ref(action.user),
    )
