"""Conversions between form values and API payloads."""

from documents_view.metadata.models import DocumentMetadata
from documents_view.schemas.metadata import DocumentMetadataResponse, DocumentMetadataUpdateRequest


def map_metadata_to_api_request(metadata: DocumentMetadata) -> DocumentMetadataUpdateRequest:
    """Build the update payload; every identifier is sent, including nulls."""
    return DocumentMetadataUpdateRequest(
        policy_id=metadata.policy_id,
        loss_id=metadata.loss_id,
        claimant_id=metadata.claimant_id,
        document_description=metadata.document_description,
        assigned_to_id=metadata.assigned_to_id,
        assigned_to_type=metadata.assigned_to_type,
        producer_id=metadata.producer_id,
    )


def map_api_response_to_metadata(response: DocumentMetadataResponse) -> DocumentMetadata:
    return DocumentMetadata(**response.model_dump())


def map_metadata_to_api_response(metadata: DocumentMetadata) -> DocumentMetadataResponse:
    return DocumentMetadataResponse(**metadata.model_dump())


def get_initial_metadata() -> DocumentMetadata:
    return DocumentMetadata()
