"""Wire schemas for document metadata and dropdown options."""

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field

AssigneeType = Literal["user", "group"]


class DropdownOption(BaseModel):
    """Single entry of a metadata dropdown."""

    id: Union[int, str]
    label: str
    value: Union[int, str]
    metadata: Dict[str, Any] = Field(default_factory=dict)


class DocumentMetadataResponse(BaseModel):
    """Metadata block of a document as returned by the API (snake_case)."""

    policy_number: Optional[str] = None
    policy_id: Optional[int] = None
    loss_sequence: Optional[str] = None
    loss_id: Optional[int] = None
    claimant: Optional[str] = None
    claimant_id: Optional[int] = None
    document_description: Optional[str] = None
    assigned_to: Optional[str] = None
    assigned_to_id: Optional[int] = None
    assigned_to_type: Optional[AssigneeType] = None
    producer_number: Optional[str] = None
    producer_id: Optional[int] = None


class DocumentMetadataUpdateRequest(BaseModel):
    """Partial metadata update.

    Only fields that were explicitly sent are applied; an explicit ``null``
    clears the link.
    """

    policy_id: Optional[int] = None
    loss_id: Optional[int] = None
    claimant_id: Optional[int] = None
    document_description: Optional[str] = Field(default=None, max_length=255)
    assigned_to_id: Optional[int] = None
    assigned_to_type: Optional[AssigneeType] = None
    producer_id: Optional[int] = None

    def sent_fields(self) -> Dict[str, Any]:
        """Return only the fields present in the request body."""
        return self.model_dump(exclude_unset=True)

    class Config:
        json_schema_extra = {
            "example": {
                "policy_id": 12,
                "loss_id": 3,
                "claimant_id": None,
                "document_description": "Proof of Loss",
                "assigned_to_id": 7,
                "assigned_to_type": "user",
                "producer_id": 4,
            }
        }
