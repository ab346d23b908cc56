"""Document, history and listing schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from documents_view.schemas.metadata import DocumentMetadataResponse


class DocumentUserRef(BaseModel):
    """Minimal user reference embedded in documents and history entries."""

    id: int
    username: str


class DocumentResponse(BaseModel):
    """Document snapshot with its nested metadata block."""

    id: int
    filename: str
    file_url: Optional[str] = None
    description: Optional[str] = None
    status: str
    is_processed: bool = False
    is_trashed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[DocumentUserRef] = None
    updated_by: Optional[DocumentUserRef] = None
    metadata: DocumentMetadataResponse = Field(default_factory=DocumentMetadataResponse)


class DocumentListResponse(BaseModel):
    """Page of documents."""

    items: List[DocumentResponse]
    total: int
    limit: int
    offset: int


class ProcessDocumentRequest(BaseModel):
    """Toggle the processed state of a document."""

    process: bool = Field(..., description="True to mark processed, False to unprocess")


class DocumentActionResponse(BaseModel):
    """History entry."""

    id: int
    document_id: int
    action_type: str
    description: str
    timestamp: datetime
    user: Optional[DocumentUserRef] = None


class DocumentHistoryResponse(BaseModel):
    """Page of history entries, newest first."""

    items: List[DocumentActionResponse]
    total: int
    limit: int
    offset: int


class LastEditedResponse(BaseModel):
    """Who last edited a document and when."""

    user: Optional[DocumentUserRef] = None
    edited_at: Optional[datetime] = None
