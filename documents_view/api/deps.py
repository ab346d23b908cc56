"""Dependency factories for the API routers."""

from typing import Annotated, Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from documents_view.core.database import get_async_session
from documents_view.services.document_service import DocumentService
from documents_view.services.metadata_service import MetadataService


async def get_current_user_id(
    x_user_id: Annotated[Optional[int], Header(description="Acting user, set by the gateway")] = None,
) -> Optional[int]:
    """Return the acting user's id forwarded in the ``X-User-Id`` header."""
    return x_user_id


async def get_document_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> DocumentService:
    """Get document service instance.

    Args:
        db_session: Database session from dependency injection

    Returns:
        DocumentService: Service for document lifecycle and history
    """
    return DocumentService(db_session)


async def get_metadata_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> MetadataService:
    """Get metadata service instance.

    Args:
        db_session: Database session from dependency injection

    Returns:
        MetadataService: Service for document metadata and dropdown options
    """
    return MetadataService(db_session)
