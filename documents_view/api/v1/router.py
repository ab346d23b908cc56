from fastapi import APIRouter

from documents_view.api.v1.endpoints import documents, metadata

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(documents.router, prefix="/documents", tags=["Documents"])
api_router.include_router(metadata.router, prefix="/metadata", tags=["Metadata"])

__all__ = ["api_router"]
