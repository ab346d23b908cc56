from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request

from documents_view.api.deps import get_current_user_id, get_document_service
from documents_view.core.exceptions import AppError
from documents_view.schemas.common import ApiResponse
from documents_view.schemas.documents import ProcessDocumentRequest
from documents_view.services.document_service import DocumentService
from documents_view.utils.logging import get_logger
from documents_view.utils.responses import create_api_response, http_exception_from_error

LOGGER = get_logger(__name__)

router = APIRouter()


@router.get(
    "/",
    response_model=ApiResponse,
    summary="List documents",
    operation_id="list_documents",
)
async def list_documents(
    request: Request,
    status: Optional[str] = Query(None, description="unprocessed, processed or trashed"),
    policy_id: Optional[int] = Query(None),
    loss_id: Optional[int] = Query(None),
    claimant_id: Optional[int] = Query(None),
    producer_id: Optional[int] = Query(None),
    assigned_user_id: Optional[int] = Query(None),
    assigned_group_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    """List documents, newest first. Trashed documents need ``status=trashed``."""
    filters = {
        "status": status,
        "policy_id": policy_id,
        "loss_id": loss_id,
        "claimant_id": claimant_id,
        "producer_id": producer_id,
        "assigned_user_id": assigned_user_id,
        "assigned_group_id": assigned_group_id,
        "search": search,
    }
    documents = await document_service.list_documents(filters, limit=limit, offset=offset)

    return create_api_response(
        data=documents,
        message="Documents retrieved successfully",
        request=request
    )


@router.get(
    "/{document_id}",
    response_model=ApiResponse,
    summary="Get document details",
    operation_id="get_document",
)
async def get_document(
    request: Request,
    document_id: int,
    user_id: Annotated[Optional[int], Depends(get_current_user_id)] = None,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    """Retrieve a document with its metadata and record the view."""
    try:
        document = await document_service.get_document(document_id, user_id)
    except AppError as e:
        raise http_exception_from_error(e, request)

    return create_api_response(
        data=document,
        message="Document details retrieved successfully",
        request=request
    )


@router.post(
    "/{document_id}/process",
    response_model=ApiResponse,
    summary="Mark document processed or unprocessed",
    operation_id="process_document",
)
async def process_document(
    request: Request,
    document_id: int,
    payload: ProcessDocumentRequest,
    user_id: Annotated[Optional[int], Depends(get_current_user_id)] = None,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    try:
        document = await document_service.execute(document_id, payload.process, user_id)
    except AppError as e:
        raise http_exception_from_error(e, request)

    return create_api_response(
        data=document,
        message="Document marked as processed" if payload.process else "Document marked as unprocessed",
        request=request
    )


@router.post(
    "/{document_id}/trash",
    response_model=ApiResponse,
    summary="Move document to trash",
    operation_id="trash_document",
)
async def trash_document(
    request: Request,
    document_id: int,
    user_id: Annotated[Optional[int], Depends(get_current_user_id)] = None,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    try:
        document = await document_service.trash_document(document_id, user_id)
    except AppError as e:
        raise http_exception_from_error(e, request)

    return create_api_response(
        data=document,
        message="Document moved to trash",
        request=request
    )


@router.post(
    "/{document_id}/restore",
    response_model=ApiResponse,
    summary="Restore document from trash",
    operation_id="restore_document",
)
async def restore_document(
    request: Request,
    document_id: int,
    user_id: Annotated[Optional[int], Depends(get_current_user_id)] = None,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    try:
        document = await document_service.restore_document(document_id, user_id)
    except AppError as e:
        raise http_exception_from_error(e, request)

    return create_api_response(
        data=document,
        message="Document restored",
        request=request
    )


@router.get(
    "/{document_id}/history",
    response_model=ApiResponse,
    summary="Get document history",
    operation_id="get_document_history",
)
async def get_document_history(
    request: Request,
    document_id: int,
    action_type: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    """History entries of a document, newest first."""
    try:
        history = await document_service.get_history(
            document_id, action_type=action_type, limit=limit, offset=offset
        )
    except AppError as e:
        raise http_exception_from_error(e, request)

    return create_api_response(
        data=history,
        message="Document history retrieved successfully",
        request=request
    )


@router.get(
    "/{document_id}/history/last-edited",
    response_model=ApiResponse,
    summary="Get last edit of a document",
    operation_id="get_document_last_edited",
)
async def get_last_edited(
    request: Request,
    document_id: int,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    try:
        last_edited = await document_service.get_last_edited(document_id)
    except AppError as e:
        raise http_exception_from_error(e, request)

    return create_api_response(
        data=last_edited,
        message="Last edit retrieved successfully",
        request=request
    )


@router.get(
    "/{document_id}/history/action-types",
    response_model=ApiResponse,
    summary="List action types in a document's history",
    operation_id="get_document_action_types",
)
async def get_action_types(
    request: Request,
    document_id: int,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    try:
        action_types = await document_service.get_action_types(document_id)
    except AppError as e:
        raise http_exception_from_error(e, request)

    return create_api_response(
        data={"action_types": action_types},
        message="Action types retrieved successfully",
        request=request
    )
