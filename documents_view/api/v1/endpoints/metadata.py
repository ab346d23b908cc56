from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request

from documents_view.api.deps import get_current_user_id, get_metadata_service
from documents_view.core.exceptions import AppError
from documents_view.schemas.common import ApiResponse
from documents_view.schemas.metadata import DocumentMetadataUpdateRequest
from documents_view.services.metadata_service import MetadataService
from documents_view.utils.logging import get_logger
from documents_view.utils.responses import create_api_response, http_exception_from_error

LOGGER = get_logger(__name__)

router = APIRouter()

MetadataServiceDep = Annotated[MetadataService, Depends(get_metadata_service)]


@router.get(
    "/documents/{document_id}",
    response_model=ApiResponse,
    summary="Get document metadata",
    operation_id="get_document_metadata",
)
async def get_document_metadata(
    request: Request,
    document_id: int,
    metadata_service: MetadataServiceDep = None,
) -> ApiResponse:
    try:
        metadata = await metadata_service.get_document_metadata(document_id)
    except AppError as e:
        raise http_exception_from_error(e, request)

    return create_api_response(
        data=metadata,
        message="Document metadata retrieved successfully",
        request=request
    )


@router.put(
    "/documents/{document_id}",
    response_model=ApiResponse,
    summary="Update document metadata",
    operation_id="update_document_metadata",
)
async def update_document_metadata(
    request: Request,
    document_id: int,
    payload: DocumentMetadataUpdateRequest,
    user_id: Annotated[Optional[int], Depends(get_current_user_id)] = None,
    metadata_service: MetadataServiceDep = None,
) -> ApiResponse:
    """Apply a partial update; only fields present in the body change."""
    try:
        document = await metadata_service.execute(document_id, payload, user_id)
    except AppError as e:
        raise http_exception_from_error(e, request)

    return create_api_response(
        data=document,
        message="Document metadata updated successfully",
        request=request
    )


@router.get(
    "/options/policies",
    response_model=ApiResponse,
    summary="Policy options",
    operation_id="get_policy_options",
)
async def get_policy_options(
    request: Request,
    search: Optional[str] = Query(None),
    producer_id: Optional[int] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=200),
    metadata_service: MetadataServiceDep = None,
) -> ApiResponse:
    options = await metadata_service.get_policy_options(
        search=search, producer_id=producer_id, limit=limit
    )
    return create_api_response(data=options, message="Policy options retrieved", request=request)


@router.get(
    "/options/losses/{policy_id}",
    response_model=ApiResponse,
    summary="Loss options for a policy",
    operation_id="get_loss_options",
)
async def get_loss_options(
    request: Request,
    policy_id: int,
    search: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=200),
    metadata_service: MetadataServiceDep = None,
) -> ApiResponse:
    options = await metadata_service.get_loss_options(policy_id, search=search, limit=limit)
    return create_api_response(data=options, message="Loss options retrieved", request=request)


@router.get(
    "/options/claimants/{loss_id}",
    response_model=ApiResponse,
    summary="Claimant options for a loss",
    operation_id="get_claimant_options",
)
async def get_claimant_options(
    request: Request,
    loss_id: int,
    search: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=200),
    metadata_service: MetadataServiceDep = None,
) -> ApiResponse:
    options = await metadata_service.get_claimant_options(loss_id, search=search, limit=limit)
    return create_api_response(data=options, message="Claimant options retrieved", request=request)


@router.get(
    "/options/producers",
    response_model=ApiResponse,
    summary="Producer options",
    operation_id="get_producer_options",
)
async def get_producer_options(
    request: Request,
    search: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=200),
    metadata_service: MetadataServiceDep = None,
) -> ApiResponse:
    options = await metadata_service.get_producer_options(search=search, limit=limit)
    return create_api_response(data=options, message="Producer options retrieved", request=request)


@router.get(
    "/options/assignees",
    response_model=ApiResponse,
    summary="User and group options for assignment",
    operation_id="get_assignee_options",
)
async def get_assignee_options(
    request: Request,
    search: Optional[str] = Query(None),
    type: Optional[Literal["user", "group"]] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=200),
    metadata_service: MetadataServiceDep = None,
) -> ApiResponse:
    options = await metadata_service.get_assignee_options(search=search, type=type, limit=limit)
    return create_api_response(data=options, message="Assignee options retrieved", request=request)


@router.get(
    "/options/document-descriptions",
    response_model=ApiResponse,
    summary="Document description options",
    operation_id="get_document_description_options",
)
async def get_document_description_options(
    request: Request,
    metadata_service: MetadataServiceDep = None,
) -> ApiResponse:
    options = metadata_service.get_document_description_options()
    return create_api_response(
        data=options, message="Document description options retrieved", request=request
    )
