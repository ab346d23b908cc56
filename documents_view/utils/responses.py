from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import HTTPException, Request, status as http_status

from documents_view.core.exceptions import (
    AppError,
    DatabaseError,
    DocumentLockedError,
    DocumentNotFoundError,
    MetadataValidationError,
    ValidationError,
)
from documents_view.schemas.common import ApiResponse, ErrorDetail, ResponseMeta

# exception type -> (status code, title); first match wins
ERROR_STATUS_MAP = (
    (DocumentNotFoundError, http_status.HTTP_404_NOT_FOUND, "Document Not Found"),
    (DocumentLockedError, http_status.HTTP_409_CONFLICT, "Document Locked"),
    (MetadataValidationError, http_status.HTTP_422_UNPROCESSABLE_ENTITY, "Metadata Validation Failed"),
    (ValidationError, http_status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation Error"),
    (DatabaseError, http_status.HTTP_500_INTERNAL_SERVER_ERROR, "Database Error"),
)


def _request_id(request: Optional[Request]) -> str:
    if request and hasattr(request.state, "request_id"):
        return request.state.request_id
    return str(uuid4())


def create_api_response(
    data: Any,
    message: str = "Operation successful",
    status: bool = True,
    request: Optional[Request] = None,
    api_version: str = "v1"
) -> Dict[str, Any]:
    """Create a standardized API response as a dictionary.

    Returns a dict to be compatible with FastAPI's response_model=dict.
    """
    meta = ResponseMeta(
        timestamp=datetime.now(timezone.utc),
        request_id=_request_id(request),
        api_version=api_version
    )

    # Ensure data is a dict as expected by ApiResponse
    data_dict: Dict[str, Any] = {}
    if isinstance(data, dict):
        data_dict = data
    elif hasattr(data, "model_dump"):
        data_dict = data.model_dump(mode="json")
    elif isinstance(data, list):
        data_dict = {"items": [item.model_dump(mode="json") if hasattr(item, "model_dump") else item for item in data]}
    elif data is None:
        data_dict = {}
    else:
        data_dict = {"value": data}

    response = ApiResponse(
        status=status,
        message=message,
        data=data_dict,
        meta=meta
    )
    return response.model_dump(mode="json")


def create_error_detail(
    title: str,
    status: int,
    detail: str,
    request: Optional[Request] = None,
    instance: Optional[str] = None,
    errors: Optional[Dict[str, str]] = None,
) -> ErrorDetail:
    """Create a standardized error detail (RFC 7807)."""
    return ErrorDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance or (request.url.path if request else None),
        request_id=_request_id(request),
        timestamp=datetime.now(timezone.utc),
        errors=errors,
    )


def http_exception_from_error(error: AppError, request: Optional[Request] = None) -> HTTPException:
    """Translate a domain error into an HTTPException carrying an ErrorDetail."""
    status_code, title = http_status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error"
    for error_type, mapped_status, mapped_title in ERROR_STATUS_MAP:
        if isinstance(error, error_type):
            status_code, title = mapped_status, mapped_title
            break

    error_detail = create_error_detail(
        title=title,
        status=status_code,
        detail=str(error),
        request=request,
        errors=getattr(error, "errors", None),
    )
    return HTTPException(status_code=status_code, detail=error_detail.model_dump(mode="json"))
