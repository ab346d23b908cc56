"""HTTP client for the documents API.

Serves the metadata form as both its options provider and its saver.
"""

from typing import Any, Dict, List, Optional

import httpx
from httpx import HTTPStatusError, TimeoutException

from documents_view.core.config import settings
from documents_view.core.exceptions import APIClientError, APITimeoutError
from documents_view.metadata.models import DocumentMetadata, MetadataFieldName
from documents_view.schemas.documents import DocumentResponse
from documents_view.schemas.metadata import DocumentMetadataUpdateRequest, DropdownOption
from documents_view.utils.logging import get_logger

LOGGER = get_logger(__name__)

OPTION_PATHS = {
    MetadataFieldName.POLICY_NUMBER: "/metadata/options/policies",
    MetadataFieldName.LOSS_SEQUENCE: "/metadata/options/losses/{policy_id}",
    MetadataFieldName.CLAIMANT: "/metadata/options/claimants/{loss_id}",
    MetadataFieldName.DOCUMENT_DESCRIPTION: "/metadata/options/document-descriptions",
    MetadataFieldName.ASSIGNED_TO: "/metadata/options/assignees",
    MetadataFieldName.PRODUCER_NUMBER: "/metadata/options/producers",
}


class DocumentsApiClient:
    """Async client over ``httpx.AsyncClient``.

    Errors are not retried; callers decide how to surface them.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        user_id: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root including the version prefix; defaults to settings
            timeout: Request timeout in seconds; defaults to settings
            user_id: Acting user forwarded in ``X-User-Id``
            transport: Custom transport, e.g. ``httpx.MockTransport`` in tests
        """
        headers = {"Accept": "application/json"}
        if user_id is not None:
            headers["X-User-Id"] = str(user_id)

        self.base_url = base_url or settings.client.api_base_url
        self.timeout = timeout or settings.client.http_timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=headers,
            transport=transport,
        )

    async def __aenter__(self) -> "DocumentsApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send a request and unwrap the response envelope.

        Returns:
            The ``data`` member of the envelope

        Raises:
            APITimeoutError: If the request times out
            APIClientError: On HTTP error status or transport failure
        """
        try:
            response = await self._client.request(method, path, params=params, json=json)
            response.raise_for_status()
            return response.json().get("data") or {}

        except TimeoutException as e:
            LOGGER.error(
                "Documents API request timed out",
                extra={"method": method, "path": path, "timeout": self.timeout},
            )
            raise APITimeoutError(f"Request to {path} timed out", original_error=e)

        except HTTPStatusError as e:
            status_code = e.response.status_code
            message = self._error_message(e.response)
            LOGGER.warning(
                "Documents API returned an error",
                extra={"method": method, "path": path, "status_code": status_code},
            )
            raise APIClientError(message, status_code=status_code, original_error=e)

        except httpx.HTTPError as e:
            LOGGER.error(
                "Documents API request failed",
                exc_info=True,
                extra={"method": method, "path": path},
            )
            raise APIClientError(f"Request to {path} failed: {str(e)}", original_error=e)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"

        detail = body.get("detail") if isinstance(body, dict) else None
        if isinstance(detail, dict):
            return detail.get("detail") or detail.get("title") or f"HTTP {response.status_code}"
        if isinstance(detail, str):
            return detail
        return f"HTTP {response.status_code}"

    async def get_document(self, document_id: int) -> DocumentResponse:
        data = await self._request("GET", f"/documents/{document_id}")
        return DocumentResponse.model_validate(data)

    async def update_metadata(
        self, document_id: int, payload: DocumentMetadataUpdateRequest
    ) -> DocumentResponse:
        """Send a metadata update; only fields set on ``payload`` are sent."""
        data = await self._request(
            "PUT",
            f"/metadata/documents/{document_id}",
            json=payload.model_dump(mode="json", exclude_unset=True),
        )
        return DocumentResponse.model_validate(data)

    async def get_metadata_options(
        self, field: MetadataFieldName, context: DocumentMetadata
    ) -> List[DropdownOption]:
        """Options for ``field`` scoped by the parent values in ``context``.

        Dependent fields without a parent id return an empty list without a
        request.
        """
        params: Dict[str, Any] = {}
        if field == MetadataFieldName.LOSS_SEQUENCE:
            if context.policy_id is None:
                return []
            path = OPTION_PATHS[field].format(policy_id=context.policy_id)
        elif field == MetadataFieldName.CLAIMANT:
            if context.loss_id is None:
                return []
            path = OPTION_PATHS[field].format(loss_id=context.loss_id)
        elif field == MetadataFieldName.POLICY_NUMBER:
            path = OPTION_PATHS[field]
            if context.producer_id is not None:
                params["producer_id"] = context.producer_id
        elif field in OPTION_PATHS:
            path = OPTION_PATHS[field]
        else:
            return []

        data = await self._request("GET", path, params=params or None)
        return [DropdownOption.model_validate(item) for item in data.get("items", [])]
