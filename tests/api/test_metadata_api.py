"""API tests for the metadata endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from documents_view.api.deps import get_metadata_service
from documents_view.core.exceptions import DocumentLockedError, MetadataValidationError
from documents_view.main import app
from documents_view.schemas.metadata import DocumentMetadataResponse, DropdownOption


@pytest.fixture
def metadata_service():
    service = AsyncMock()
    service.get_document_description_options = MagicMock()
    app.dependency_overrides[get_metadata_service] = lambda: service
    return service


class TestMetadataEndpoints:

    def test_get_metadata(self, test_client, metadata_service, complete_metadata):
        metadata_service.get_document_metadata.return_value = DocumentMetadataResponse(
            **complete_metadata.model_dump()
        )

        response = test_client.get("/api/v1/metadata/documents/1")

        assert response.status_code == 200
        assert response.json()["data"]["loss_sequence"] == "1 - Vehicle Accident"

    def test_partial_update_keeps_explicit_nulls(
        self, test_client, metadata_service, document_response_factory
    ):
        metadata_service.execute.return_value = document_response_factory()

        response = test_client.put(
            "/api/v1/metadata/documents/1",
            json={"loss_id": None, "document_description": "Proof of Loss"},
            headers={"X-User-Id": "5"},
        )

        assert response.status_code == 200
        document_id, payload, user_id = metadata_service.execute.await_args.args
        assert (document_id, user_id) == (1, 5)
        assert payload.sent_fields() == {"loss_id": None, "document_description": "Proof of Loss"}

    def test_update_rejected_relationships(self, test_client, metadata_service):
        metadata_service.execute.side_effect = MetadataValidationError(
            {"loss_id": "The selected loss does not belong to the selected policy."}
        )

        response = test_client.put("/api/v1/metadata/documents/1", json={"loss_id": 11})

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["title"] == "Metadata Validation Failed"
        assert detail["errors"]["loss_id"].startswith("The selected loss")

    def test_update_locked_document(self, test_client, metadata_service):
        metadata_service.execute.side_effect = DocumentLockedError(
            "Document 1 is processed and cannot be modified"
        )

        response = test_client.put("/api/v1/metadata/documents/1", json={"policy_id": 2})

        assert response.status_code == 409

    def test_invalid_assignee_type(self, test_client, metadata_service):
        response = test_client.put(
            "/api/v1/metadata/documents/1", json={"assigned_to_id": 3, "assigned_to_type": "team"}
        )

        assert response.status_code == 422
        metadata_service.execute.assert_not_awaited()


class TestOptionsEndpoints:

    def test_policy_options(self, test_client, metadata_service):
        metadata_service.get_policy_options.return_value = [
            DropdownOption(id=1, value=1, label="PLCY-12345")
        ]

        response = test_client.get("/api/v1/metadata/options/policies", params={"producer_id": 4})

        assert response.json()["data"]["items"][0]["label"] == "PLCY-12345"
        metadata_service.get_policy_options.assert_awaited_once_with(
            search=None, producer_id=4, limit=None
        )

    def test_loss_and_claimant_options(self, test_client, metadata_service):
        metadata_service.get_loss_options.return_value = []
        metadata_service.get_claimant_options.return_value = []

        losses = test_client.get("/api/v1/metadata/options/losses/1", params={"search": "Fire"})
        claimants = test_client.get("/api/v1/metadata/options/claimants/10")

        assert losses.json()["data"] == {"items": []}
        assert claimants.status_code == 200
        metadata_service.get_loss_options.assert_awaited_once_with(1, search="Fire", limit=None)
        metadata_service.get_claimant_options.assert_awaited_once_with(10, search=None, limit=None)

    def test_producer_options(self, test_client, metadata_service):
        metadata_service.get_producer_options.return_value = [
            DropdownOption(id=4, value=4, label="AG-789456")
        ]

        response = test_client.get("/api/v1/metadata/options/producers")

        assert response.json()["data"]["items"][0]["value"] == 4

    def test_assignee_options(self, test_client, metadata_service):
        metadata_service.get_assignee_options.return_value = [
            DropdownOption(id=3, value=3, label="Claims Team", metadata={"type": "group"})
        ]

        response = test_client.get("/api/v1/metadata/options/assignees", params={"type": "group"})

        assert response.json()["data"]["items"][0]["metadata"] == {"type": "group"}
        metadata_service.get_assignee_options.assert_awaited_once_with(
            search=None, type="group", limit=None
        )

    def test_document_description_options(self, test_client, metadata_service):
        metadata_service.get_document_description_options.return_value = [
            DropdownOption(id=1, value="Proof of Loss", label="Proof of Loss")
        ]

        response = test_client.get("/api/v1/metadata/options/document-descriptions")

        assert response.json()["data"]["items"] == [
            {"id": 1, "value": "Proof of Loss", "label": "Proof of Loss", "metadata": {}}
        ]
