"""Tests for the metadata service."""

from unittest.mock import AsyncMock

import pytest

from documents_view.core.config import settings
from documents_view.core.exceptions import (
    AppError,
    DocumentLockedError,
    DocumentNotFoundError,
    MetadataValidationError,
)
from documents_view.database.models import DocumentStatus, Policy, User, UserGroup
from documents_view.schemas.metadata import DocumentMetadataUpdateRequest
from documents_view.services.metadata_service import RELATIONSHIP_MESSAGES, MetadataService


@pytest.fixture
def service(mock_session, make_document):
    service = MetadataService(mock_session)
    service.documents = AsyncMock()
    service.documents.get_with_relations.return_value = make_document()
    service.policies = AsyncMock()
    service.losses = AsyncMock()
    service.claimants = AsyncMock()
    service.producers = AsyncMock()
    service.users = AsyncMock()
    service.audit = AsyncMock()
    return service


class TestGetDocumentMetadata:

    @pytest.mark.asyncio
    async def test_returns_display_values(self, service):
        metadata = await service.get_document_metadata(1)

        assert metadata.policy_number == "PLCY-12345"
        assert metadata.loss_sequence == "1 - Vehicle Accident"
        assert metadata.claimant == "1 - John Smith"
        assert metadata.producer_number == "AG-789456"
        assert metadata.assigned_to == "Jane Adjuster"
        assert metadata.assigned_to_type == "user"

    @pytest.mark.asyncio
    async def test_missing_document(self, service):
        service.documents.get_with_relations.return_value = None

        with pytest.raises(DocumentNotFoundError):
            await service.get_document_metadata(404)


class TestValidateMetadataRelationships:

    @pytest.mark.asyncio
    async def test_unknown_policy(self, service):
        service.policies.exists.return_value = False
        request = DocumentMetadataUpdateRequest(policy_id=99)

        errors = await service.validate_metadata_relationships(request)

        assert errors == {"policy_id": RELATIONSHIP_MESSAGES["policy_missing"]}

    @pytest.mark.asyncio
    async def test_loss_outside_policy(self, service, make_document):
        service.losses.exists.return_value = True
        service.policies.loss_belongs_to_policy.return_value = False
        request = DocumentMetadataUpdateRequest(loss_id=11)

        errors = await service.validate_metadata_relationships(request, make_document(claimant_id=None))

        assert errors == {"loss_id": RELATIONSHIP_MESSAGES["loss_not_in_policy"]}
        service.policies.loss_belongs_to_policy.assert_awaited_once_with(11, 1)

    @pytest.mark.asyncio
    async def test_claimant_needs_loss(self, service, make_document):
        request = DocumentMetadataUpdateRequest(loss_id=None)

        errors = await service.validate_metadata_relationships(request, make_document())

        assert errors == {"loss_id": RELATIONSHIP_MESSAGES["loss_required"]}

    @pytest.mark.asyncio
    async def test_claimant_outside_loss(self, service, make_document):
        service.claimants.exists.return_value = True
        service.losses.claimant_belongs_to_loss.return_value = False
        request = DocumentMetadataUpdateRequest(claimant_id=200)

        errors = await service.validate_metadata_relationships(request, make_document())

        assert errors == {"claimant_id": RELATIONSHIP_MESSAGES["claimant_not_in_loss"]}

    @pytest.mark.asyncio
    async def test_untouched_chain_is_not_rechecked(self, service, make_document):
        request = DocumentMetadataUpdateRequest(document_description="Correspondence")

        errors = await service.validate_metadata_relationships(request, make_document())

        assert errors == {}
        service.policies.loss_belongs_to_policy.assert_not_awaited()
        service.losses.claimant_belongs_to_loss.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_assignee_requires_type(self, service):
        request = DocumentMetadataUpdateRequest(assigned_to_id=3)

        errors = await service.validate_metadata_relationships(request)

        assert errors == {"assigned_to_type": RELATIONSHIP_MESSAGES["assignee_type_required"]}

    @pytest.mark.asyncio
    async def test_unknown_group(self, service):
        service.users.get_group_by_id.return_value = None
        request = DocumentMetadataUpdateRequest(assigned_to_id=3, assigned_to_type="group")

        errors = await service.validate_metadata_relationships(request)

        assert errors == {"assigned_to_id": RELATIONSHIP_MESSAGES["group_missing"]}

    @pytest.mark.asyncio
    async def test_unknown_user(self, service):
        service.users.exists.return_value = False
        request = DocumentMetadataUpdateRequest(assigned_to_id=3, assigned_to_type="user")

        errors = await service.validate_metadata_relationships(request)

        assert errors == {"assigned_to_id": RELATIONSHIP_MESSAGES["user_missing"]}


class TestUpdateDocumentMetadata:

    @pytest.mark.asyncio
    async def test_description_update_is_audited(self, service, mock_session):
        request = DocumentMetadataUpdateRequest(document_description="Medical Records")

        response = await service.update_document_metadata(1, request, user_id=5)

        assert response.description == "Medical Records"
        assert response.metadata.document_description == "Medical Records"
        service.audit.log_edit.assert_awaited_once_with(
            1, 5, {"Document Description": ("Proof of Loss", "Medical Records")}
        )
        mock_session.flush.assert_awaited()
        mock_session.commit.assert_awaited_once()
        mock_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_policy_change_records_display_values(self, service, make_document):
        document = make_document(loss_id=None, claimant_id=None)
        service.documents.get_with_relations.return_value = document
        service.policies.exists.return_value = True
        service.policies.get_by_id.return_value = Policy(id=2, prefix="PLCY", number="67890")
        request = DocumentMetadataUpdateRequest(policy_id=2)

        await service.update_document_metadata(1, request, user_id=5)

        assert document.policy_id == 2
        assert document.updated_by_id == 5
        service.audit.log_edit.assert_awaited_once_with(
            1, 5, {"Policy Number": ("PLCY-12345", "PLCY-67890")}
        )

    @pytest.mark.asyncio
    async def test_reassign_to_group(self, service, make_document):
        document = make_document()
        service.documents.get_with_relations.return_value = document
        service.users.get_group_by_id.return_value = UserGroup(id=3, name="Claims Team")
        request = DocumentMetadataUpdateRequest(assigned_to_id=3, assigned_to_type="group")

        await service.update_document_metadata(1, request, user_id=5)

        assert document.assigned_user_id is None
        assert document.assigned_group_id == 3
        service.audit.log_edit.assert_awaited_once_with(
            1, 5, {"Assigned To": ("Jane Adjuster", "Claims Team")}
        )

    @pytest.mark.asyncio
    async def test_unchanged_values_skip_audit(self, service):
        request = DocumentMetadataUpdateRequest(document_description="Proof of Loss")

        await service.update_document_metadata(1, request, user_id=5)

        service.audit.log_edit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_processed_document_is_locked(self, service, make_document, mock_session):
        service.documents.get_with_relations.return_value = make_document(status=DocumentStatus.PROCESSED)
        request = DocumentMetadataUpdateRequest(document_description="Medical Records")

        with pytest.raises(DocumentLockedError):
            await service.update_document_metadata(1, request, user_id=5)

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_links_roll_back(self, service, make_document, mock_session):
        document = make_document()
        service.documents.get_with_relations.return_value = document
        service.policies.exists.return_value = False
        request = DocumentMetadataUpdateRequest(policy_id=99)

        with pytest.raises(MetadataValidationError) as exc_info:
            await service.update_document_metadata(1, request, user_id=5)

        assert exc_info.value.errors == {"policy_id": RELATIONSHIP_MESSAGES["policy_missing"]}
        assert document.policy_id == 1
        mock_session.rollback.assert_awaited_once()
        service.audit.log_edit.assert_not_awaited()


class TestOptions:

    @pytest.mark.asyncio
    async def test_policy_options_filtered_by_producer(self, service):
        service.policies.search_options.return_value = [Policy(id=1, prefix="PLCY", number="12345")]

        options = await service.get_policy_options(search="PLCY", producer_id=4)

        assert [(o.id, o.label) for o in options] == [(1, "PLCY-12345")]
        service.policies.search_options.assert_awaited_once_with(
            search="PLCY", producer_id=4, limit=settings.options_limit
        )

    @pytest.mark.asyncio
    async def test_assignee_options_tag_type(self, service):
        service.users.search_users.return_value = [User(id=7, username="jadjuster", full_name="Jane Adjuster")]
        service.users.search_groups.return_value = [UserGroup(id=3, name="Claims Team")]

        options = await service.get_assignee_options()

        assert [(o.label, o.metadata["type"]) for o in options] == [
            ("Jane Adjuster", "user"),
            ("Claims Team", "group"),
        ]

    @pytest.mark.asyncio
    async def test_assignee_options_by_type(self, service):
        service.users.search_groups.return_value = []

        options = await service.get_assignee_options(type="group", limit=5)

        assert options == []
        service.users.search_users.assert_not_awaited()
        service.users.search_groups.assert_awaited_once_with(search=None, limit=5)

    def test_document_description_options(self, service, monkeypatch):
        monkeypatch.setattr(settings.metadata, "document_descriptions", ["Proof of Loss", "Correspondence"])

        options = service.get_document_description_options()

        assert [(o.id, o.value, o.label) for o in options] == [
            (1, "Proof of Loss", "Proof of Loss"),
            (2, "Correspondence", "Correspondence"),
        ]


@pytest.mark.asyncio
async def test_execute_applies_update(service):
    service.update_document_metadata = AsyncMock(return_value="document")
    payload = DocumentMetadataUpdateRequest(document_description="Proof of Loss")

    result = await service.execute(1, payload, 5)

    assert result == "document"
    service.update_document_metadata.assert_awaited_once_with(1, payload, 5)


@pytest.mark.asyncio
async def test_execute_wraps_unexpected_errors(service):
    error = RuntimeError("connection reset")
    service.update_document_metadata = AsyncMock(side_effect=error)

    with pytest.raises(AppError) as exc_info:
        await service.execute(1, DocumentMetadataUpdateRequest(policy_id=2), 5)

    assert exc_info.value.original_error is error


@pytest.mark.asyncio
async def test_execute_passes_domain_errors_through(service):
    service.update_document_metadata = AsyncMock(side_effect=DocumentLockedError("Document 1 is processed"))

    with pytest.raises(DocumentLockedError):
        await service.execute(1, DocumentMetadataUpdateRequest(policy_id=2), 5)
