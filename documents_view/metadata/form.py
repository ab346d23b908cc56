"""Stateful metadata form bound to one open document."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from documents_view.core.config import settings
from documents_view.metadata.cascade import CascadeController, OptionsProvider
from documents_view.metadata.debounce import Debouncer
from documents_view.metadata.dependencies import should_disable_field
from documents_view.metadata.form_validation import validate_metadata_form
from documents_view.metadata.mapping import (
    get_initial_metadata,
    map_api_response_to_metadata,
    map_metadata_to_api_request,
)
from documents_view.metadata.models import (
    DocumentMetadata,
    DropdownOption,
    MetadataFieldName,
    ValidationErrorMap,
)
from documents_view.metadata.validators import validate_metadata_field
from documents_view.schemas.documents import DocumentResponse
from documents_view.schemas.metadata import DocumentMetadataUpdateRequest
from documents_view.utils.logging import get_logger

LOGGER = get_logger(__name__)

INITIAL_OPTION_FIELDS = (
    MetadataFieldName.POLICY_NUMBER,
    MetadataFieldName.DOCUMENT_DESCRIPTION,
    MetadataFieldName.ASSIGNED_TO,
    MetadataFieldName.PRODUCER_NUMBER,
)


class MetadataSaver(Protocol):
    """Persists a metadata update and returns the refreshed document."""

    async def update_metadata(
        self, document_id: int, payload: DocumentMetadataUpdateRequest
    ) -> Optional[DocumentResponse]:
        ...


@dataclass
class MetadataFormState:
    """Observable state of the form."""

    values: DocumentMetadata
    errors: ValidationErrorMap = field(default_factory=dict)
    touched: Dict[str, bool] = field(default_factory=dict)
    is_valid: bool = True
    is_dirty: bool = False
    is_submitting: bool = False
    submit_error: Optional[str] = None
    is_read_only: bool = False
    is_saving: bool = False
    save_error: Optional[str] = None


class MetadataFormController:
    """Wires field events to the cascade, the validators and autosave.

    All methods must be called from inside the running event loop; field
    changes schedule option fetches and the debounced autosave on it.
    """

    def __init__(
        self,
        document_id: int,
        initial_values: Optional[DocumentMetadata],
        saver: MetadataSaver,
        options_provider: OptionsProvider,
        is_read_only: bool = False,
        autosave_delay: Optional[float] = None,
    ):
        """Initialize the controller.

        Args:
            document_id: Document being edited
            initial_values: Server snapshot of the metadata, or None for a blank form
            saver: Collaborator persisting metadata updates
            options_provider: Collaborator listing dropdown options
            is_read_only: Freeze every field (processed documents)
            autosave_delay: Quiet period before autosave; defaults to settings
        """
        self.document_id = document_id
        self._saver = saver
        self._initial_values = initial_values or get_initial_metadata()
        self.cascade = CascadeController(options_provider)

        self.state = MetadataFormState(values=self._initial_values, is_read_only=is_read_only)
        self._revalidate()

        delay = settings.autosave_delay_seconds if autosave_delay is None else autosave_delay
        self._autosave = Debouncer(self._save_now, delay)
        self._save_lock = asyncio.Lock()

    @classmethod
    def from_document(
        cls,
        document: DocumentResponse,
        saver: MetadataSaver,
        options_provider: OptionsProvider,
        autosave_delay: Optional[float] = None,
    ) -> "MetadataFormController":
        """Build a controller from a loaded document; processed means read-only."""
        return cls(
            document_id=document.id,
            initial_values=map_api_response_to_metadata(document.metadata),
            saver=saver,
            options_provider=options_provider,
            is_read_only=document.is_processed,
            autosave_delay=autosave_delay,
        )

    @property
    def values(self) -> DocumentMetadata:
        return self.state.values

    @property
    def errors(self) -> ValidationErrorMap:
        return self.state.errors

    @property
    def options(self) -> Dict[MetadataFieldName, List[DropdownOption]]:
        return self.cascade.options

    @property
    def is_loading(self) -> Dict[MetadataFieldName, bool]:
        return self.cascade.is_loading

    @property
    def visible_errors(self) -> ValidationErrorMap:
        """Errors of fields the user has already interacted with."""
        return {name: message for name, message in self.state.errors.items() if self.state.touched.get(name)}

    @property
    def autosave_pending(self) -> bool:
        return self._autosave.pending

    async def load_initial_options(self) -> None:
        """Load the option lists needed to render the current values."""
        fields = list(INITIAL_OPTION_FIELDS)
        if self.values.policy_id is not None:
            fields.append(MetadataFieldName.LOSS_SEQUENCE)
        if self.values.loss_id is not None:
            fields.append(MetadataFieldName.CLAIMANT)

        tasks = [self.cascade.dispatch(name, self.values) for name in fields]
        await asyncio.gather(*tasks)

    def handle_field_change(
        self,
        field_name: MetadataFieldName,
        value: Any,
        identifier: Optional[Any] = None,
        identifier_type: Optional[str] = None,
    ) -> bool:
        """Apply a user edit.

        Args:
            field_name: Field the user changed
            value: New display value or the selected DropdownOption
            identifier: Id of the new value when ``value`` is a plain string
            identifier_type: Assignee kind for assigned_to

        Returns:
            False when the form is read-only and nothing changed, True otherwise
        """
        if self.state.is_read_only:
            LOGGER.debug(
                "Ignoring change on read-only document",
                extra={"document_id": self.document_id, "field": field_name.value},
            )
            return False

        result = self.cascade.apply_change(
            self.state.values, field_name, value, identifier, identifier_type
        )
        self.state.values = result.values

        for dependent in result.cleared:
            self.cascade.reset_options(dependent)
        for dependent in result.refetch:
            self.cascade.dispatch(dependent, result.values)

        self._revalidate()
        self.state.is_dirty = True
        self._autosave()
        return True

    def handle_field_blur(self, field_name: MetadataFieldName) -> None:
        """Mark the field touched and refresh its error."""
        self.state.touched[field_name.value] = True
        error = validate_metadata_field(field_name, self.values.value_of(field_name), self.values)
        errors = dict(self.state.errors)
        if error is None:
            errors.pop(field_name.value, None)
        else:
            errors[field_name.value] = error
        self.state.errors = errors
        self.state.is_valid = not errors

    def is_field_disabled(self, field_name: MetadataFieldName) -> bool:
        if self.state.is_read_only:
            return True
        return should_disable_field(field_name, self.values)

    async def handle_submit(self) -> bool:
        """Validate and save immediately.

        Returns:
            True when the save succeeded. False when nothing was sent or the
            save failed
        """
        if self.state.is_read_only:
            return False

        self._revalidate()
        if self.state.errors:
            for name in MetadataFieldName:
                self.state.touched[name.value] = True
            return False

        self._autosave.cancel()
        self.state.is_submitting = True
        try:
            async with self._save_lock:
                snapshot = self.state.values
                document = await self._saver.update_metadata(
                    self.document_id, map_metadata_to_api_request(snapshot)
                )
        except Exception as e:
            LOGGER.error(
                "Metadata submit failed",
                exc_info=True,
                extra={"document_id": self.document_id, "error": str(e)},
            )
            self.state.submit_error = str(e) or "Failed to save metadata"
            return False
        finally:
            self.state.is_submitting = False

        self.state.submit_error = None
        self._apply_saved(snapshot, document)
        return True

    async def flush_autosave(self) -> None:
        """Run a pending autosave now and wait for it."""
        await self._autosave.flush()

    def reset(self, values: Optional[DocumentMetadata] = None) -> None:
        """Discard local edits and start over from ``values`` or the initial snapshot."""
        self._autosave.cancel()
        self.state.values = values or self._initial_values
        self.state.touched = {}
        self.state.is_dirty = False
        self.state.submit_error = None
        self.state.save_error = None
        self._revalidate()

    def load_document(self, document: DocumentResponse) -> None:
        """Replace the values wholesale with a fresh server snapshot."""
        self.document_id = document.id
        self._initial_values = map_api_response_to_metadata(document.metadata)
        self.state.values = self._initial_values
        self.state.is_read_only = document.is_processed
        self.state.is_dirty = False
        self._revalidate()

    def close(self) -> None:
        """Stop the autosave timer and in-flight option fetches."""
        self._autosave.cancel()
        self.cascade.close()

    def _revalidate(self) -> None:
        self.state.errors = validate_metadata_form(self.state.values)
        self.state.is_valid = not self.state.errors

    async def _save_now(self) -> None:
        # One save in flight at a time; a queued save sends the values current
        # when it gets the lock, so the newest payload always lands last.
        async with self._save_lock:
            if self.state.is_read_only:
                return
            self._revalidate()
            if not self.state.is_valid:
                LOGGER.debug(
                    "Skipping autosave of invalid metadata",
                    extra={"document_id": self.document_id, "errors": self.state.errors},
                )
                return

            snapshot = self.state.values
            self.state.is_saving = True
            try:
                document = await self._saver.update_metadata(
                    self.document_id, map_metadata_to_api_request(snapshot)
                )
            except Exception as e:
                LOGGER.warning(
                    "Metadata autosave failed",
                    exc_info=True,
                    extra={"document_id": self.document_id, "error": str(e)},
                )
                self.state.save_error = str(e) or "Failed to save metadata"
                return
            finally:
                self.state.is_saving = False

            self.state.save_error = None
            self._apply_saved(snapshot, document)

    def _apply_saved(self, snapshot: DocumentMetadata, document: Optional[DocumentResponse]) -> None:
        # Edits made while the save was in flight stay dirty.
        if self.state.values != snapshot:
            return
        self.state.is_dirty = False
        if document is not None:
            self.load_document(document)
