"""Cascade controller: clears dependents and reloads their option lists."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Set

from documents_view.metadata.dependencies import (
    get_direct_dependents,
    get_filtered_fields,
    get_transitive_dependents,
)
from documents_view.metadata.fields import get_field_config
from documents_view.metadata.models import DocumentMetadata, DropdownOption, MetadataFieldName
from documents_view.utils.logging import get_logger

LOGGER = get_logger(__name__)


class OptionsProvider(Protocol):
    """Source of dropdown options for a field given the current form values."""

    async def get_metadata_options(
        self, field: MetadataFieldName, context: DocumentMetadata
    ) -> List[DropdownOption]:
        ...


@dataclass
class CascadeResult:
    """Outcome of applying one field change."""

    values: DocumentMetadata
    cleared: List[MetadataFieldName] = field(default_factory=list)
    refetch: List[MetadataFieldName] = field(default_factory=list)


class CascadeController:
    """Owns option lists, loading flags and request tokens per field.

    Only the newest request of a field may write its options. Older requests
    still run to completion but their results are discarded.
    """

    def __init__(self, options_provider: OptionsProvider):
        self._provider = options_provider
        self.options: Dict[MetadataFieldName, List[DropdownOption]] = {
            name: [] for name in MetadataFieldName
        }
        self.is_loading: Dict[MetadataFieldName, bool] = {
            name: False for name in MetadataFieldName
        }
        self._tokens: Dict[MetadataFieldName, int] = {name: 0 for name in MetadataFieldName}
        self._tasks: Set[asyncio.Task] = set()

    def apply_change(
        self,
        metadata: DocumentMetadata,
        field: MetadataFieldName,
        value: Any,
        identifier: Optional[Any] = None,
        identifier_type: Optional[str] = None,
    ) -> CascadeResult:
        """Compute the new values after ``field`` changes.

        Args:
            metadata: Values before the change
            field: Changed field
            value: New display value, or the selected DropdownOption
            identifier: Id of the new value when ``value`` is a plain string
            identifier_type: Assignee kind ("user" or "group") for assigned_to

        Returns:
            CascadeResult with the new snapshot, the cleared dependents in
            traversal order and the fields whose options must be reloaded
        """
        display = value
        if isinstance(value, DropdownOption):
            display = value.label
            if identifier is None:
                identifier = value.id
            if identifier_type is None:
                identifier_type = value.metadata.get("type")

        update: Dict[str, Any] = {field.value: display}
        config = get_field_config(field)
        if config is not None and config.id_path:
            update[config.id_path] = identifier
        if field == MetadataFieldName.ASSIGNED_TO:
            update["assigned_to_type"] = identifier_type if identifier is not None else None

        cleared = get_transitive_dependents(field)
        for dependent in cleared:
            update[dependent.value] = None
            dependent_config = get_field_config(dependent)
            if dependent_config is not None and dependent_config.id_path:
                update[dependent_config.id_path] = None

        refetch: List[MetadataFieldName] = []
        if identifier is not None:
            refetch.extend(get_direct_dependents(field))
        refetch.extend(name for name in get_filtered_fields(field) if name not in refetch)

        return CascadeResult(
            values=metadata.model_copy(update=update),
            cleared=cleared,
            refetch=refetch,
        )

    def dispatch(self, field: MetadataFieldName, context: DocumentMetadata) -> asyncio.Task:
        """Start loading options for ``field``; supersedes earlier requests."""
        self._tokens[field] += 1
        token = self._tokens[field]
        self.is_loading[field] = True

        task = asyncio.get_running_loop().create_task(self._fetch(field, context, token))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def reset_options(self, field: MetadataFieldName) -> None:
        """Empty the options of ``field`` and ignore any request in flight."""
        self._tokens[field] += 1
        self.options[field] = []
        self.is_loading[field] = False

    def is_current(self, field: MetadataFieldName, token: int) -> bool:
        return self._tokens[field] == token

    async def wait_idle(self) -> None:
        """Wait until every in-flight fetch has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        for name in MetadataFieldName:
            self._tokens[name] += 1
            self.is_loading[name] = False

    async def _fetch(self, field: MetadataFieldName, context: DocumentMetadata, token: int) -> None:
        try:
            options = list(await self._provider.get_metadata_options(field, context))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            LOGGER.warning(
                "Failed to load metadata options",
                exc_info=True,
                extra={"field": field.value, "error": str(e)},
            )
            options = []

        if not self.is_current(field, token):
            LOGGER.debug(
                "Discarding superseded options response",
                extra={"field": field.value, "token": token},
            )
            return

        self.options[field] = options
        self.is_loading[field] = False
