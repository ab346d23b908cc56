"""Core types of the cascading metadata form."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from documents_view.schemas.metadata import AssigneeType, DropdownOption


class MetadataFieldName(str, Enum):
    """Closed set of editable metadata fields, in display order."""

    POLICY_NUMBER = "policy_number"
    LOSS_SEQUENCE = "loss_sequence"
    CLAIMANT = "claimant"
    DOCUMENT_DESCRIPTION = "document_description"
    ASSIGNED_TO = "assigned_to"
    PRODUCER_NUMBER = "producer_number"


class DropdownFieldType(str, Enum):
    """Widget kind used to render a field."""

    POLICY_NUMBER = "policy_number"
    LOSS_SEQUENCE = "loss_sequence"
    CLAIMANT = "claimant"
    DOCUMENT_DESCRIPTION = "document_description"
    ASSIGNED_TO = "assigned_to"
    PRODUCER_NUMBER = "producer_number"


@dataclass(frozen=True)
class ValidationRule:
    """Declarative rule attached to a field (``required``, ``dependency``...)."""

    type: str
    message: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FieldConfig:
    """Static description of one metadata field."""

    name: MetadataFieldName
    label: str
    field_type: DropdownFieldType
    placeholder: str
    required: bool
    depends_on: Optional[MetadataFieldName]
    order: int
    validation: Tuple[ValidationRule, ...] = ()
    id_path: Optional[str] = None  # identifier attribute on DocumentMetadata


@dataclass(frozen=True)
class FieldDependency:
    """Edge ``field -> depends_on``; the parent id lives at ``parent_value_path``."""

    field: MetadataFieldName
    depends_on: MetadataFieldName
    parent_value_path: str


@dataclass(frozen=True)
class OptionFilter:
    """Scopes the options of ``field`` by ``filtered_by`` without gating it."""

    field: MetadataFieldName
    filtered_by: MetadataFieldName
    parent_value_path: str


class DocumentMetadata(BaseModel):
    """Current selections of the metadata form.

    Attributes are snake_case; camelCase aliases are accepted on input and
    produced by ``model_dump(by_alias=True)``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    policy_number: Optional[str] = None
    policy_id: Optional[int] = None
    loss_sequence: Optional[str] = None
    loss_id: Optional[int] = None
    claimant: Optional[str] = None
    claimant_id: Optional[int] = None
    document_description: Optional[str] = None
    assigned_to: Optional[str] = None
    assigned_to_id: Optional[int] = None
    assigned_to_type: Optional[AssigneeType] = None
    producer_number: Optional[str] = None
    producer_id: Optional[int] = None

    def value_of(self, field_name: MetadataFieldName) -> Any:
        """Display value held for ``field_name``."""
        return getattr(self, field_name.value)


ValidationErrorMap = Dict[str, str]

__all__ = [
    "DocumentMetadata",
    "DropdownFieldType",
    "DropdownOption",
    "FieldConfig",
    "FieldDependency",
    "MetadataFieldName",
    "OptionFilter",
    "ValidationErrorMap",
    "ValidationRule",
]
