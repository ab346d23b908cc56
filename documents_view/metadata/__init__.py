"""Cascading metadata form engine."""

from documents_view.metadata.cascade import CascadeController, CascadeResult, OptionsProvider
from documents_view.metadata.debounce import Debouncer
from documents_view.metadata.form import MetadataFormController, MetadataFormState, MetadataSaver
from documents_view.metadata.form_validation import is_metadata_valid, validate_metadata_form
from documents_view.metadata.models import (
    DocumentMetadata,
    DropdownOption,
    FieldConfig,
    FieldDependency,
    MetadataFieldName,
    ValidationErrorMap,
)

__all__ = [
    "CascadeController",
    "CascadeResult",
    "Debouncer",
    "DocumentMetadata",
    "DropdownOption",
    "FieldConfig",
    "FieldDependency",
    "MetadataFieldName",
    "MetadataFormController",
    "MetadataFormState",
    "MetadataSaver",
    "OptionsProvider",
    "ValidationErrorMap",
    "is_metadata_valid",
    "validate_metadata_form",
]
