"""Whole-form validation."""

from documents_view.metadata.models import DocumentMetadata, MetadataFieldName, ValidationErrorMap
from documents_view.metadata.validators import validate_metadata_field


def validate_metadata_form(metadata: DocumentMetadata) -> ValidationErrorMap:
    """Validate every field and return a fresh error map.

    The map is rebuilt from scratch on each call so errors of fields cleared
    by a cascade never linger.

    Args:
        metadata: Form snapshot

    Returns:
        Mapping of field name to message; empty when the form is valid
    """
    errors: ValidationErrorMap = {}
    for field in MetadataFieldName:
        error = validate_metadata_field(field, metadata.value_of(field), metadata)
        if error is not None:
            errors[field.value] = error
    return errors


def is_metadata_valid(metadata: DocumentMetadata) -> bool:
    return not validate_metadata_form(metadata)
