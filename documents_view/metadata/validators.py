"""Per-field validators.

Each validator is a pure function returning an error message or None. They
never raise.
"""

import re
from typing import Any, Callable, Dict, Optional

from documents_view.metadata.fields import get_dependency, get_field_config
from documents_view.metadata.models import DocumentMetadata, MetadataFieldName

ERROR_MESSAGES = {
    "REQUIRED": "This field is required",
    "INVALID_POLICY_NUMBER": "Please enter a valid policy number",
    "INVALID_LOSS_SEQUENCE": "Please select a valid loss sequence",
    "POLICY_REQUIRED_FOR_LOSS": "Please select a policy before selecting a loss sequence",
    "INVALID_CLAIMANT": "Please select a valid claimant",
    "LOSS_REQUIRED_FOR_CLAIMANT": "Please select a loss sequence before selecting a claimant",
    "INVALID_DOCUMENT_DESCRIPTION": "Please select a valid document description",
    "INVALID_ASSIGNED_TO": "Please select a valid assignee",
    "INVALID_PRODUCER_NUMBER": "Please enter a valid producer number",
}

# PLCY-12345, AG-789456
_PREFIXED_NUMBER_PATTERN = re.compile(r"[A-Z]+-\d+", re.IGNORECASE)
# "1 - Vehicle Accident"
_SEQUENCE_PATTERN = re.compile(r"\d+\s+-\s+.+")

_DEPENDENCY_MESSAGES = {
    MetadataFieldName.LOSS_SEQUENCE: ERROR_MESSAGES["POLICY_REQUIRED_FOR_LOSS"],
    MetadataFieldName.CLAIMANT: ERROR_MESSAGES["LOSS_REQUIRED_FOR_CLAIMANT"],
}

Validator = Callable[[Any, Optional[DocumentMetadata]], Optional[str]]


def is_required(value: Any) -> bool:
    """Loose presence check: only None and blank strings count as missing."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def _matches(pattern: re.Pattern, value: Any) -> bool:
    return pattern.fullmatch(str(value).strip()) is not None


def validate_policy_number(value: Any, metadata: Optional[DocumentMetadata] = None) -> Optional[str]:
    if not is_required(value):
        return ERROR_MESSAGES["REQUIRED"]
    if not _matches(_PREFIXED_NUMBER_PATTERN, value):
        return ERROR_MESSAGES["INVALID_POLICY_NUMBER"]
    return None


def validate_loss_sequence(value: Any, metadata: Optional[DocumentMetadata] = None) -> Optional[str]:
    """Loss needs a selected policy even when the loss itself is empty."""
    if metadata is None or metadata.policy_id is None:
        return ERROR_MESSAGES["POLICY_REQUIRED_FOR_LOSS"]
    if not is_required(value):
        return None
    if not _matches(_SEQUENCE_PATTERN, value):
        return ERROR_MESSAGES["INVALID_LOSS_SEQUENCE"]
    return None


def validate_claimant(value: Any, metadata: Optional[DocumentMetadata] = None) -> Optional[str]:
    """Claimant needs a selected loss even when the claimant itself is empty."""
    if metadata is None or metadata.loss_id is None:
        return ERROR_MESSAGES["LOSS_REQUIRED_FOR_CLAIMANT"]
    if not is_required(value):
        return None
    if not _matches(_SEQUENCE_PATTERN, value):
        return ERROR_MESSAGES["INVALID_CLAIMANT"]
    return None


def validate_document_description(
    value: Any, metadata: Optional[DocumentMetadata] = None
) -> Optional[str]:
    if not is_required(value):
        return ERROR_MESSAGES["REQUIRED"]
    return None


def validate_assigned_to(value: Any, metadata: Optional[DocumentMetadata] = None) -> Optional[str]:
    return None


def validate_producer_number(value: Any, metadata: Optional[DocumentMetadata] = None) -> Optional[str]:
    if not is_required(value):
        return None
    if not _matches(_PREFIXED_NUMBER_PATTERN, value):
        return ERROR_MESSAGES["INVALID_PRODUCER_NUMBER"]
    return None


def validate_dependent_field(
    field: MetadataFieldName, value: Any, metadata: DocumentMetadata
) -> Optional[str]:
    """Dependency gate: a value may not be held while its parent is unset.

    Args:
        field: Field being validated
        value: Its current display value
        metadata: Full form snapshot used to read the parent id

    Returns:
        The dependency message when the parent id is missing and ``value`` is
        present, otherwise None
    """
    dependency = get_dependency(field)
    if dependency is None:
        return None

    parent_id = getattr(metadata, dependency.parent_value_path, None)
    if parent_id is not None or not is_required(value):
        return None

    message = _DEPENDENCY_MESSAGES.get(field)
    if message is not None:
        return message

    parent_config = get_field_config(dependency.depends_on)
    parent_label = parent_config.label if parent_config else dependency.depends_on.value
    return f"Please provide {parent_label} first"


def _no_op_validator(value: Any, metadata: Optional[DocumentMetadata] = None) -> Optional[str]:
    return None


FIELD_VALIDATORS: Dict[MetadataFieldName, Validator] = {
    MetadataFieldName.POLICY_NUMBER: validate_policy_number,
    MetadataFieldName.LOSS_SEQUENCE: validate_loss_sequence,
    MetadataFieldName.CLAIMANT: validate_claimant,
    MetadataFieldName.DOCUMENT_DESCRIPTION: validate_document_description,
    MetadataFieldName.ASSIGNED_TO: validate_assigned_to,
    MetadataFieldName.PRODUCER_NUMBER: validate_producer_number,
}


def get_validator_for_field(field: Any) -> Validator:
    """Look up the validator of ``field``; unknown names get a no-op."""
    return FIELD_VALIDATORS.get(field, _no_op_validator)


def validate_metadata_field(
    field: MetadataFieldName, value: Any, metadata: DocumentMetadata
) -> Optional[str]:
    """Validate one field in the context of the whole form.

    Dependency errors win over format errors. An empty optional field is
    valid even when its parent is unset, so a fresh form only reports the
    required fields.
    """
    dependency_error = validate_dependent_field(field, value, metadata)
    if dependency_error:
        return dependency_error

    config = get_field_config(field)
    if config is not None and not config.required and not is_required(value):
        return None

    return get_validator_for_field(field)(value, metadata)
