"""Static registry of metadata fields and their dependency edges.

The tables here are the single source of truth for every other part of the
form engine. Changing the field set is a deploy-time edit to this module.
"""

from typing import Dict, List, Optional

from documents_view.core.exceptions import ConfigurationError
from documents_view.metadata.models import (
    DropdownFieldType,
    FieldConfig,
    FieldDependency,
    MetadataFieldName,
    OptionFilter,
    ValidationRule,
)

METADATA_FIELD_CONFIGS = (
    FieldConfig(
        name=MetadataFieldName.POLICY_NUMBER,
        label="Policy Number",
        field_type=DropdownFieldType.POLICY_NUMBER,
        placeholder="Select a policy",
        required=True,
        depends_on=None,
        order=1,
        validation=(ValidationRule(type="required", message="Policy Number is required"),),
        id_path="policy_id",
    ),
    FieldConfig(
        name=MetadataFieldName.LOSS_SEQUENCE,
        label="Loss Sequence",
        field_type=DropdownFieldType.LOSS_SEQUENCE,
        placeholder="Select a loss",
        required=False,
        depends_on=MetadataFieldName.POLICY_NUMBER,
        order=2,
        validation=(
            ValidationRule(
                type="dependency",
                message="Please select a Policy Number first",
                params={"depends_on": MetadataFieldName.POLICY_NUMBER.value},
            ),
        ),
        id_path="loss_id",
    ),
    FieldConfig(
        name=MetadataFieldName.CLAIMANT,
        label="Claimant",
        field_type=DropdownFieldType.CLAIMANT,
        placeholder="Select a claimant",
        required=False,
        depends_on=MetadataFieldName.LOSS_SEQUENCE,
        order=3,
        validation=(
            ValidationRule(
                type="dependency",
                message="Please select a Loss Sequence first",
                params={"depends_on": MetadataFieldName.LOSS_SEQUENCE.value},
            ),
        ),
        id_path="claimant_id",
    ),
    FieldConfig(
        name=MetadataFieldName.DOCUMENT_DESCRIPTION,
        label="Document Description",
        field_type=DropdownFieldType.DOCUMENT_DESCRIPTION,
        placeholder="Select a description",
        required=True,
        depends_on=None,
        order=4,
        validation=(
            ValidationRule(type="required", message="Document Description is required"),
        ),
        id_path=None,
    ),
    FieldConfig(
        name=MetadataFieldName.ASSIGNED_TO,
        label="Assigned To",
        field_type=DropdownFieldType.ASSIGNED_TO,
        placeholder="Select assignee",
        required=False,
        depends_on=None,
        order=5,
        id_path="assigned_to_id",
    ),
    FieldConfig(
        name=MetadataFieldName.PRODUCER_NUMBER,
        label="Producer Number",
        field_type=DropdownFieldType.PRODUCER_NUMBER,
        placeholder="Select a producer",
        required=False,
        depends_on=None,
        order=6,
        id_path="producer_id",
    ),
)

FIELD_DEPENDENCIES = (
    FieldDependency(
        field=MetadataFieldName.LOSS_SEQUENCE,
        depends_on=MetadataFieldName.POLICY_NUMBER,
        parent_value_path="policy_id",
    ),
    FieldDependency(
        field=MetadataFieldName.CLAIMANT,
        depends_on=MetadataFieldName.LOSS_SEQUENCE,
        parent_value_path="loss_id",
    ),
)

# Policies are listed per producer, but a policy can be chosen without one.
OPTION_FILTERS = (
    OptionFilter(
        field=MetadataFieldName.POLICY_NUMBER,
        filtered_by=MetadataFieldName.PRODUCER_NUMBER,
        parent_value_path="producer_id",
    ),
)

_CONFIGS_BY_NAME: Dict[MetadataFieldName, FieldConfig] = {
    config.name: config for config in METADATA_FIELD_CONFIGS
}
_DEPENDENCIES_BY_FIELD: Dict[MetadataFieldName, FieldDependency] = {
    dependency.field: dependency for dependency in FIELD_DEPENDENCIES
}


def get_field_configs() -> List[FieldConfig]:
    """Return all field configs sorted by display order."""
    return sorted(METADATA_FIELD_CONFIGS, key=lambda config: config.order)


def get_field_config(field: MetadataFieldName) -> Optional[FieldConfig]:
    """Return the config of ``field`` or None if it is not registered."""
    return _CONFIGS_BY_NAME.get(field)


def get_dependency(field: MetadataFieldName) -> Optional[FieldDependency]:
    """Return the dependency edge whose ``field`` matches, if any."""
    return _DEPENDENCIES_BY_FIELD.get(field)


def _check_registry() -> None:
    """Verify the dependency edges agree with the configs and form no cycle.

    Raises:
        ConfigurationError: If the registry is inconsistent
    """
    for config in METADATA_FIELD_CONFIGS:
        dependency = _DEPENDENCIES_BY_FIELD.get(config.name)
        declared_parent = dependency.depends_on if dependency else None
        if config.depends_on != declared_parent:
            raise ConfigurationError(
                f"Field {config.name.value} declares parent {config.depends_on} "
                f"but the dependency table says {declared_parent}"
            )

    for start in _DEPENDENCIES_BY_FIELD:
        seen = {start}
        current = _DEPENDENCIES_BY_FIELD[start].depends_on
        while current is not None:
            if current in seen:
                raise ConfigurationError(
                    f"Metadata field dependencies form a cycle through {current.value}"
                )
            seen.add(current)
            parent = _DEPENDENCIES_BY_FIELD.get(current)
            current = parent.depends_on if parent else None


_check_registry()
