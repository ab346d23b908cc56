"""Dependency resolution over the field registry."""

from collections import deque
from typing import List, Optional

from documents_view.metadata.fields import FIELD_DEPENDENCIES, OPTION_FILTERS, get_dependency
from documents_view.metadata.models import DocumentMetadata, FieldDependency, MetadataFieldName


def get_field_dependency(field: MetadataFieldName) -> Optional[FieldDependency]:
    return get_dependency(field)


def should_disable_field(field: MetadataFieldName, metadata: DocumentMetadata) -> bool:
    """Whether ``field`` is unusable because its parent has no identifier.

    Args:
        field: Field to check
        metadata: Current form values

    Returns:
        True iff the field has a dependency and the parent id is None
    """
    dependency = get_dependency(field)
    if dependency is None:
        return False
    return getattr(metadata, dependency.parent_value_path, None) is None


def get_direct_dependents(field: MetadataFieldName) -> List[MetadataFieldName]:
    """Fields that declare ``field`` as their parent, in registry order."""
    return [edge.field for edge in FIELD_DEPENDENCIES if edge.depends_on == field]


def get_transitive_dependents(field: MetadataFieldName) -> List[MetadataFieldName]:
    """Every field reachable below ``field``, nearest first.

    Breadth-first over the edge list; each field appears once and the changed
    field itself is never included.
    """
    ordered: List[MetadataFieldName] = []
    visited = {field}
    queue = deque([field])

    while queue:
        current = queue.popleft()
        for dependent in get_direct_dependents(current):
            if dependent in visited:
                continue
            visited.add(dependent)
            ordered.append(dependent)
            queue.append(dependent)

    return ordered


def get_filtered_fields(field: MetadataFieldName) -> List[MetadataFieldName]:
    """Fields whose option lists are scoped by ``field``."""
    return [option_filter.field for option_filter in OPTION_FILTERS if option_filter.filtered_by == field]
