"""Custom field name resolution."""

from __future__ import annotations

from .cache import (
    CustomFieldCache,
    CustomGroupCache,
    FieldDescriptor,
    GroupFields,
    GroupNameIndex,
)
from .refs import (
    FIELD_NOT_FOUND_PREFIX,
    ByGroupField,
    ByNumericId,
    FieldRef,
    parse_field_ref,
)
from .resolver import (
    ResolverContext,
    get_custom_field,
    get_custom_field_key,
    get_field_identifier,
    get_group_name,
    label_custom_fields,
    resolve_custom_fields,
    to_group_field,
    to_numeric_id,
    unrest,
)

__all__ = [
    "FIELD_NOT_FOUND_PREFIX",
    "ByGroupField",
    "ByNumericId",
    "CustomFieldCache",
    "CustomGroupCache",
    "FieldDescriptor",
    "FieldRef",
    "GroupFields",
    "GroupNameIndex",
    "ResolverContext",
    "get_custom_field",
    "get_custom_field_key",
    "get_field_identifier",
    "get_group_name",
    "label_custom_fields",
    "parse_field_ref",
    "resolve_custom_fields",
    "to_group_field",
    "to_numeric_id",
    "unrest",
]
