"""Translation between the ``custom_<id>`` and ``<group>.<field>`` notations.

All operations take their caches from a :class:`ResolverContext`. The
rewriting functions work in place on arbitrary nested mappings and lists.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import MutableMapping, MutableSequence
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from .cache import CustomFieldCache, CustomGroupCache, GroupNameIndex
from .refs import (
    ByGroupField,
    ByNumericId,
    not_found_key,
    parse_group_field_key,
    parse_numeric_key,
)

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator

    from civisync.domain.ports import EntityStore

    from .cache import FieldDescriptor
    from .refs import FieldRef

log = getLogger(__name__)


@dataclass(slots=True)
class ResolverContext:
    """Caches shared by every name/id translation of one process or request."""

    groups: CustomGroupCache
    fields: CustomFieldCache
    group_names: GroupNameIndex
    # unresolved <group>.<field> keys and how often each was seen
    unresolved: Counter[str] = field(default_factory=Counter)

    @classmethod
    def for_store(cls, store: EntityStore) -> ResolverContext:
        return cls(
            groups=CustomGroupCache(store),
            fields=CustomFieldCache(store),
            group_names=GroupNameIndex(store),
        )

    def invalidate(self) -> None:
        self.groups.invalidate()
        self.fields.invalidate()
        self.group_names.invalidate()
        self.unresolved.clear()


def get_custom_field(
    context: ResolverContext,
    group_name: str,
    field_name: str,
) -> FieldDescriptor | None:
    return context.groups.find(group_name, field_name)


def get_custom_field_key(context: ResolverContext, group_name: str, field_name: str) -> str | None:
    """Return ``custom_<id>`` for the named field, or ``None`` if it does not exist."""

    descriptor = get_custom_field(context, group_name, field_name)
    return descriptor.key if descriptor else None


def get_group_name(context: ResolverContext, group_id: int) -> str | None:
    return context.group_names.get(group_id)


def get_field_identifier(context: ResolverContext, field_id: int) -> str:
    """Return ``<group>.<field>`` for a field id, or ``FIELD_NOT_FOUND_<id>``."""

    descriptor = context.fields.get(field_id)
    if descriptor is None:
        return not_found_key(field_id)
    group_name = get_group_name(context, descriptor.custom_group_id)
    if group_name is None:
        return not_found_key(field_id)
    return ByGroupField(group_name, descriptor.name).key


def to_group_field(context: ResolverContext, ref: FieldRef) -> ByGroupField | None:
    if isinstance(ref, ByGroupField):
        return ref
    descriptor = context.fields.get(ref.field_id)
    if descriptor is None:
        return None
    group_name = get_group_name(context, descriptor.custom_group_id)
    if group_name is None:
        return None
    return ByGroupField(group_name, descriptor.name)


def to_numeric_id(context: ResolverContext, ref: FieldRef) -> ByNumericId | None:
    if isinstance(ref, ByNumericId):
        return ref
    descriptor = get_custom_field(context, ref.group_name, ref.field_name)
    if descriptor is None:
        return None
    return ByNumericId(descriptor.id)


def label_custom_fields(
    context: ResolverContext,
    data: MutableMapping[str, Any] | MutableSequence[Any],
    depth: int = 1,
) -> None:
    """Rewrite ``custom_<id>`` keys to ``<group>.<field>``, descending ``depth`` levels.

    All ids found are loaded in one batch. Ids the store does not know end up
    under ``FIELD_NOT_FOUND_<id>`` so their values are kept.
    """

    if depth <= 0:
        return
    field_ids = [ref.field_id for ref in _numeric_refs(data, depth)]
    context.fields.warm(field_ids)
    _relabel(context, data, depth)


def _numeric_refs(data: object, depth: int) -> Iterator[ByNumericId]:
    if depth <= 0:
        return
    if isinstance(data, MutableMapping):
        for key, value in data.items():
            ref = parse_numeric_key(key)
            if ref is not None:
                yield ref
            yield from _numeric_refs(value, depth - 1)
    elif isinstance(data, MutableSequence):
        for item in data:
            yield from _numeric_refs(item, depth - 1)


def _relabel(context: ResolverContext, data: object, depth: int) -> None:
    if depth <= 0:
        return
    if isinstance(data, MutableMapping):
        for key in list(data.keys()):
            value = data[key]
            ref = parse_numeric_key(key)
            if ref is not None:
                del data[key]
                data[get_field_identifier(context, ref.field_id)] = value
            _relabel(context, value, depth - 1)
    elif isinstance(data, MutableSequence):
        for item in data:
            _relabel(context, item, depth - 1)


def resolve_custom_fields(
    context: ResolverContext,
    data: MutableMapping[str, Any],
    custom_groups: Collection[str] | None = None,
) -> list[str]:
    """Rewrite top-level ``<group>.<field>`` keys to ``custom_<id>``.

    Only groups in ``custom_groups`` are considered when it is given. Keys
    that cannot be resolved are left unchanged and returned; they are also
    counted in ``context.unresolved``.
    """

    refs: dict[str, ByGroupField] = {}
    for key in data:
        ref = parse_group_field_key(key)
        if ref is None or ref.is_reserved:
            continue
        if custom_groups and ref.group_name not in custom_groups:
            continue
        refs[key] = ref

    context.groups.warm(ref.group_name for ref in refs.values())

    unresolved: list[str] = []
    for key, ref in refs.items():
        numeric = to_numeric_id(context, ref)
        if numeric is None:
            log.debug("Unknown custom field %s left unresolved", key)
            unresolved.append(key)
            continue
        data[numeric.key] = data.pop(key)

    context.unresolved.update(unresolved)
    return unresolved


def unrest(
    context: ResolverContext,
    params: MutableMapping[str, Any],
    group_names: str | Collection[str] | None = None,
) -> None:
    """Restore ``<group>.<field>`` keys that a REST transport mangled to ``<group>_<field>``.

    The mangled key is kept next to the restored one. Without ``group_names``
    every known custom group is considered. A single group may be passed as a
    plain string.
    """

    if group_names is None:
        group_names = context.group_names.names()
    elif isinstance(group_names, str):
        group_names = (group_names,)

    for group_name in group_names:
        prefix = f"{group_name}_"
        for key in list(params.keys()):
            if isinstance(key, str) and key.startswith(prefix):
                params[f"{group_name}.{key[len(prefix):]}"] = params[key]
