"""Lazily populated caches of custom group and custom field definitions.

Each cache asks the entity store at most once per key and keeps the answer,
including the answer "no such field", until it is explicitly invalidated.
Instances are not synchronised; share one per thread or per request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from civisync.domain.ports import EntityStore

log = getLogger(__name__)

CUSTOM_FIELD_ENTITY = "CustomField"
CUSTOM_GROUP_ENTITY = "CustomGroup"


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Definition of one custom field as returned by the store."""

    id: int
    name: str
    custom_group_id: int
    attributes: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> FieldDescriptor:
        return cls(
            id=int(record["id"]),
            name=str(record["name"]),
            custom_group_id=int(record["custom_group_id"]),
            attributes=dict(record),
        )

    @property
    def key(self) -> str:
        return f"custom_{self.id}"


@dataclass(slots=True)
class GroupFields:
    """The fields of one custom group, addressable by name or by id."""

    by_name: dict[str, FieldDescriptor] = field(default_factory=dict)
    by_id: dict[int, FieldDescriptor] = field(default_factory=dict)

    def add(self, descriptor: FieldDescriptor) -> None:
        self.by_name[descriptor.name] = descriptor
        self.by_id[descriptor.id] = descriptor

    def get(self, key: str | int) -> FieldDescriptor | None:
        if isinstance(key, int):
            return self.by_id.get(key)
        return self.by_name.get(key)


class CustomGroupCache:
    """Custom fields indexed by group name, loaded one group at a time."""

    def __init__(self, store: EntityStore) -> None:
        self._store = store
        self._groups: dict[str, GroupFields] = {}

    def __contains__(self, group_name: object) -> bool:
        return group_name in self._groups

    def warm(self, group_names: Iterable[str]) -> None:
        for group_name in dict.fromkeys(group_names):
            if group_name in self._groups:
                continue
            result = self._store.get(
                CUSTOM_FIELD_ENTITY,
                {"custom_group_id": group_name},
                limit=None,
            )
            fields = GroupFields()
            for record in result.values:
                fields.add(FieldDescriptor.from_record(record))
            self._groups[group_name] = fields
            log.debug("Cached %s custom fields of group %s", len(fields.by_id), group_name)

    def get(self, group_name: str) -> GroupFields:
        self.warm((group_name,))
        return self._groups[group_name]

    def find(self, group_name: str, field_name: str) -> FieldDescriptor | None:
        return self.get(group_name).get(field_name)

    def invalidate(self, group_name: str | None = None) -> None:
        if group_name is None:
            self._groups.clear()
        else:
            self._groups.pop(group_name, None)


class CustomFieldCache:
    """Custom fields indexed by id, loaded in batches of uncached ids."""

    def __init__(self, store: EntityStore) -> None:
        self._store = store
        self._fields: dict[int, FieldDescriptor | None] = {}

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._fields

    def warm(self, field_ids: Iterable[int]) -> None:
        to_load = [
            field_id for field_id in dict.fromkeys(field_ids) if field_id not in self._fields
        ]
        if not to_load:
            return
        result = self._store.get(CUSTOM_FIELD_ENTITY, {"id": {"IN": to_load}}, limit=None)
        for record in result.values:
            descriptor = FieldDescriptor.from_record(record)
            self._fields[descriptor.id] = descriptor
        for field_id in to_load:
            self._fields.setdefault(field_id, None)
        log.debug("Cached custom fields %s", to_load)

    def get(self, field_id: int) -> FieldDescriptor | None:
        self.warm((field_id,))
        return self._fields[field_id]

    def invalidate(self, field_id: int | None = None) -> None:
        if field_id is None:
            self._fields.clear()
        else:
            self._fields.pop(field_id, None)


class GroupNameIndex:
    """Mapping of custom group id to group name, loaded in full on first use."""

    def __init__(self, store: EntityStore) -> None:
        self._store = store
        self._names: dict[int, str] | None = None

    def warm(self) -> dict[int, str]:
        if self._names is None:
            result = self._store.get(CUSTOM_GROUP_ENTITY, {"return": "name"}, limit=None)
            self._names = {int(record["id"]): str(record["name"]) for record in result.values}
        return self._names

    def get(self, group_id: int) -> str | None:
        return self.warm().get(group_id)

    def names(self) -> list[str]:
        return list(self.warm().values())

    def invalidate(self) -> None:
        self._names = None
