"""Typed references to custom fields in both addressing notations.

The host addresses custom fields as ``custom_<id>``. Specification documents
and API consumers use the stable ``<group_name>.<field_name>`` notation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

NUMERIC_PREFIX: Final[str] = "custom_"
FIELD_NOT_FOUND_PREFIX: Final[str] = "FIELD_NOT_FOUND_"
# API parameters such as ``options.limit`` share the dotted notation
RESERVED_GROUP_NAMES: Final[frozenset[str]] = frozenset({"option", "options"})

_NUMERIC_KEY = re.compile(r"custom_(?P<field_id>\d+)")
_GROUP_FIELD_KEY = re.compile(r"(?P<group_name>\w+)\.(?P<field_name>\w+)")


@dataclass(frozen=True, slots=True)
class ByNumericId:
    field_id: int

    @property
    def key(self) -> str:
        return f"{NUMERIC_PREFIX}{self.field_id}"


@dataclass(frozen=True, slots=True)
class ByGroupField:
    group_name: str
    field_name: str

    @property
    def key(self) -> str:
        return f"{self.group_name}.{self.field_name}"

    @property
    def is_reserved(self) -> bool:
        return self.group_name in RESERVED_GROUP_NAMES


type FieldRef = ByNumericId | ByGroupField


def parse_numeric_key(key: object) -> ByNumericId | None:
    if not isinstance(key, str):
        return None
    match = _NUMERIC_KEY.fullmatch(key)
    if match is None:
        return None
    return ByNumericId(int(match["field_id"]))


def parse_group_field_key(key: object) -> ByGroupField | None:
    if not isinstance(key, str):
        return None
    match = _GROUP_FIELD_KEY.fullmatch(key)
    if match is None:
        return None
    return ByGroupField(match["group_name"], match["field_name"])


def parse_field_ref(key: object) -> FieldRef | None:
    """Return the reference a mapping key denotes, or ``None`` for plain keys."""

    return parse_numeric_key(key) or parse_group_field_key(key)


def not_found_key(field_id: int) -> str:
    return f"{FIELD_NOT_FOUND_PREFIX}{field_id}"
