"""Specification documents describing the desired state of configuration entities.

A document is a JSON object. Records inside it map field names to values and
may carry two directives that are never persisted:

- ``_lookup``: the fields whose values identify an existing record
- ``_translate``: the fields whose string values are localised first

Directives are split off at parse time into an :class:`EntityRequest`, so the
reconciliation code never has to filter keys by prefix.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from civisync.domain.ports import Translator

DIRECTIVE_PREFIX: Final[str] = "_"


class InvalidSpecError(ValueError):
    """Raised when a specification document is empty, undecodable or malformed."""


class SpecBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RecordDirectives(SpecBaseModel):
    lookup: list[str] = Field(default_factory=list, alias="_lookup")
    translate: list[str] = Field(default_factory=list, alias="_translate")


class EntitiesDocument(SpecBaseModel):
    """Generic entities of one type, listed under ``_entities``."""

    entity: str
    entities: list[dict[str, Any]] = Field(alias="_entities")


class GroupDocument(RecordDirectives):
    """A top-level group record; it is always looked up before being created."""

    lookup: list[str] = Field(alias="_lookup", min_length=1)


class OptionGroupDocument(GroupDocument):
    """An OptionGroup record with its OptionValue records under ``_values``."""

    option_values: list[dict[str, Any]] = Field(default_factory=list, alias="_values")


class CustomGroupDocument(GroupDocument):
    """A CustomGroup record with its CustomField records under ``_fields``."""

    custom_fields: list[dict[str, Any]] = Field(default_factory=list, alias="_fields")


@dataclass(slots=True, frozen=True)
class EntityRequest:
    """Desired state of one record, with its directives held apart from its data."""

    fields: dict[str, Any]
    lookup_keys: tuple[str, ...] = ()
    translate_keys: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        missing = [key for key in self.lookup_keys if key not in self.fields]
        if missing:
            raise InvalidSpecError(f"Lookup fields missing from record: {', '.join(missing)}")

    @classmethod
    def from_spec(cls, spec: Mapping[str, Any]) -> EntityRequest:
        try:
            directives = RecordDirectives.model_validate(spec)
        except ValidationError as exc:
            raise InvalidSpecError(f"Invalid record directives: {exc}") from exc
        data = {
            key: value for key, value in spec.items() if not key.startswith(DIRECTIVE_PREFIX)
        }
        return cls(
            fields=data,
            lookup_keys=tuple(dict.fromkeys(directives.lookup)),
            translate_keys=tuple(directives.translate),
        )

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    def lookup_filter(self) -> dict[str, Any]:
        return {key: self.fields[key] for key in self.lookup_keys}

    def with_field(self, key: str, value: Any) -> EntityRequest:
        return replace(self, fields={**self.fields, key: value})

    def with_parent(self, key: str, value: Any) -> EntityRequest:
        """Tag the record with its parent's id and make that id part of the lookup."""

        lookup_keys = self.lookup_keys if key in self.lookup_keys else (*self.lookup_keys, key)
        return replace(self, fields={**self.fields, key: value}, lookup_keys=lookup_keys)

    def translated(self, translator: Translator, domain: str) -> EntityRequest:
        if not self.translate_keys:
            return self
        data = dict(self.fields)
        for key in self.translate_keys:
            value = data.get(key)
            if isinstance(value, str):
                data[key] = translator(value, domain)
        return replace(self, fields=data)


def read_spec_document(source: str | Path) -> dict[str, Any]:
    """Read a JSON specification document, rejecting empty or undecodable input."""

    path = Path(source)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidSpecError(f"Invalid specs in {path}: {exc}") from exc
    if not data or not isinstance(data, dict):
        raise InvalidSpecError(f"Invalid specs in {path}: expected a non-empty JSON object")
    return data


def parse_document[TDocument: SpecBaseModel](
    model: type[TDocument],
    data: Mapping[str, Any],
) -> TDocument:
    if not data:
        raise InvalidSpecError("Invalid specs: empty document")
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidSpecError(f"Invalid specs: {exc}") from exc
