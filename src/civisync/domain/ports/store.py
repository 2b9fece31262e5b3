"""Ports for the host platform's generic entity API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

type StoredRecord = dict[str, Any]


@dataclass(slots=True)
class LookupResult:
    """Records returned by one ``get`` call against the entity store."""

    count: int
    values: list[StoredRecord] = field(default_factory=list)


@runtime_checkable
class EntityStore(Protocol):
    """Generic get/create access to the host entity store.

    ``create`` behaves as an update when ``params`` carries an ``id``.
    ``limit=None`` on ``get`` means no limit.
    """

    def get(
        self,
        entity: str,
        params: Mapping[str, Any],
        *,
        limit: int | None = None,
    ) -> LookupResult: ...

    def create(self, entity: str, params: Mapping[str, Any]) -> StoredRecord: ...


@runtime_checkable
class Translator(Protocol):
    """Localise ``text`` within the given translation ``domain``."""

    def __call__(self, text: str, domain: str) -> str: ...
