"""Generic identify, create and update operations against the entity store."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

from .contracts import AmbiguousMatch, NoMatch, SingleMatch

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping, MutableMapping

    from civisync.domain.ports import EntityStore, StoredRecord
    from civisync.domain.specs import EntityRequest

    from .contracts import Identification

log = logging.getLogger(__name__)

LOOKUP_LIMIT = 2


class SyncLogAdapter(logging.LoggerAdapter):
    """Prefix every message with the translation domain of the running sync."""

    def process(
        self,
        msg: Any,
        kwargs: MutableMapping[str, Any],
    ) -> tuple[Any, MutableMapping[str, Any]]:
        ts_domain = self.extra.get("ts_domain") if self.extra else None
        return f"({ts_domain}) {msg}", kwargs


def to_json(data: Mapping[str, Any]) -> str:
    return json.dumps(data, default=str, ensure_ascii=False)


def is_numeric(value: object) -> bool:
    """Finite numbers and numeric strings; ``"nan"`` and ``"inf"`` are names."""

    if isinstance(value, bool) or not isinstance(value, int | float | str):
        return False
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return False
    return number.is_finite()


def _comparable(value: object) -> object:
    # the store reads back every scalar as a string: 1, True, "1" and "1.0" are equal
    if isinstance(value, bool):
        return Decimal(int(value))
    if value is None:
        return ""
    if isinstance(value, int | float | str):
        text = str(value).strip()
        try:
            number = Decimal(text)
        except InvalidOperation:
            return text
        return number if number.is_finite() else text
    return value


def values_differ(requested: object, current: object) -> bool:
    if requested == current:
        return False
    return _comparable(requested) != _comparable(current)


@dataclass(slots=True)
class EntityOperations:
    """Identify, create and update single records of any entity type."""

    store: EntityStore
    logger: logging.Logger | logging.LoggerAdapter[logging.Logger] = field(default=log)

    def find_unique(self, entity: str, selector: Mapping[str, Any]) -> Identification:
        """Look up the single ``entity`` record matching ``selector``.

        An empty selector never reaches the store and counts as no match.
        """

        if not selector:
            return NoMatch()
        result = self.store.get(entity, selector, limit=LOOKUP_LIMIT)
        if result.count == 0 or not result.values:
            return NoMatch()
        if result.count == 1:
            return SingleMatch(record=result.values[0])
        self.logger.error("Bad %s lookup selector: %s", entity, to_json(selector))
        return AmbiguousMatch(selector=dict(selector), count=result.count)

    def identify(self, entity: str, request: EntityRequest) -> Identification:
        selector = request.lookup_filter()
        self.logger.debug("LOOKUP %s: %s", entity, to_json(selector))
        return self.find_unique(entity, selector)

    def create(self, entity: str, request: EntityRequest) -> StoredRecord:
        self.logger.info("CREATE %s: %s", entity, to_json(request.fields))
        return self.store.create(entity, dict(request.fields))

    def update(
        self,
        entity: str,
        request: EntityRequest,
        current: Mapping[str, Any],
        *,
        always_include: Collection[str] = (),
        force: bool = False,
    ) -> StoredRecord | None:
        """Push the fields of ``request`` that differ from ``current``.

        Returns ``None`` without calling the store when nothing differs and
        ``force`` is off. Fields named in ``always_include`` join every patch,
        taken from the request, else from the current record, else left out.
        """

        patch = {
            key: value
            for key, value in request.fields.items()
            if key not in current or values_differ(value, current[key])
        }
        if not patch and not force:
            self.logger.debug("UNCHANGED %s %s", entity, current.get("id"))
            return None

        patch["id"] = current["id"]
        for key in always_include:
            if request.get(key) is not None:
                patch[key] = request.fields[key]
            elif current.get(key) is not None:
                patch[key] = current[key]

        self.logger.info("UPDATE %s: %s", entity, to_json(patch))
        return self.store.create(entity, patch)

    def lookup_option_value(self, option_group: str, name: str) -> Any:
        """Return the ``value`` of the option called ``name`` in ``option_group``."""

        match = self.find_unique("OptionValue", {"option_group_id": option_group, "name": name})
        if isinstance(match, SingleMatch):
            return match.record.get("value")
        return None
