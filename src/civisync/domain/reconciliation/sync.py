"""Specification-driven sync of entities, option groups and custom groups.

Every record runs through the same cycle:

- no match -> create
- one match -> update the fields that differ
- several matches -> log, mark failed and continue with the next record

Child records (option values, custom fields) are tagged with the id of their
parent, which also becomes part of their lookup.
"""

from __future__ import annotations

import gettext
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from civisync.config.sync import DEFAULT_TS_DOMAIN
from civisync.domain.encoding import implode_padded
from civisync.domain.specs import (
    CustomGroupDocument,
    EntitiesDocument,
    EntityRequest,
    OptionGroupDocument,
    parse_document,
)

from .contracts import (
    AmbiguousMatch,
    NoMatch,
    RecordOutcome,
    RecordStatus,
    SingleMatch,
    SyncResult,
    UnresolvedReferenceError,
)
from .primitives import EntityOperations, SyncLogAdapter, is_numeric, to_json

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping

    from civisync.domain.ports import EntityStore, StoredRecord, Translator

log = getLogger(__name__)

OPTION_GROUP: Final[str] = "OptionGroup"
OPTION_VALUE: Final[str] = "OptionValue"
CUSTOM_GROUP: Final[str] = "CustomGroup"
CUSTOM_FIELD: Final[str] = "CustomField"

EXTENDS_COLUMN_VALUE: Final[str] = "extends_entity_column_value"
ACTIVITY_TYPE_GROUP: Final[str] = "activity_type"

# the store does not read these back faithfully, so they join every update
CUSTOM_GROUP_ALWAYS_INCLUDED: Final[tuple[str, ...]] = (
    "extends",
    "style",
    "is_active",
    "title",
    EXTENDS_COLUMN_VALUE,
)
CUSTOM_FIELD_ALWAYS_INCLUDED: Final[tuple[str, ...]] = (
    "in_selector",
    "is_view",
    "is_searchable",
    "html_type",
    "data_type",
    "custom_group_id",
)


def gettext_translator(text: str, domain: str) -> str:
    return gettext.dgettext(domain, text)


@dataclass(slots=True)
class CustomDataSynchronizer:
    """Reconcile specification documents against the entity store."""

    store: EntityStore
    ts_domain: str = DEFAULT_TS_DOMAIN
    translator: Translator = gettext_translator
    operations: EntityOperations = field(init=False)

    def __post_init__(self) -> None:
        adapter = SyncLogAdapter(log, {"ts_domain": self.ts_domain})
        self.operations = EntityOperations(self.store, logger=adapter)

    def sync_entities(self, document: Mapping[str, Any]) -> SyncResult:
        """Sync the records listed under ``_entities`` as entities of type ``entity``."""

        spec = parse_document(EntitiesDocument, document)
        requests = [EntityRequest.from_spec(record) for record in spec.entities]

        result = SyncResult()
        for request in requests:
            outcome, _ = self._reconcile(spec.entity, self._translate(request))
            result.add(outcome)
        return result

    def sync_option_group(self, document: Mapping[str, Any]) -> SyncResult:
        """Sync one OptionGroup and the OptionValues listed under ``_values``."""

        spec = parse_document(OptionGroupDocument, document)
        group_request = EntityRequest.from_spec(document)
        value_requests = [EntityRequest.from_spec(record) for record in spec.option_values]

        result = SyncResult()
        outcome, option_group = self._reconcile(OPTION_GROUP, self._translate(group_request))
        result.add(outcome)
        if option_group is None:
            return result

        for request in value_requests:
            request = self._translate(request).with_parent("option_group_id", option_group["id"])
            outcome, _ = self._reconcile(OPTION_VALUE, request)
            result.add(outcome)
        return result

    def sync_custom_group(self, document: Mapping[str, Any]) -> SyncResult:
        """Sync one CustomGroup and the CustomFields listed under ``_fields``.

        Raises :class:`UnresolvedReferenceError` when a field names an option
        group that cannot be found; records synced before that point stay synced.
        """

        spec = parse_document(CustomGroupDocument, document)
        group_request = EntityRequest.from_spec(document)
        field_requests = [EntityRequest.from_spec(record) for record in spec.custom_fields]

        force_update = False
        if group_request.get(EXTENDS_COLUMN_VALUE) is not None:
            # never echoed back by the store, so a difference cannot be detected
            force_update = True
            group_request = group_request.with_field(
                EXTENDS_COLUMN_VALUE,
                self._extends_column_value(group_request),
            )

        result = SyncResult()
        outcome, custom_group = self._reconcile(
            CUSTOM_GROUP,
            self._translate(group_request),
            always_include=CUSTOM_GROUP_ALWAYS_INCLUDED,
            force=force_update,
        )
        result.add(outcome)
        if custom_group is None:
            return result

        for request in field_requests:
            request = self._translate(request).with_parent("custom_group_id", custom_group["id"])
            option_group = request.get("option_group_id")
            if option_group and not is_numeric(option_group):
                match = self.operations.find_unique(OPTION_GROUP, {"name": option_group})
                if not isinstance(match, SingleMatch):
                    self.operations.logger.error(
                        "Couldn't create/update CustomField, bad option_group: %s", option_group
                    )
                    raise UnresolvedReferenceError(
                        f"Unknown option group {option_group!r} for custom field "
                        f"{request.get('name')!r}",
                        result=result,
                    )
                request = request.with_field("option_group_id", match.record["id"])

            outcome, _ = self._reconcile(
                CUSTOM_FIELD,
                request,
                always_include=CUSTOM_FIELD_ALWAYS_INCLUDED,
            )
            result.add(outcome)
        return result

    def _translate(self, request: EntityRequest) -> EntityRequest:
        return request.translated(self.translator, self.ts_domain)

    def _extends_column_value(self, request: EntityRequest) -> Any:
        value = request.get(EXTENDS_COLUMN_VALUE)
        if request.get("extends") == "Activity" and isinstance(value, list | tuple):
            activity_types: list[Any] = []
            for activity_type in value:
                if not is_numeric(activity_type):
                    activity_type = self.operations.lookup_option_value(
                        ACTIVITY_TYPE_GROUP, str(activity_type)
                    )
                if activity_type:
                    activity_types.append(activity_type)
            value = activity_types

        if isinstance(value, list | tuple):
            return implode_padded(value)
        return value

    def _reconcile(
        self,
        entity: str,
        request: EntityRequest,
        *,
        always_include: Collection[str] = (),
        force: bool = False,
    ) -> tuple[RecordOutcome, StoredRecord | None]:
        match = self.operations.identify(entity, request)

        if isinstance(match, NoMatch):
            created = self.operations.create(entity, request)
            return self._outcome(entity, RecordStatus.CREATED, created, request), created

        if isinstance(match, AmbiguousMatch):
            self.operations.logger.error(
                "Couldn't create/update %s: %s", entity, to_json(request.fields)
            )
            return RecordOutcome(
                entity=entity,
                status=RecordStatus.FAILED,
                fields=dict(request.fields),
            ), None

        current = match.record
        updated = self.operations.update(
            entity,
            request,
            current,
            always_include=always_include,
            force=force,
        )
        status = RecordStatus.UNCHANGED if updated is None else RecordStatus.UPDATED
        return self._outcome(entity, status, current, request), current

    @staticmethod
    def _outcome(
        entity: str,
        status: RecordStatus,
        record: Mapping[str, Any],
        request: EntityRequest,
    ) -> RecordOutcome:
        record_id = record.get("id")
        return RecordOutcome(
            entity=entity,
            status=status,
            record_id=int(record_id) if record_id is not None else None,
            fields=dict(request.fields),
        )
