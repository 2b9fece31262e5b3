"""Result types shared by the reconciliation primitives and sync procedures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from civisync.domain.ports import StoredRecord


class IdentificationStatus(StrEnum):
    """Outcome of looking a record up by its identifying fields."""

    NOT_FOUND = "not_found"
    FOUND = "found"
    AMBIGUOUS = "ambiguous"


@dataclass(slots=True, kw_only=True)
class NoMatch:
    """No record matches the lookup; the caller may create one."""

    status: Literal[IdentificationStatus.NOT_FOUND] = IdentificationStatus.NOT_FOUND


@dataclass(slots=True, kw_only=True)
class SingleMatch:
    """Exactly one record matches the lookup."""

    record: StoredRecord
    status: Literal[IdentificationStatus.FOUND] = IdentificationStatus.FOUND


@dataclass(slots=True, kw_only=True)
class AmbiguousMatch:
    """Several records match; the caller must neither create nor update."""

    selector: dict[str, Any]
    count: int
    status: Literal[IdentificationStatus.AMBIGUOUS] = IdentificationStatus.AMBIGUOUS


type Identification = NoMatch | SingleMatch | AmbiguousMatch


class RecordStatus(StrEnum):
    """What happened to one record during a sync."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    FAILED = "failed"


@dataclass(slots=True, kw_only=True)
class RecordOutcome:
    entity: str
    status: RecordStatus
    record_id: int | None = None
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SyncResult:
    """Outcome of one sync call, top-level record first."""

    outcomes: list[RecordOutcome] = field(default_factory=list)

    def add(self, outcome: RecordOutcome) -> None:
        self.outcomes.append(outcome)

    def count(self, status: RecordStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def created(self) -> int:
        return self.count(RecordStatus.CREATED)

    @property
    def updated(self) -> int:
        return self.count(RecordStatus.UPDATED)

    @property
    def unchanged(self) -> int:
        return self.count(RecordStatus.UNCHANGED)

    @property
    def failed(self) -> int:
        return self.count(RecordStatus.FAILED)


class UnresolvedReferenceError(LookupError):
    """Raised when a named reference inside a record cannot be resolved to an id."""

    def __init__(self, message: str, *, result: SyncResult | None = None) -> None:
        super().__init__(message)
        self.result = result
