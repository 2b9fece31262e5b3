"""Create-or-update reconciliation of configuration entities.

Layered flow:
1) parse a specification document into entity requests
2) identify each request against the store by its lookup fields
3) create missing records, update the differing fields of found ones
4) report one outcome per record
"""

from __future__ import annotations

from .contracts import (
    AmbiguousMatch,
    Identification,
    IdentificationStatus,
    NoMatch,
    RecordOutcome,
    RecordStatus,
    SingleMatch,
    SyncResult,
    UnresolvedReferenceError,
)
from .primitives import EntityOperations, values_differ
from .sync import CustomDataSynchronizer, gettext_translator

__all__ = [
    "AmbiguousMatch",
    "CustomDataSynchronizer",
    "EntityOperations",
    "Identification",
    "IdentificationStatus",
    "NoMatch",
    "RecordOutcome",
    "RecordStatus",
    "SingleMatch",
    "SyncResult",
    "UnresolvedReferenceError",
    "gettext_translator",
    "values_differ",
]
