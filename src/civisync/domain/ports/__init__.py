"""Domain port definitions for adapters."""

from __future__ import annotations

from .store import EntityStore, LookupResult, StoredRecord, Translator

__all__ = [
    "EntityStore",
    "LookupResult",
    "StoredRecord",
    "Translator",
]
