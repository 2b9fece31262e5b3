"""Public interface for the CiviCRM API v3 adapter."""

from __future__ import annotations

from .client import CiviCrmAPIError, CiviCrmEntityStore, build_civicrm_entity_store
from .schema import ApiError, ApiResponse

__all__ = [
    "ApiError",
    "ApiResponse",
    "CiviCrmAPIError",
    "CiviCrmEntityStore",
    "build_civicrm_entity_store",
]
