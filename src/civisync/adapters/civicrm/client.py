"""HTTP client implementing the entity store port on the CiviCRM API v3 REST interface."""

from __future__ import annotations

import asyncio
import json
from logging import getLogger
from typing import TYPE_CHECKING, Any

from civisync.adapters.http_resilience import ResilientClient
from civisync.config.civicrm import CiviCrmConfig, get_civicrm_config
from civisync.domain.ports import EntityStore, LookupResult

from .schema import ApiError, ApiResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from civisync.config.http_resilience import ResilienceConfig
    from civisync.domain.ports import StoredRecord

log = getLogger(__name__)

# ``options.limit = 0`` lifts the API's default limit of 25 records
UNLIMITED = 0


class CiviCrmAPIError(RuntimeError):
    """Raised when the CiviCRM API returns an application-level error."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class CiviCrmEntityStore:
    """Blocking ``get``/``create`` calls against one CiviCRM site."""

    def __init__(
        self,
        *,
        config: CiviCrmConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def get(
        self,
        entity: str,
        params: Mapping[str, Any],
        *,
        limit: int | None = None,
    ) -> LookupResult:
        options = dict(params.get("options") or {})
        options["limit"] = UNLIMITED if limit is None else limit
        payload = {**params, "sequential": 1, "options": options}
        response = self.call(entity, "get", payload)
        return LookupResult(count=response.count, values=response.values)

    def create(self, entity: str, params: Mapping[str, Any]) -> StoredRecord:
        response = self.call(entity, "create", {**params, "sequential": 1})
        if response.values:
            return response.values[0]
        if response.id is not None:
            return {**params, "id": response.id}
        raise CiviCrmAPIError(f"{entity}.create returned no record")

    def call(self, entity: str, action: str, params: Mapping[str, Any]) -> ApiResponse:
        return asyncio.run(self._call_async(entity=entity, action=action, params=params))

    async def _call_async(
        self,
        *,
        entity: str,
        action: str,
        params: Mapping[str, Any],
    ) -> ApiResponse:
        form = {
            "entity": entity,
            "action": action,
            "api_key": self._config.api_key,
            "key": self._config.site_key,
            "json": json.dumps(params, default=str),
        }
        async with self._client_factory(self._resilience) as client:
            if action == "get":
                response = await client.get(self._config.rest_url, params=form)
            else:
                response = await client.post(self._config.rest_url, data=form)
        response.raise_for_status()

        payload = response.json()
        if isinstance(payload, dict) and payload.get("is_error"):
            error_payload = ApiError.model_validate(payload)
            log.error(f"CiviCRM API error {entity}.{action}: {error_payload.error_message}")
            raise CiviCrmAPIError(
                error_payload.error_message, code=error_payload.error_code
            ) from None

        if not isinstance(payload, dict):
            raise CiviCrmAPIError(f"Unexpected CiviCRM response payload for {entity}.{action}")

        return ApiResponse.model_validate(payload)


def build_civicrm_entity_store(config: CiviCrmConfig | None = None) -> CiviCrmEntityStore:
    return CiviCrmEntityStore(config=config or get_civicrm_config())


if TYPE_CHECKING:
    _store_check: EntityStore = build_civicrm_entity_store()
