"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from civisync.adapters.civicrm import build_civicrm_entity_store
from civisync.config import get_sync_config, load_env_file
from civisync.domain.fields import ResolverContext
from civisync.domain.reconciliation import CustomDataSynchronizer
from civisync.domain.specs import read_spec_document

if TYPE_CHECKING:
    from pathlib import Path

    from civisync.config import CiviCrmConfig
    from civisync.domain.ports import EntityStore, Translator
    from civisync.domain.reconciliation import SyncResult


log = getLogger(__name__)


def build_entity_store(config: CiviCrmConfig | None = None) -> EntityStore:
    """Return the CiviCRM-backed store, reading ``.env`` and the environment if needed."""

    if config is None:
        load_env_file()
    return build_civicrm_entity_store(config)


def build_resolver_context(store: EntityStore | None = None) -> ResolverContext:
    return ResolverContext.for_store(store or build_entity_store())


def build_synchronizer(
    *,
    store: EntityStore | None = None,
    translator: Translator | None = None,
    ts_domain: str | None = None,
) -> CustomDataSynchronizer:
    effective_store = store or build_entity_store()
    effective_domain = ts_domain or get_sync_config().ts_domain
    if translator is None:
        return CustomDataSynchronizer(effective_store, ts_domain=effective_domain)
    return CustomDataSynchronizer(
        effective_store,
        ts_domain=effective_domain,
        translator=translator,
    )


def sync_entities_file(
    source: str | Path,
    *,
    synchronizer: CustomDataSynchronizer | None = None,
) -> SyncResult:
    """Synchronise the generic entities described in ``source``."""

    document = read_spec_document(source)
    effective = synchronizer or build_synchronizer()
    log.info("Starting entity sync from %s", source)
    result = effective.sync_entities(document)
    _log_result(source, result)
    return result


def sync_option_group_file(
    source: str | Path,
    *,
    synchronizer: CustomDataSynchronizer | None = None,
) -> SyncResult:
    """Synchronise the option group and option values described in ``source``."""

    document = read_spec_document(source)
    effective = synchronizer or build_synchronizer()
    log.info("Starting option group sync from %s", source)
    result = effective.sync_option_group(document)
    _log_result(source, result)
    return result


def sync_custom_group_file(
    source: str | Path,
    *,
    synchronizer: CustomDataSynchronizer | None = None,
) -> SyncResult:
    """Synchronise the custom group and custom fields described in ``source``."""

    document = read_spec_document(source)
    effective = synchronizer or build_synchronizer()
    log.info("Starting custom group sync from %s", source)
    result = effective.sync_custom_group(document)
    _log_result(source, result)
    return result


def _log_result(source: str | Path, result: SyncResult) -> None:
    log.info(
        f"Finished sync of {source}: created={result.created}, updated={result.updated}, "
        f"unchanged={result.unchanged}, failed={result.failed}"
    )
