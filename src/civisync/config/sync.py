"""Defaults for specification-driven synchronisation."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var

DEFAULT_TS_DOMAIN = "de.systopia.itadapi"


@dataclass(frozen=True, slots=True)
class SyncConfig:
    ts_domain: str = DEFAULT_TS_DOMAIN


def get_sync_config() -> SyncConfig:
    return SyncConfig(ts_domain=optional_env_var("CIVISYNC_TS_DOMAIN", DEFAULT_TS_DOMAIN))
