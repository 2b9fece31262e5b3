"""Application configuration helpers."""

from __future__ import annotations

from .civicrm import CiviCrmConfig, get_civicrm_config
from .env import load_env_file, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .sync import DEFAULT_TS_DOMAIN, SyncConfig, get_sync_config

__all__ = [
    "DEFAULT_TS_DOMAIN",
    "CiviCrmConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SyncConfig",
    "configure_logging",
    "get_civicrm_config",
    "get_sync_config",
    "load_env_file",
    "optional_env_var",
    "require_env_vars",
]
