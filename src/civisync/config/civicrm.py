"""CiviCRM REST API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

CIVICRM_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class CiviCrmConfig:
    """Holds the endpoint and credentials of the CiviCRM API v3 REST interface."""

    rest_url: str
    api_key: str
    site_key: str
    resilience: ResilienceConfig


def get_civicrm_config(*, resilience: ResilienceConfig | None = None) -> CiviCrmConfig:
    values = require_env_vars(("CIVICRM_REST_URL", "CIVICRM_API_KEY", "CIVICRM_SITE_KEY"))
    rest_url = values["CIVICRM_REST_URL"].strip()
    if not rest_url.startswith(("http://", "https://")):
        raise ConfigurationError(f"CIVICRM_REST_URL must be an http(s) URL, got {rest_url!r}")
    return CiviCrmConfig(
        rest_url=rest_url,
        api_key=values["CIVICRM_API_KEY"],
        site_key=values["CIVICRM_SITE_KEY"],
        resilience=resilience
        or ResilienceConfig(
            name="civicrm",
            base_url=rest_url,
            timeout_seconds=CIVICRM_TIMEOUT_SECONDS,
            retry=RetryPolicy(),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers={"Accept": "application/json"},
        ),
    )
