from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from civisync.config import (
    DEFAULT_TS_DOMAIN,
    ConfigurationError,
    MissingConfigurationError,
    RetryPolicy,
    configure_logging,
    get_civicrm_config,
    get_sync_config,
    load_env_file,
    optional_env_var,
    require_env_vars,
)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_lists_all_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.setenv("MISSING_A", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_optional_env_var_falls_back_on_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPTIONAL_VAR", " ")

    assert optional_env_var("OPTIONAL_VAR", "fallback") == "fallback"


def test_civicrm_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CIVICRM_REST_URL", "https://crm.example.org/rest.php")
    monkeypatch.setenv("CIVICRM_API_KEY", "user-key")
    monkeypatch.setenv("CIVICRM_SITE_KEY", "site-key")

    config = get_civicrm_config()

    assert config.rest_url == "https://crm.example.org/rest.php"
    assert config.api_key == "user-key"
    assert config.site_key == "site-key"
    assert config.resilience.base_url == config.rest_url
    assert config.resilience.ratelimit is not None
    assert "POST" not in config.resilience.retry.allowed_methods


def test_civicrm_config_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CIVICRM_REST_URL", "https://crm.example.org/rest.php")
    monkeypatch.delenv("CIVICRM_API_KEY", raising=False)
    monkeypatch.delenv("CIVICRM_SITE_KEY", raising=False)

    with pytest.raises(MissingConfigurationError, match="CIVICRM_API_KEY, CIVICRM_SITE_KEY"):
        get_civicrm_config()


def test_sync_config_defaults_translation_domain(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CIVISYNC_TS_DOMAIN", raising=False)
    assert get_sync_config().ts_domain == DEFAULT_TS_DOMAIN

    monkeypatch.setenv("CIVISYNC_TS_DOMAIN", "org.example.custom")
    assert get_sync_config().ts_domain == "org.example.custom"


def test_load_env_file_keeps_existing_values(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("CIVISYNC_DOTENV_A=from-file\nCIVISYNC_DOTENV_B=from-file\n")
    monkeypatch.setenv("CIVISYNC_DOTENV_A", "from-env")
    monkeypatch.delenv("CIVISYNC_DOTENV_B", raising=False)

    try:
        assert load_env_file(env_file) is True
        assert os.environ["CIVISYNC_DOTENV_A"] == "from-env"
        assert os.environ["CIVISYNC_DOTENV_B"] == "from-file"
    finally:
        os.environ.pop("CIVISYNC_DOTENV_B", None)


def test_retry_policy_builds_retry() -> None:
    retry = RetryPolicy(total=5).build()

    assert retry.total == 5


def test_configure_logging_reads_level_from_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: list[dict[str, object]] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setenv("CIVISYNC_LOG_LEVEL", "debug")
    httpx_logger = logging.getLogger("httpx")
    previous_level = httpx_logger.level

    try:
        configure_logging()
        assert httpx_logger.level == logging.WARNING
    finally:
        httpx_logger.setLevel(previous_level)

    assert calls[0]["level"] == "DEBUG"
    assert calls[0]["force"] is False
    assert "%(name)s" in str(calls[0]["format"])


def test_civicrm_config_rejects_non_http_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CIVICRM_REST_URL", "crm.example.org/rest.php")
    monkeypatch.setenv("CIVICRM_API_KEY", "user-key")
    monkeypatch.setenv("CIVICRM_SITE_KEY", "site-key")

    with pytest.raises(ConfigurationError, match="CIVICRM_REST_URL"):
        get_civicrm_config()
