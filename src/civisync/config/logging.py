"""Shared logging helpers for civisync."""

from __future__ import annotations

import logging

from .env import optional_env_var

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
# httpx logs full request URLs at INFO, and lookups carry the API keys in the query
QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(*, level: int | str | None = None, force: bool = False) -> None:
    """Initialise the root logger for batch sync output.

    ``level`` defaults to ``CIVISYNC_LOG_LEVEL`` and then to INFO. Pass
    ``force=True`` to reconfigure during tests or specialised entry points.
    """

    if level is None:
        level = optional_env_var("CIVISYNC_LOG_LEVEL", "INFO").upper()

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
