"""Errors raised while reading civisync settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting is present but unusable, such as a malformed REST endpoint."""


class MissingConfigurationError(ConfigurationError):
    """One or more required environment variables are unset or blank."""
