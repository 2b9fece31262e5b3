"""Pydantic models describing CiviCRM API v3 REST payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CiviCrmBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ApiError(CiviCrmBaseModel):
    is_error: Literal[1]
    error_message: str = "Unknown CiviCRM API error"
    error_code: str | None = None

    @field_validator("error_code", mode="before")
    @classmethod
    def _stringify_code(cls, value: object) -> object:
        if value is None:
            return None
        return str(value)


class ApiResponse(CiviCrmBaseModel):
    is_error: Literal[0] = 0
    count: int = 0
    id: int | None = None
    values: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("values", mode="before")
    @classmethod
    def _normalize_values(cls, value: object) -> object:
        # without ``sequential`` the API keys records by id
        if isinstance(value, Mapping):
            return list(cast(Mapping[str, object], value).values())
        if value is None:
            return []
        return value

    @field_validator("id", mode="before")
    @classmethod
    def _parse_id(cls, value: object) -> object:
        if value in (None, ""):
            return None
        return value
