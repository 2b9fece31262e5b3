"""Padded-list encoding used by the host for multi-value columns."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Sequence

VALUE_SEPARATOR: Final[str] = "\x01"


def implode_padded(
    values: Sequence[object] | str | None,
    *,
    separator: str = VALUE_SEPARATOR,
) -> str | None:
    """Serialise ``values`` as ``<sep>a<sep>b<sep>``; strings pass through unchanged."""

    if values is None:
        return None
    if isinstance(values, str):
        return values
    if not values:
        return ""
    return separator + separator.join(str(value) for value in values) + separator


def explode_padded(text: str | None, *, separator: str = VALUE_SEPARATOR) -> list[str]:
    stripped = text.strip(separator) if text else ""
    if not stripped:
        return []
    return stripped.split(separator)
