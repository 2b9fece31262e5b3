"""Plone permission lookups over contact groups and facility relationships.

Two permission types exist:

- ``PloneGroup``: membership in a group flagged ``plone_group.is_plone_group``,
  reported by group title
- ``Facility``: a "Bearbeitungsberechtigt für Anlage" relationship to an
  organisation of sub type ``Anlage``, reported by its facility code

Custom fields are addressed by name and resolved through a ResolverContext.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from civisync.domain.fields import get_custom_field_key

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from civisync.domain.fields import ResolverContext
    from civisync.domain.ports import EntityStore, StoredRecord

log = getLogger(__name__)

PLONE_GROUP: Final[str] = "PloneGroup"
FACILITY: Final[str] = "Facility"
PERMISSION_TYPES: Final[tuple[str, ...]] = (PLONE_GROUP, FACILITY)

FACILITY_RELATIONSHIP: Final[dict[str, str]] = {
    "name_a_b": "Bearbeitungsberechtigt für Anlage",
    "name_b_a": "Bearbeitungsberechtigter Benutzer",
}
FACILITY_CONTACT: Final[dict[str, str]] = {
    "contact_type": "Organization",
    "contact_sub_type": "Anlage",
}

type UserPermissions = dict[str, dict[str, list[str]]]


class PermissionQueryError(ValueError):
    """Raised when a permission query is malformed or cannot be answered."""


def requested_permission_types(value: str | Sequence[str] | None) -> tuple[str, ...]:
    """Normalise the requested types; a single string is accepted."""

    if not value:
        return ()
    requested = (value,) if isinstance(value, str) else tuple(value)
    unknown = [item for item in requested if item not in PERMISSION_TYPES]
    if unknown:
        raise PermissionQueryError(f"Unknown permission type(s) {', '.join(unknown)}.")
    return requested


def plone_permissions(
    store: EntityStore,
    resolver: ResolverContext,
    *,
    permission_types: str | Sequence[str] | None = None,
    plone_username: str | None = None,
    contact_id: int | None = None,
) -> list[str]:
    """List the permissions of one contact, or every permission without a contact."""

    types = requested_permission_types(permission_types) or PERMISSION_TYPES

    contact: StoredRecord | None = None
    if plone_username:
        username_key = _custom_field_key(resolver, "plone_individual", "plone_username")
        contact = _get_single(store, "Contact", {username_key: plone_username, "return": "group"})
    if contact_id:
        contact = _get_single(store, "Contact", {"id": contact_id, "return": "group"})

    permissions: list[str] = []
    if PLONE_GROUP in types:
        groups = _plone_groups(store, resolver, title=None)
        if contact is None:
            group_ids: Iterable[str] = groups
        else:
            group_ids = [group_id for group_id in _split_groups(contact) if group_id in groups]
        permissions.extend(str(groups[group_id]["title"]) for group_id in group_ids)

    if FACILITY in types:
        code_key = _custom_field_key(resolver, "Anlagendaten", "plone_facility_code")
        facilities = _facilities(store, code_key=code_key, facility_code=None)
        if contact is None:
            facility_ids: Iterable[str] = facilities
        else:
            relationship_type = _get_single(store, "RelationshipType", FACILITY_RELATIONSHIP)
            relationships = store.get(
                "Relationship",
                {"relationship_type_id": relationship_type["id"], "contact_id_a": contact["id"]},
            )
            facility_ids = [str(record["contact_id_b"]) for record in relationships.values]
        permissions.extend(
            str(facilities[facility_id].get(code_key))
            for facility_id in facility_ids
            if facility_id in facilities
        )

    return permissions


def plone_users(
    store: EntityStore,
    resolver: ResolverContext,
    *,
    permission_types: str | Sequence[str] | None = None,
    permission_id: str | None = None,
) -> UserPermissions:
    """Map each Plone user name to its permissions, grouped by permission type.

    ``permission_id`` narrows the result to one group title or facility code and
    requires exactly one permission type. Contacts without a Plone user name
    are reported under the empty name.
    """

    requested = requested_permission_types(permission_types)
    if permission_id and len(requested) != 1:
        raise PermissionQueryError(
            "A single permission type is required when given a permission ID."
        )
    types = requested or PERMISSION_TYPES

    username_key = _custom_field_key(resolver, "plone_individual", "plone_username")
    users: UserPermissions = {}

    if PLONE_GROUP in types:
        groups = _plone_groups(store, resolver, title=permission_id)
        if groups:
            contacts = store.get(
                "Contact",
                {"group": {"IN": list(groups)}, "return": [username_key, "group"]},
            )
            for contact in contacts.values:
                username = contact.get(username_key)
                for group_id in _split_groups(contact):
                    if group_id in groups:
                        _add_permission(users, username, PLONE_GROUP, groups[group_id]["title"])

    if FACILITY in types:
        code_key = _custom_field_key(resolver, "Anlagendaten", "plone_facility_code")
        relationship_type = _get_single(store, "RelationshipType", FACILITY_RELATIONSHIP)
        facilities = _facilities(store, code_key=code_key, facility_code=permission_id)
        if facilities:
            relationships = store.get(
                "Relationship",
                {
                    "relationship_type_id": relationship_type["id"],
                    "contact_id_b": {"IN": list(facilities)},
                },
            )
            for relationship in relationships.values:
                facility = facilities.get(str(relationship["contact_id_b"]))
                if facility is None:
                    continue
                contact = _get_single(
                    store,
                    "Contact",
                    {"id": relationship["contact_id_a"], "return": username_key},
                )
                _add_permission(users, contact.get(username_key), FACILITY, facility.get(code_key))

    log.debug("Resolved permissions for %s Plone users", len(users))
    return users


def _custom_field_key(resolver: ResolverContext, group_name: str, field_name: str) -> str:
    key = get_custom_field_key(resolver, group_name, field_name)
    if key is None:
        raise PermissionQueryError(f"Unknown custom field {group_name}.{field_name}")
    return key


def _get_single(store: EntityStore, entity: str, params: Mapping[str, Any]) -> StoredRecord:
    result = store.get(entity, params, limit=2)
    if result.count != 1 or not result.values:
        raise PermissionQueryError(f"Expected one {entity} record, found {result.count}")
    return result.values[0]


def _index_by_id(records: Iterable[StoredRecord]) -> dict[str, StoredRecord]:
    return {str(record["id"]): record for record in records}


def _split_groups(contact: Mapping[str, Any]) -> list[str]:
    groups = contact.get("groups") or ""
    return [group_id.strip() for group_id in str(groups).split(",") if group_id.strip()]


def _plone_groups(
    store: EntityStore,
    resolver: ResolverContext,
    *,
    title: str | None,
) -> dict[str, StoredRecord]:
    flag_key = _custom_field_key(resolver, "plone_group", "is_plone_group")
    params: dict[str, Any] = {flag_key: 1}
    if title:
        params["title"] = title
    return _index_by_id(store.get("Group", params).values)


def _facilities(
    store: EntityStore,
    *,
    code_key: str,
    facility_code: str | None,
) -> dict[str, StoredRecord]:
    params: dict[str, Any] = {**FACILITY_CONTACT, "return": code_key}
    if facility_code:
        params[code_key] = facility_code
    return _index_by_id(store.get("Contact", params).values)


def _add_permission(
    users: UserPermissions,
    username: object,
    permission_type: str,
    value: object,
) -> None:
    name = "" if username is None else str(username)
    users.setdefault(name, {}).setdefault(permission_type, []).append(str(value))
