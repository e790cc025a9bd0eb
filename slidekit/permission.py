"""Permissions a user holds in a meeting, and the rules that grant them."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Mapping

from slidekit.catalog import TPermission, derived_permissions


class OrganizationManagementLevel(str, Enum):
    """Possible values of a user's organization management level."""

    NONE = ""
    SUPERADMIN = "superadmin"
    CAN_MANAGE_ORGANIZATION = "can_manage_organization"
    CAN_MANAGE_USERS = "can_manage_users"

    def __str__(self) -> str:
        return self.value


class Permission:
    """The groups and permissions a user has in one meeting.

    An admin has every permission and counts as a member of every group.
    A Permission built without arguments grants nothing, which is what a
    user without access to the meeting gets.
    """

    def __init__(
        self,
        admin: bool = False,
        group_ids: Iterable[int] = (),
        permissions: Iterable[str] = (),
    ) -> None:
        self._admin = bool(admin)
        self._group_ids = tuple(group_ids)
        self._permissions = frozenset(str(p) for p in permissions)

    def has(self, perm: str) -> bool:
        """Return True if the user holds the permission or is an admin."""
        if self._admin:
            return True
        return str(perm) in self._permissions

    def is_admin(self) -> bool:
        """Return True if the user is a meeting admin."""
        return self._admin

    def in_group(self, *args: int) -> bool:
        """Return True if the user is in any of the given groups or is an admin."""
        if self._admin:
            return True
        return any(group_id in self._group_ids for group_id in args)

    @property
    def group_ids(self) -> tuple[int, ...]:
        """The ids of the groups the user belongs to."""
        return self._group_ids

    @property
    def permissions(self) -> frozenset[str]:
        """Every permission the user holds, derived ones included."""
        return self._permissions

    def __repr__(self) -> str:
        return (
            f"Permission(admin={self._admin!r}, group_ids={self._group_ids!r}, "
            f"permissions={sorted(self._permissions)!r})"
        )


def permissions_from_groups(group_permissions: Iterable[Iterable[str]]) -> frozenset[str]:
    """Collect the permissions of several groups, adding the ones each implies."""
    collected: set[str] = set()
    for perms in group_permissions:
        for perm in perms:
            collected.add(str(perm))
            collected.update(str(derived) for derived in derived_permissions(perm))
    return frozenset(collected)


def has_organization_management_level(
    user_level: str | None, level: OrganizationManagementLevel | str
) -> bool:
    """Return True if a user's level equals or exceeds the requested level."""
    try:
        current = OrganizationManagementLevel(user_level or "")
        wanted = OrganizationManagementLevel(level)
    except ValueError:
        return False

    if current is OrganizationManagementLevel.SUPERADMIN:
        return True
    if current is OrganizationManagementLevel.CAN_MANAGE_ORGANIZATION:
        return wanted in (
            OrganizationManagementLevel.CAN_MANAGE_ORGANIZATION,
            OrganizationManagementLevel.CAN_MANAGE_USERS,
        )
    if current is OrganizationManagementLevel.CAN_MANAGE_USERS:
        return wanted is OrganizationManagementLevel.CAN_MANAGE_USERS
    return False


def management_level_committees(
    committee_ids: Iterable[int], child_ids: Mapping[int, Iterable[int]]
) -> list[int]:
    """Return the managed committees followed by all of their child committees."""
    managed = list(committee_ids)
    result = list(managed)
    for committee_id in managed:
        result.extend(child_ids.get(committee_id, ()))
    return result