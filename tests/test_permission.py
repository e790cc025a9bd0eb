import pytest

from slidekit.catalog import TPermission
from slidekit.permission import (
    OrganizationManagementLevel,
    Permission,
    has_organization_management_level,
    management_level_committees,
    permissions_from_groups,
)


def test_superadmin_has_any_permission():
    assert has_organization_management_level(
        "superadmin", OrganizationManagementLevel.CAN_MANAGE_ORGANIZATION
    )
    p = Permission(admin=True)
    assert p.has(TPermission.AgendaItemCanSee)
    assert p.is_admin()


def test_locked_out_user_has_nothing():
    p = Permission()
    assert not p.has(TPermission.AgendaItemCanSee)
    assert not p.in_group(30)
    assert not p.is_admin()


def test_management_level_committees():
    got = management_level_committees([1], {1: [3, 4]})
    assert got == [1, 3, 4]


def test_management_level_committees_without_children():
    assert management_level_committees([2, 5], {}) == [2, 5]
    assert management_level_committees([], {1: [3]}) == []


def test_committee_manager_of_parent_is_admin():
    committees = management_level_committees([1], {1: [3, 4]})
    assert 3 in committees
    p = Permission(admin=True)
    assert p.has(TPermission.MotionCanManage)


def test_permissions_from_groups_adds_derived():
    perms = permissions_from_groups([["motion.can_manage"], ["agenda_item.can_see_internal"]])
    assert "motion.can_manage" in perms
    assert "motion.can_see" in perms
    assert "motion.can_create" in perms
    assert "agenda_item.can_see" in perms
    assert "agenda_item.can_manage" not in perms


def test_permissions_from_groups_keeps_unknown():
    assert permissions_from_groups([["custom.thing"]]) == frozenset({"custom.thing"})


def test_permission_has_from_groups():
    perms = permissions_from_groups([["user.can_update"]])
    p = Permission(group_ids=[7], permissions=perms)
    assert p.has(TPermission.UserCanSee)
    assert p.has("user.can_see_sensitive_data")
    assert not p.has(TPermission.UserCanManage)
    assert not p.is_admin()


def test_in_group():
    p = Permission(group_ids=[1, 2])
    assert p.in_group(2)
    assert p.in_group(5, 1)
    assert not p.in_group(3, 4)
    assert not p.in_group()


def test_admin_in_every_group():
    assert Permission(admin=True).in_group(99)


@pytest.mark.parametrize(
    "user_level, level, expected",
    [
        ("superadmin", "superadmin", True),
        ("superadmin", "can_manage_users", True),
        ("can_manage_organization", "superadmin", False),
        ("can_manage_organization", "can_manage_organization", True),
        ("can_manage_organization", "can_manage_users", True),
        ("can_manage_users", "can_manage_organization", False),
        ("can_manage_users", "can_manage_users", True),
        ("", "can_manage_users", False),
        (None, "can_manage_users", False),
        ("unknown", "can_manage_users", False),
    ],
)
def test_has_organization_management_level(user_level, level, expected):
    assert has_organization_management_level(user_level, level) is expected


def test_level_enum_values():
    assert OrganizationManagementLevel("can_manage_users") is OrganizationManagementLevel.CAN_MANAGE_USERS
    assert str(OrganizationManagementLevel.SUPERADMIN) == "superadmin"