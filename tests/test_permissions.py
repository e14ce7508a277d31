import pytest

from staffing_crm.core.permissions import (
    ALL_PERMISSIONS,
    CANDIDATES_READ_FULL,
    ROLE_DISPLAY_NAMES,
    can_access_full_candidate_info,
    can_delete_entity,
    can_manage_users,
    get_permissions,
    has_permission,
)
from staffing_crm.models import Role


def test_admin_has_every_permission():
    assert get_permissions(Role.ADMIN) == ALL_PERMISSIONS


@pytest.mark.parametrize(
    "role, permission, expected",
    [
        (Role.SALES, "customers:write", True),
        (Role.SALES, "candidates:write", False),
        (Role.SALES, "engineers:write", False),
        (Role.RECRUITER, "customers:write", False),
        (Role.RECRUITER, "candidates:write", True),
        (Role.RECRUITER, "projects:write", False),
        (Role.CLIENT_MANAGER, "projects:write", True),
        (Role.CLIENT_MANAGER, "project_candidates:write", True),
        (Role.CLIENT_MANAGER, "candidates:write", False),
        (Role.CLIENT_MANAGER, "users:read", False),
    ],
)
def test_role_table(role, permission, expected):
    assert has_permission(role, permission) is expected


def test_full_candidate_info():
    assert can_access_full_candidate_info(Role.RECRUITER)
    assert can_access_full_candidate_info(Role.CLIENT_MANAGER)
    assert not can_access_full_candidate_info(Role.SALES)


def test_only_admin_manages_users_and_deletes():
    assert can_manage_users(Role.ADMIN)
    assert not can_manage_users(Role.RECRUITER)
    assert can_delete_entity(Role.ADMIN, "customers")
    assert not can_delete_entity(Role.SALES, "customers")


def test_permissions_keep_table_order():
    permissions = get_permissions(Role.SALES)
    assert permissions == [p for p in ALL_PERMISSIONS if p in permissions]
    assert CANDIDATES_READ_FULL not in permissions


def test_accepts_role_strings():
    assert has_permission("RECRUITER", "candidates:write")
    assert ROLE_DISPLAY_NAMES[Role.CLIENT_MANAGER] == "Client Manager"
