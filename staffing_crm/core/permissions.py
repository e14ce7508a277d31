"""
Role-based permissions.

Static mapping of each role to the permissions it grants. Routes check
permissions through `require_permission` in core.auth.
"""

from typing import Dict, FrozenSet, List

from staffing_crm.models.enums import Role

CUSTOMERS_READ = "customers:read"
CUSTOMERS_WRITE = "customers:write"
CUSTOMERS_DELETE = "customers:delete"
PROJECTS_READ = "projects:read"
PROJECTS_WRITE = "projects:write"
PROJECTS_DELETE = "projects:delete"
PROJECT_UPDATES_READ = "project_updates:read"
PROJECT_UPDATES_WRITE = "project_updates:write"
CANDIDATES_READ = "candidates:read"
CANDIDATES_READ_FULL = "candidates:read:full"
CANDIDATES_WRITE = "candidates:write"
CANDIDATES_DELETE = "candidates:delete"
ENGINEERS_READ = "engineers:read"
ENGINEERS_WRITE = "engineers:write"
ENGINEERS_DELETE = "engineers:delete"
PROJECT_CANDIDATES_READ = "project_candidates:read"
PROJECT_CANDIDATES_WRITE = "project_candidates:write"
PROJECT_CANDIDATES_DELETE = "project_candidates:delete"
NOTIFICATIONS_READ = "notifications:read"
USERS_READ = "users:read"
USERS_WRITE = "users:write"
USERS_DELETE = "users:delete"
SETTINGS_READ = "settings:read"
SETTINGS_WRITE = "settings:write"

ALL_PERMISSIONS: List[str] = [
    CUSTOMERS_READ, CUSTOMERS_WRITE, CUSTOMERS_DELETE,
    PROJECTS_READ, PROJECTS_WRITE, PROJECTS_DELETE,
    PROJECT_UPDATES_READ, PROJECT_UPDATES_WRITE,
    CANDIDATES_READ, CANDIDATES_READ_FULL, CANDIDATES_WRITE, CANDIDATES_DELETE,
    ENGINEERS_READ, ENGINEERS_WRITE, ENGINEERS_DELETE,
    PROJECT_CANDIDATES_READ, PROJECT_CANDIDATES_WRITE, PROJECT_CANDIDATES_DELETE,
    NOTIFICATIONS_READ,
    USERS_READ, USERS_WRITE, USERS_DELETE,
    SETTINGS_READ, SETTINGS_WRITE,
]

ROLE_PERMISSIONS: Dict[Role, FrozenSet[str]] = {
    Role.ADMIN: frozenset(ALL_PERMISSIONS),
    Role.SALES: frozenset({
        CUSTOMERS_READ, CUSTOMERS_WRITE,
        PROJECTS_READ, PROJECTS_WRITE,
        PROJECT_UPDATES_READ, PROJECT_UPDATES_WRITE,
        CANDIDATES_READ,
        ENGINEERS_READ,
        PROJECT_CANDIDATES_READ,
        NOTIFICATIONS_READ,
    }),
    Role.RECRUITER: frozenset({
        CUSTOMERS_READ,
        PROJECTS_READ,
        PROJECT_UPDATES_READ, PROJECT_UPDATES_WRITE,
        CANDIDATES_READ, CANDIDATES_READ_FULL, CANDIDATES_WRITE,
        ENGINEERS_READ, ENGINEERS_WRITE,
        PROJECT_CANDIDATES_READ, PROJECT_CANDIDATES_WRITE,
        NOTIFICATIONS_READ,
    }),
    Role.CLIENT_MANAGER: frozenset({
        CUSTOMERS_READ,
        PROJECTS_READ, PROJECTS_WRITE,
        PROJECT_UPDATES_READ, PROJECT_UPDATES_WRITE,
        CANDIDATES_READ, CANDIDATES_READ_FULL,
        ENGINEERS_READ,
        PROJECT_CANDIDATES_READ, PROJECT_CANDIDATES_WRITE,
        NOTIFICATIONS_READ,
    }),
}

ROLE_DISPLAY_NAMES: Dict[Role, str] = {
    Role.ADMIN: "Administrator",
    Role.SALES: "Sales",
    Role.RECRUITER: "Recruiter",
    Role.CLIENT_MANAGER: "Client Manager",
}


def has_permission(role: Role, permission: str) -> bool:
    return permission in ROLE_PERMISSIONS.get(Role(role), frozenset())


def get_permissions(role: Role) -> List[str]:
    """Permissions granted to a role, in table order."""
    granted = ROLE_PERMISSIONS.get(Role(role), frozenset())
    return [p for p in ALL_PERMISSIONS if p in granted]


def can_access_full_candidate_info(role: Role) -> bool:
    return has_permission(role, CANDIDATES_READ_FULL)


def can_manage_users(role: Role) -> bool:
    return has_permission(role, USERS_WRITE)


def can_delete_entity(role: Role, entity: str) -> bool:
    """Delete permission for an entity name such as "customers" or "projects"."""
    return has_permission(role, f"{entity}:delete")
