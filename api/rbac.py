"""Legajos - Role-Based Access Control (RBAC)
Role groups and the dependency that enforces them.
"""

from enum import Enum

from fastapi import Depends

from api.auth import get_current_user
from core.database import User
from core.database.models import UserRole
from core.errors import ForbiddenError


class Permission(str, Enum):
    """Granular permissions."""

    CASE_READ = "case:read"
    CASE_WRITE = "case:write"
    CASE_EXPORT = "case:export"
    PERSON_READ = "person:read"
    PERSON_WRITE = "person:write"
    SOURCE_READ = "source:read"
    SOURCE_WRITE = "source:write"
    USER_ADMIN = "user:admin"


_READ = {
    Permission.CASE_READ,
    Permission.CASE_EXPORT,
    Permission.PERSON_READ,
    Permission.SOURCE_READ,
}

# Role -> Permissions mapping
ROLE_PERMISSIONS: dict[UserRole, set[Permission]] = {
    UserRole.CONSULTANT: set(_READ),
    UserRole.OPERATOR: _READ | {
        Permission.CASE_WRITE,
        Permission.PERSON_WRITE,
        Permission.SOURCE_WRITE,
    },
    UserRole.ADMIN: {
        # Admins have all permissions
        *Permission.__members__.values()
    },
}


def get_role_permissions(role) -> set[Permission]:
    try:
        return ROLE_PERMISSIONS.get(UserRole(role), set())
    except ValueError:
        return set()


def require_role(*roles: UserRole):
    """Dependency to require one of the given roles."""
    allowed = {UserRole(role) for role in roles}

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if UserRole(current_user.role) not in allowed:
            raise ForbiddenError("Acceso denegado")
        return current_user

    return role_checker


def require_permissions(*permissions: Permission):
    """Dependency factory for requiring specific permissions."""

    async def permission_checker(current_user: User = Depends(get_current_user)) -> User:
        granted = get_role_permissions(current_user.role)
        if any(p not in granted for p in permissions):
            raise ForbiddenError("Acceso denegado")
        return current_user

    return permission_checker


# Convenience dependencies
require_admin = require_role(UserRole.ADMIN)
can_manage_cases = require_permissions(Permission.CASE_WRITE)
can_manage_persons = require_permissions(Permission.PERSON_WRITE)
can_manage_sources = require_permissions(Permission.SOURCE_WRITE)
can_export_cases = require_permissions(Permission.CASE_EXPORT)
