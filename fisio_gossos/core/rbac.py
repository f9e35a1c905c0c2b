"""
Role-Based Access Control (RBAC) definitions and helpers.
"""
from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """
    Profile roles used for authorization.
    """

    CLIENT = "cliente"
    ADMIN = "admin"
    SUPER = "super"


class Permission(str, Enum):
    """
    Fine-grained permissions mapped to roles.
    """

    PROFILE_READ_SELF = "profile:read_self"
    PROFILE_UPDATE_SELF = "profile:update_self"
    ERRORS_REVIEW = "errors:review"
    EMAIL_LOGS_READ = "email_logs:read"
    EMAIL_LOGS_RETRY = "email_logs:retry"
    SYSTEM_LOGS_READ = "system_logs:read"
    SYSTEM_LOGS_MANAGE = "system_logs:manage"


ROLE_PERMISSIONS: dict[UserRole, frozenset[Permission]] = {
    UserRole.SUPER: frozenset(permission for permission in Permission),
    UserRole.ADMIN: frozenset(
        {
            Permission.PROFILE_READ_SELF,
            Permission.PROFILE_UPDATE_SELF,
            Permission.ERRORS_REVIEW,
            Permission.EMAIL_LOGS_READ,
            Permission.EMAIL_LOGS_RETRY,
        }
    ),
    UserRole.CLIENT: frozenset(
        {
            Permission.PROFILE_READ_SELF,
            Permission.PROFILE_UPDATE_SELF,
        }
    ),
}


def normalize_role(role: str | UserRole | None) -> UserRole:
    """
    Normalize string/enum role values to a valid ``UserRole``.

    Args:
        role: Raw role value from DB/token input.

    Returns:
        Normalized role. Falls back to ``UserRole.CLIENT`` for unknown values.
    """

    if isinstance(role, UserRole):
        return role

    if role is None:
        return UserRole.CLIENT

    try:
        return UserRole(str(role))
    except ValueError:
        return UserRole.CLIENT


def get_role_permissions(role: str | UserRole | None) -> frozenset[Permission]:
    """
    Resolve the permission set for a role.
    """

    normalized_role = normalize_role(role)
    return ROLE_PERMISSIONS.get(normalized_role, frozenset())


def has_permission(role: str | UserRole | None, permission: Permission) -> bool:
    """
    Check if role grants the required permission.

    Args:
        role: Role value.
        permission: Required permission.

    Returns:
        ``True`` if role has the permission.
    """

    return permission in get_role_permissions(role)
