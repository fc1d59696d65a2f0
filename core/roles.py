# core/roles.py

"""
Role table: the single choke point that turns strings into roles.

Everything here is pure. Unknown roles raise InvalidRoleError, they are
never silently mapped to "no permissions".
"""

from typing import Optional, Union

from core.errors import InvalidRoleError
from core.permissions import OWN_SCOPED_ROLES, ROLE_ALIASES, ROLE_PERMISSIONS
from models.enums import Permission, Role


def parse_role(value: Union[str, Role, None]) -> Role:
    """Normalise a role name (case, whitespace, legacy alias) or raise."""
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        raise InvalidRoleError(value)

    key = value.strip().lower()
    if key in ROLE_ALIASES:
        return ROLE_ALIASES[key]
    try:
        return Role(key)
    except ValueError:
        raise InvalidRoleError(value)


def is_valid_role(value) -> bool:
    try:
        parse_role(value)
    except InvalidRoleError:
        return False
    return True


def permissions_of(role) -> frozenset:
    return ROLE_PERMISSIONS[parse_role(role)]


def has_permission(role, permission: Permission) -> bool:
    return permission in permissions_of(role)


def is_editing_role(role: Optional[str]) -> bool:
    """
    True for roles that grant edit rights. Tolerates None and unknown
    values (returns False) so stored data can be evaluated safely.
    """
    if role is None or not is_valid_role(role):
        return False
    return has_permission(role, Permission.edit)


def is_own_scoped(role) -> bool:
    return parse_role(role) in OWN_SCOPED_ROLES


def is_banned(role: Optional[str]) -> bool:
    return role is not None and is_valid_role(role) and parse_role(role) == Role.banned


def role_catalog() -> list:
    """Roles with their permissions, for UI dropdowns."""
    return [
        {
            "role": role.value,
            "permissions": sorted(p.value for p in ROLE_PERMISSIONS[role]),
            "own_resources_only": role in OWN_SCOPED_ROLES,
        }
        for role in Role
    ]
