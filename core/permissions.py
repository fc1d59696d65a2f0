# ============================================
# CENTRALIZED ROLE → PERMISSIONS MAP
# ============================================
from types import MappingProxyType

from models.enums import Permission, Role

ROLE_PERMISSIONS = MappingProxyType({

    # =====================================================
    # VIEWER: read-only
    # =====================================================
    Role.viewer: frozenset({Permission.view}),

    # =====================================================
    # EDITOR (ALL): full editor on every resource
    # =====================================================
    Role.editor_all: frozenset({
        Permission.view,
        Permission.create,
        Permission.edit,
        Permission.delete,
    }),

    # =====================================================
    # EDITOR (OWN): edit/delete only what they created
    # =====================================================
    Role.editor_own: frozenset({
        Permission.view,
        Permission.create,
        Permission.edit,
        Permission.delete,
    }),

    # =====================================================
    # CONTRIBUTOR: may add points, never edit or delete
    # =====================================================
    Role.contributor: frozenset({
        Permission.view,
        Permission.create,
    }),

    # =====================================================
    # BANNED: nothing, overrides public visibility
    # =====================================================
    Role.banned: frozenset(),
})

# Roles whose edit/delete rights only cover resources they created
OWN_SCOPED_ROLES = frozenset({Role.editor_own})

# Legacy two-role names, accepted as input only
ROLE_ALIASES = MappingProxyType({
    "editor": Role.editor_all,
})
