# core/map_authority.py

"""
Per-map permission decisions.

None of these checks mutate state. A map that does not exist yields
False from every check: the HTTP layer confirms existence itself and
answers NotFound, so a private map never looks different from a
missing one.
"""

from typing import Optional

from core.repository import MapRepository
from core.roles import has_permission, is_banned, is_own_scoped, is_valid_role
from models.enums import Permission
from models.map import MapAccessRead
from models.tables import Map
from models.user import Principal


class MapAuthority:
    def __init__(self, repo: MapRepository):
        self.repo = repo

    # ============================================================
    # Helpers
    # ============================================================
    def _load(self, map_id: str, principal: Optional[Principal]):
        """Return (map, role) or (None, None) when the map is missing."""
        map_ = self.repo.get_map(map_id)
        if map_ is None:
            return None, None
        role = self.repo.get_role(map_id, principal.id) if principal else None
        # A stored value outside the enumeration grants nothing
        if role is not None and not is_valid_role(role):
            role = None
        return map_, role

    @staticmethod
    def is_owner(map_: Optional[Map], principal: Optional[Principal]) -> bool:
        return bool(map_ and principal and map_.owner_id == principal.id)

    def _allows(self, map_id: str, principal: Optional[Principal], permission: Permission,
                resource_creator_id: Optional[str] = None, scoped: bool = False) -> bool:
        if principal is None:
            return False

        map_, role = self._load(map_id, principal)
        if map_ is None:
            return False

        # Owner rights are implicit and cannot be revoked
        if self.is_owner(map_, principal):
            return True

        if role is None or not has_permission(role, permission):
            return False

        if scoped and is_own_scoped(role):
            return resource_creator_id is not None and resource_creator_id == principal.id

        return True

    # ============================================================
    # Map-level checks
    # ============================================================
    def can_view(self, map_id: str, principal: Optional[Principal] = None) -> bool:
        map_, role = self._load(map_id, principal)
        if map_ is None:
            return False

        if self.is_owner(map_, principal):
            return True
        # Banned overrides public visibility for that user
        if is_banned(role):
            return False
        if map_.is_public:
            return True
        return role is not None

    def can_edit(self, map_id: str, principal: Optional[Principal]) -> bool:
        return self._allows(map_id, principal, Permission.edit)

    # ============================================================
    # Point-of-interest checks
    # ============================================================
    def can_add_poi(self, map_id: str, principal: Optional[Principal]) -> bool:
        return self._allows(map_id, principal, Permission.create)

    def can_edit_poi(self, map_id: str, principal: Optional[Principal],
                     resource_creator_id: Optional[str]) -> bool:
        return self._allows(map_id, principal, Permission.edit, resource_creator_id, scoped=True)

    def can_delete_poi(self, map_id: str, principal: Optional[Principal],
                       resource_creator_id: Optional[str]) -> bool:
        return self._allows(map_id, principal, Permission.delete, resource_creator_id, scoped=True)

    # ============================================================
    # Summary for the caller (GET /maps/{id}/access)
    # ============================================================
    def effective_access(self, map_id: str, principal: Optional[Principal]) -> Optional[MapAccessRead]:
        map_, role = self._load(map_id, principal)
        if map_ is None:
            return None

        return MapAccessRead(
            map_id=map_id,
            is_owner=self.is_owner(map_, principal),
            role=role,
            can_view=self.can_view(map_id, principal),
            can_edit=self.can_edit(map_id, principal),
            can_add_poi=self.can_add_poi(map_id, principal),
        )
