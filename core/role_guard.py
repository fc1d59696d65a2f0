# core/role_guard.py

"""
Role mutation guard.

`validate_role_change` is the pure rule set. `RoleMutationGuard.apply`
runs it inside one transaction together with the editor count it needs
and the write it approves, so two concurrent demotions on the same map
cannot both see "another editor remains".
"""

from typing import Optional

from core.errors import InvalidRoleError
from core.logging_config import logger
from core.repository import MapRepository
from core.roles import is_editing_role, parse_role
from models.enums import Role
from models.results import Rejection, ServiceResult
from models.tables import Map
from models.user import Principal


def _parse_or_none(new_role) -> Optional[Role]:
    try:
        return parse_role(new_role)
    except InvalidRoleError:
        return None


def breaks_last_editor(current_role: Optional[str], new_role, other_editor_count: int) -> bool:
    """
    True when the change would take away the only remaining editing role.
    `new_role` is None for a removal; unparseable values count as non-editing.
    """
    if not is_editing_role(current_role):
        return False
    if other_editor_count > 0:
        return False
    return not is_editing_role(_parse_or_none(new_role) if new_role is not None else None)


def validate_role_change(
    map_: Map,
    acting: Principal,
    target_user_id: str,
    new_role,
    current_target_role: Optional[str],
    other_editor_count: int,
) -> ServiceResult:
    """
    Checks, first failure wins:
      1. no self-ban, no self-removal (whoever the caller is)
      2. only the owner may assign/remove roles
      3. the owner's own authority is not a role
      4. last-editor protection
      5. the new role must exist
    """
    if acting is not None and target_user_id == acting.id:
        if new_role is None:
            return ServiceResult.reject(Rejection.self_action_forbidden, "You cannot remove your own role")
        if _parse_or_none(new_role) == Role.banned:
            return ServiceResult.reject(Rejection.self_action_forbidden, "You cannot ban yourself")

    if acting is None or map_.owner_id != acting.id:
        return ServiceResult.reject(Rejection.forbidden, "Only the map owner can manage roles")

    if target_user_id == map_.owner_id:
        return ServiceResult.reject(Rejection.invalid_target, "Cannot change the owner's role")

    if breaks_last_editor(current_target_role, new_role, other_editor_count):
        return ServiceResult.reject(Rejection.last_editor_protected)

    if new_role is not None and _parse_or_none(new_role) is None:
        return ServiceResult.reject(Rejection.invalid_role, f"Invalid role: {new_role}")

    return ServiceResult.success()


class RoleMutationGuard:
    def __init__(self, repo: MapRepository):
        self.repo = repo

    def assign(self, map_id: str, acting: Principal, target_user_id: str, new_role) -> ServiceResult:
        return self.apply(map_id, acting, target_user_id, new_role)

    def remove(self, map_id: str, acting: Principal, target_user_id: str) -> ServiceResult:
        return self.apply(map_id, acting, target_user_id, None)

    def apply(self, map_id: str, acting: Principal, target_user_id: str, new_role) -> ServiceResult:
        """Validate and persist one role upsert (new_role) or removal (None)."""
        try:
            result = self._apply_locked(map_id, acting, target_user_id, new_role)
        except Exception:
            self.repo.rollback()
            raise

        if result.ok:
            self.repo.commit()
            action = f"set to {result.data['role']}" if new_role is not None else "removed"
            logger.info(f"Map {map_id}: role of user {target_user_id} {action} by {acting.id}")
        else:
            self.repo.rollback()
            logger.info(f"Map {map_id}: role change for {target_user_id} rejected ({result.reason})")
        return result

    def _apply_locked(self, map_id, acting, target_user_id, new_role) -> ServiceResult:
        if not self.repo.lock_map_roles(map_id):
            return ServiceResult.reject(Rejection.not_found, "Map not found")

        map_ = self.repo.get_map(map_id)
        current = self.repo.get_role(map_id, target_user_id)
        others = self.repo.count_editors(map_id, exclude_user_id=target_user_id)

        verdict = validate_role_change(map_, acting, target_user_id, new_role, current, others)
        if not verdict.ok:
            return verdict

        if new_role is None:
            if not self.repo.delete_role(map_id, target_user_id):
                return ServiceResult.reject(Rejection.not_found, "User has no role on this map")
            return ServiceResult.success(map_id=map_id, user_id=target_user_id, role=None)

        if self.repo.get_user(target_user_id) is None:
            return ServiceResult.reject(Rejection.not_found, "User not found")

        role = parse_role(new_role)
        self.repo.upsert_role(map_id, target_user_id, role.value)
        return ServiceResult.success(map_id=map_id, user_id=target_user_id, role=role.value)
