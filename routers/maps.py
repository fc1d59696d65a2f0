# routers/maps.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from core.errors import raise_for_result
from core.invitations import InvitationEngine
from core.logging_config import logger
from core.map_authority import MapAuthority
from core.repository import MapRepository
from core.role_guard import RoleMutationGuard
from core.roles import role_catalog
from core.utils import sanitize
from dependencies.auth import get_current_principal, get_optional_principal
from dependencies.services import (
    get_authority,
    get_invitation_engine,
    get_notifier,
    get_repository,
    get_role_guard,
)
from models.invitation import InvitationCreate, InvitationRead
from models.map import MapAccessRead, MapCreate, MapRead, MapUpdate, MapUserRead, RoleUpdate
from models.user import Principal

router = APIRouter(
    prefix="/maps",
    tags=["Maps"],
)


# -----------------------------------------------------
# Helpers
# -----------------------------------------------------
def get_owned_map(repo: MapRepository, authority: MapAuthority, map_id: str, principal: Principal):
    """
    404 when the map is missing or invisible to the caller,
    403 when visible but not owned.
    """
    map_ = repo.get_map(map_id)
    if map_ is None or not authority.can_view(map_id, principal):
        raise HTTPException(404, "Map not found")
    if not authority.is_owner(map_, principal):
        raise HTTPException(403, "Only the map owner can perform this action")
    return map_


# -----------------------------------------------------
# GET /maps/roles
# -----------------------------------------------------
@router.get("/roles", summary="List available roles")
def list_roles():
    return {"roles": role_catalog()}


# -----------------------------------------------------
# POST /maps
# -----------------------------------------------------
@router.post("", response_model=MapRead, status_code=201, summary="Create a map")
def create_map(
    payload: MapCreate,
    principal: Principal = Depends(get_current_principal),
    repo: MapRepository = Depends(get_repository),
):
    if repo.get_user(principal.id) is None:
        raise HTTPException(401, "Unknown user")

    data = sanitize(payload.model_dump())
    if not data["name"]:
        raise HTTPException(400, "Map name is required")

    with repo.transaction():
        map_ = repo.add_map(owner_id=principal.id, **data)
        map_id = map_.id

    logger.info(f"Map {map_id} created by {principal.id}")
    return repo.get_map(map_id)


# -----------------------------------------------------
# GET /maps/shared
# -----------------------------------------------------
@router.get("/shared", summary="Maps shared with the current user")
def list_shared_maps(
    principal: Principal = Depends(get_current_principal),
    repo: MapRepository = Depends(get_repository),
):
    return [
        {**MapRead.model_validate(map_).model_dump(), "role": role}
        for map_, role in repo.list_shared_maps(principal.id)
    ]


# -----------------------------------------------------
# GET /maps/{map_id}
# -----------------------------------------------------
@router.get("/{map_id}", response_model=MapRead, summary="Get a map")
def get_map(
    map_id: str,
    principal: Optional[Principal] = Depends(get_optional_principal),
    repo: MapRepository = Depends(get_repository),
    authority: MapAuthority = Depends(get_authority),
):
    # Same answer for missing and private so existence never leaks
    if not authority.can_view(map_id, principal):
        raise HTTPException(404, "Map not found")
    return repo.get_map(map_id)


# -----------------------------------------------------
# PUT /maps/{map_id}
# Owner or any role with edit rights; visibility is owner only
# -----------------------------------------------------
@router.put("/{map_id}", response_model=MapRead, summary="Update map details")
def update_map(
    map_id: str,
    payload: MapUpdate,
    principal: Principal = Depends(get_current_principal),
    repo: MapRepository = Depends(get_repository),
    authority: MapAuthority = Depends(get_authority),
):
    if not authority.can_view(map_id, principal):
        raise HTTPException(404, "Map not found")
    if not authority.can_edit(map_id, principal):
        raise HTTPException(403, "You do not have permission to edit this map")

    changes = sanitize(payload.model_dump(exclude_unset=True))
    if "name" in changes and not changes["name"]:
        raise HTTPException(400, "Map name cannot be empty")
    if "is_public" in changes:
        if changes["is_public"] is None:
            changes.pop("is_public")
        elif not authority.is_owner(repo.get_map(map_id), principal):
            raise HTTPException(403, "Only the map owner can change visibility")

    with repo.transaction():
        repo.update_map(map_id, changes)

    logger.info(f"Map {map_id} updated by {principal.id}")
    return repo.get_map(map_id)


# -----------------------------------------------------
# DELETE /maps/{map_id}
# -----------------------------------------------------
@router.delete("/{map_id}", summary="Delete a map (owner only)")
def delete_map(
    map_id: str,
    principal: Principal = Depends(get_current_principal),
    repo: MapRepository = Depends(get_repository),
    authority: MapAuthority = Depends(get_authority),
):
    get_owned_map(repo, authority, map_id, principal)

    with repo.transaction():
        repo.delete_map(map_id)

    logger.info(f"Map {map_id} deleted by {principal.id}")
    return {"message": "Map deleted"}


# -----------------------------------------------------
# GET /maps/{map_id}/access
# -----------------------------------------------------
@router.get("/{map_id}/access", response_model=MapAccessRead, summary="Current user's rights on a map")
def get_map_access(
    map_id: str,
    principal: Optional[Principal] = Depends(get_optional_principal),
    authority: MapAuthority = Depends(get_authority),
):
    access = authority.effective_access(map_id, principal)
    if access is None or not access.can_view:
        raise HTTPException(404, "Map not found")
    return access


# -----------------------------------------------------
# GET /maps/{map_id}/users
# -----------------------------------------------------
@router.get("/{map_id}/users", response_model=List[MapUserRead], summary="Users and roles (owner only)")
def list_map_users(
    map_id: str,
    principal: Principal = Depends(get_current_principal),
    repo: MapRepository = Depends(get_repository),
    authority: MapAuthority = Depends(get_authority),
):
    get_owned_map(repo, authority, map_id, principal)

    return [
        MapUserRead(id=user.id, email=user.email, display_name=user.display_name, role=role)
        for user, role in repo.list_map_users(map_id)
    ]


# -----------------------------------------------------
# PUT /maps/{map_id}/users/{user_id}/role
# -----------------------------------------------------
@router.put("/{map_id}/users/{user_id}/role", summary="Assign or change a user's role")
def update_user_role(
    map_id: str,
    user_id: str,
    payload: RoleUpdate,
    principal: Principal = Depends(get_current_principal),
    authority: MapAuthority = Depends(get_authority),
    guard: RoleMutationGuard = Depends(get_role_guard),
):
    if not authority.can_view(map_id, principal):
        raise HTTPException(404, "Map not found")

    result = raise_for_result(guard.assign(map_id, principal, user_id, payload.role))
    return {"message": "Role updated", **result.data}


# -----------------------------------------------------
# DELETE /maps/{map_id}/users/{user_id}/role
# -----------------------------------------------------
@router.delete("/{map_id}/users/{user_id}/role", summary="Remove a user's role")
def remove_user_role(
    map_id: str,
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    authority: MapAuthority = Depends(get_authority),
    guard: RoleMutationGuard = Depends(get_role_guard),
):
    if not authority.can_view(map_id, principal):
        raise HTTPException(404, "Map not found")

    raise_for_result(guard.remove(map_id, principal, user_id))
    return {"message": "Role removed"}


# ============================================================
# INVITATIONS (per map)
# ============================================================

# -----------------------------------------------------
# POST /maps/{map_id}/invitations
# -----------------------------------------------------
@router.post("/{map_id}/invitations", status_code=201, summary="Invite a user by e-mail (owner only)")
def send_invitation(
    map_id: str,
    payload: InvitationCreate,
    principal: Principal = Depends(get_current_principal),
    repo: MapRepository = Depends(get_repository),
    authority: MapAuthority = Depends(get_authority),
    engine: InvitationEngine = Depends(get_invitation_engine),
    notifier=Depends(get_notifier),
):
    map_ = get_owned_map(repo, authority, map_id, principal)
    map_name = map_.name

    result = raise_for_result(engine.create(map_id, principal.id, payload.email, payload.role))
    invitation = result.data["invitation"]

    inviter = repo.get_user(principal.id)
    inviter_name = inviter.display_name if inviter else (principal.display_name or principal.email)

    try:
        notifier.send_invitation_email(
            invitation.invitee_email,
            inviter_name,
            map_name,
            invitation.role,
            invitation.token,
        )
    except Exception as e:
        # The invitation stays valid; the owner can cancel and resend
        logger.warning(f"Invitation e-mail for map {map_id} failed: {e}")

    return {
        "message": "Invitation sent successfully",
        "invitation": InvitationRead.model_validate(invitation),
    }


# -----------------------------------------------------
# GET /maps/{map_id}/invitations
# -----------------------------------------------------
@router.get("/{map_id}/invitations", response_model=List[InvitationRead], summary="Pending invitations (owner only)")
def list_map_invitations(
    map_id: str,
    principal: Principal = Depends(get_current_principal),
    repo: MapRepository = Depends(get_repository),
    authority: MapAuthority = Depends(get_authority),
    engine: InvitationEngine = Depends(get_invitation_engine),
):
    get_owned_map(repo, authority, map_id, principal)
    return engine.list_pending_for_map(map_id)
