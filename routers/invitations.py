# routers/invitations.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from core.auth_helpers import create_access_token, hash_password
from core.errors import raise_for_result
from core.invitation_response import InvitationResponseCoordinator
from core.invitations import InvitationEngine
from core.logging_config import logger
from core.utils import as_utc
from core.repository import MapRepository
from dependencies.auth import get_current_principal, get_optional_principal
from dependencies.services import get_coordinator, get_invitation_engine, get_repository
from models.enums import InvitationAction
from models.invitation import InvitationRead, InvitationResponse, InvitationTokenRead
from models.results import Rejection
from models.user import AccountRegistration, Principal

router = APIRouter(
    prefix="/invitations",
    tags=["Invitations"],
)


# -----------------------------------------------------
# GET /invitations/me
# -----------------------------------------------------
@router.get("/me", response_model=List[InvitationRead], summary="Pending invitations for the current user")
def list_my_invitations(
    principal: Principal = Depends(get_current_principal),
    engine: InvitationEngine = Depends(get_invitation_engine),
):
    return engine.list_pending_for_email(principal.email)


# -----------------------------------------------------
# POST /invitations/cleanup
# -----------------------------------------------------
@router.post("/cleanup", summary="Expire overdue invitations")
def cleanup_invitations(
    principal: Principal = Depends(get_current_principal),
    engine: InvitationEngine = Depends(get_invitation_engine),
):
    expired = engine.expire_due()
    return {"message": "Expired invitations cleaned up successfully", "expired": expired}


# -----------------------------------------------------
# GET /invitations/{token}
# Public: details for the "respond to invitation" page
# -----------------------------------------------------
@router.get("/{token}", response_model=InvitationTokenRead, summary="Check an invitation token")
def check_invitation_token(
    token: str,
    repo: MapRepository = Depends(get_repository),
    engine: InvitationEngine = Depends(get_invitation_engine),
):
    invitation = engine.inspect_token(token)
    if invitation is None:
        raise HTTPException(404, "Invalid or expired invitation")

    map_ = repo.get_map(invitation.map_id)
    inviter = repo.get_user(invitation.inviter_id)

    return InvitationTokenRead(
        map_id=invitation.map_id,
        map_name=map_.name if map_ else None,
        inviter_name=inviter.display_name if inviter else None,
        email=invitation.invitee_email,
        role=invitation.role,
        status=engine.effective_status(invitation).value,
        expires_at=as_utc(invitation.expires_at),
        has_account=repo.find_user_by_email(invitation.invitee_email) is not None,
    )


# -----------------------------------------------------
# POST /invitations/{token}/response
# Auth optional: required only when the invitee already has an account
# -----------------------------------------------------
@router.post("/{token}/response", summary="Accept or reject an invitation")
def respond_to_invitation(
    token: str,
    payload: InvitationResponse,
    response: Response,
    principal: Optional[Principal] = Depends(get_optional_principal),
    coordinator: InvitationResponseCoordinator = Depends(get_coordinator),
):
    registration = None
    if payload.registration_data is not None:
        registration = AccountRegistration(
            display_name=payload.registration_data.display_name.strip(),
            password_hash=hash_password(payload.registration_data.password),
        )

    result = coordinator.respond(token, payload.action, registration, principal)

    # A new account is logged in even if a concurrent call won the invitation
    if result.data.get("account_created"):
        response.headers["X-Auth-Token"] = create_access_token(
            result.data["user_id"],
            result.data["email"],
            registration.display_name if registration else None,
        )

    raise_for_result(result)

    if result.reason == Rejection.already_processed:
        return {"message": "Invitation already processed", "status": "already_processed"}

    status = result.data["status"]
    accepted = payload.action == InvitationAction.accept
    logger.info(f"Invitation for map {result.data['map_id']} {status}")
    return {
        "message": f"Invitation {status} successfully",
        "status": status,
        "redirectTo": f"/maps/{result.data['map_id']}" if accepted else "/",
    }


# -----------------------------------------------------
# DELETE /invitations/{invitation_id}
# -----------------------------------------------------
@router.delete("/{invitation_id}", summary="Cancel a pending invitation (map owner only)")
def cancel_invitation(
    invitation_id: str,
    principal: Principal = Depends(get_current_principal),
    repo: MapRepository = Depends(get_repository),
    engine: InvitationEngine = Depends(get_invitation_engine),
):
    not_found = HTTPException(404, "Invitation not found or already processed")

    invitation = repo.get_invitation(invitation_id)
    if invitation is None:
        raise not_found

    # Non-owners get the same answer as a missing invitation
    map_ = repo.get_map(invitation.map_id)
    if map_ is None or map_.owner_id != principal.id:
        raise not_found

    if not engine.cancel(invitation_id, principal.id):
        raise not_found

    return {"message": "Invitation cancelled successfully"}
