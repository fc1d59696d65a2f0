# core/invitation_response.py

"""
Accept / reject orchestration for a tokenized invitation.

Steps run strictly in order and any rejection short-circuits without
touching the invitation or the role table. The one exception is a freshly
created account: it is committed on its own and kept even if the
invitation is lost to a concurrent responder.
"""

from typing import Optional

from core.invitations import InvitationEngine
from core.logging_config import logger
from core.repository import MapRepository
from core.role_guard import breaks_last_editor
from core.utils import normalize_email
from models.enums import InvitationAction, InvitationStatus
from models.results import Rejection, ServiceResult
from models.user import AccountRegistration, Principal


class InvitationResponseCoordinator:
    def __init__(self, repo: MapRepository, engine: InvitationEngine, accounts, notifier=None):
        self.repo = repo
        self.engine = engine
        self.accounts = accounts
        self.notifier = notifier

    def respond(
        self,
        token: str,
        action,
        registration: Optional[AccountRegistration] = None,
        principal: Optional[Principal] = None,
    ) -> ServiceResult:
        action = InvitationAction(action)

        # -----------------------------------------------------
        # 1. Token lookup
        # -----------------------------------------------------
        invitation = self.engine.find_by_token(token)
        if invitation is None:
            return self._explain_missing(token)

        map_id = invitation.map_id
        inviter_id = invitation.inviter_id
        invitee_email = normalize_email(invitation.invitee_email)
        role = invitation.role

        # -----------------------------------------------------
        # 2. Resolve the invitee
        # -----------------------------------------------------
        account_created = False
        existing = self.accounts.find_by_email(invitee_email)

        if existing is not None:
            if principal is None:
                return ServiceResult.reject(
                    Rejection.forbidden, "Log in with the invited email address to respond"
                )
            if normalize_email(principal.email) != invitee_email:
                return ServiceResult.reject(Rejection.wrong_user)
            user_id = existing.id
            invitee_name = existing.display_name

        elif action == InvitationAction.accept:
            if registration is None or not registration.display_name or not registration.password_hash:
                return ServiceResult.reject(Rejection.registration_required)
            # Receiving the tokenized e-mail proves control of the address
            user_id, account_created = self.accounts.create_account(
                email=invitee_email,
                password_hash=registration.password_hash,
                display_name=registration.display_name,
                email_verified=True,
            )
            invitee_name = registration.display_name

        else:
            user_id = None
            invitee_name = invitee_email

        # -----------------------------------------------------
        # 3. Transition (+ role on accept)
        # -----------------------------------------------------
        if action == InvitationAction.accept:
            result = self._accept(token, map_id, user_id, role)
            status = InvitationStatus.accepted
        else:
            result = self._reject(token)
            status = InvitationStatus.rejected

        if not result.ok:
            result.data.update(user_id=user_id, email=invitee_email, account_created=account_created)
            return result

        # -----------------------------------------------------
        # 4. Tell the inviter (best-effort)
        # -----------------------------------------------------
        self._notify_inviter(inviter_id, map_id, invitee_name, status)

        return ServiceResult.success(
            status=status.value,
            map_id=map_id,
            user_id=user_id,
            email=invitee_email,
            role=role if status == InvitationStatus.accepted else None,
            account_created=account_created,
        )

    # ============================================================
    # Internals
    # ============================================================
    def _explain_missing(self, token: str) -> ServiceResult:
        invitation = self.engine.inspect_token(token)
        if invitation is None:
            return ServiceResult.reject(Rejection.not_found, "Invalid or expired invitation")

        status = self.engine.effective_status(invitation)
        if status in (InvitationStatus.accepted, InvitationStatus.rejected):
            return ServiceResult.reject(Rejection.already_processed, status=status.value)
        return ServiceResult.reject(Rejection.invitation_invalid, status=status.value)

    def _accept(self, token: str, map_id: str, user_id: str, role: str) -> ServiceResult:
        """
        One transaction: role lock, invariant checks, conditional
        transition, role upsert. Nothing persists unless all succeed.
        """
        try:
            if not self.repo.lock_map_roles(map_id):
                self.repo.rollback()
                return ServiceResult.reject(Rejection.not_found, "Map not found")

            map_ = self.repo.get_map(map_id)
            if map_.owner_id == user_id:
                self.repo.rollback()
                return ServiceResult.reject(Rejection.invalid_target, "The map owner cannot accept a role")

            current = self.repo.get_role(map_id, user_id)
            others = self.repo.count_editors(map_id, exclude_user_id=user_id)
            if breaks_last_editor(current, role, others):
                self.repo.rollback()
                return ServiceResult.reject(Rejection.last_editor_protected)

            if self.engine.transition(token, InvitationStatus.accepted, commit=False) == 0:
                self.repo.rollback()
                logger.info(f"Invitation for map {map_id} already processed by a concurrent call")
                return ServiceResult.reject(Rejection.already_processed)

            self.repo.upsert_role(map_id, user_id, role)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"User {user_id} joined map {map_id} as {role} via invitation")
        return ServiceResult.success()

    def _reject(self, token: str) -> ServiceResult:
        if self.engine.transition(token, InvitationStatus.rejected) == 0:
            return ServiceResult.reject(Rejection.already_processed)
        return ServiceResult.success()

    def _notify_inviter(self, inviter_id: str, map_id: str, invitee_name: str,
                        status: InvitationStatus) -> None:
        if self.notifier is None:
            return

        try:
            inviter = self.repo.get_user(inviter_id)
            map_ = self.repo.get_map(map_id)
            if inviter is None:
                return
            self.notifier.send_response_email(
                inviter.email,
                invitee_name,
                map_.name if map_ else "",
                status.value,
            )
        except Exception as e:
            # Never roll back an accepted/rejected invitation over e-mail
            logger.warning(f"Invitation response e-mail failed: {e}")
