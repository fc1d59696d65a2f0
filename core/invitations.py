# core/invitations.py

"""
Invitation state machine.

    pending ──► accepted | rejected | expired | cancelled

Only `pending` rows ever change, and every change is a single
status-guarded UPDATE, so concurrent accept/reject/cancel calls resolve
to exactly one winner. Expiry is data driven: reads treat overdue
pending rows as expired, and `expire_due()` persists that periodically.
"""

import hmac
import secrets
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError

from core.config import settings
from core.errors import InvalidRoleError
from core.logging_config import logger
from core.repository import MapRepository, pending_key
from core.roles import parse_role
from core.utils import as_utc, normalize_email, utcnow
from models.enums import InvitationStatus, TERMINAL_INVITATION_STATUSES
from models.results import Rejection, ServiceResult
from models.tables import MapInvitation

TOKEN_BYTES = 32  # 256 bits


def generate_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


class InvitationEngine:
    def __init__(self, repo: MapRepository, ttl_days: Optional[int] = None,
                 clock: Callable[[], datetime] = utcnow):
        self.repo = repo
        self.ttl = timedelta(days=ttl_days if ttl_days is not None else settings.INVITATION_TTL_DAYS)
        self.clock = clock

    # ============================================================
    # Create
    # ============================================================
    def create(self, map_id: str, inviter_id: str, invitee_email: str, role) -> ServiceResult:
        """
        Create a pending invitation. The caller has already checked that
        `inviter_id` owns the map, and sends the e-mail afterwards.
        """
        try:
            role = parse_role(role)
        except InvalidRoleError as e:
            return ServiceResult.reject(Rejection.invalid_role, str(e))

        email = normalize_email(invitee_email)
        key = pending_key(map_id, email)
        now = self.clock()

        try:
            # Overdue rows for this pair no longer count as pending
            self.repo.expire_pending(now=now, key=key)
            invitation = self.repo.add_invitation(MapInvitation(
                map_id=map_id,
                inviter_id=inviter_id,
                invitee_email=email,
                role=role.value,
                token=generate_token(),
                status=InvitationStatus.pending.value,
                pending_key=key,
                created_at=now,
                expires_at=now + self.ttl,
            ))
            self.repo.commit()
        except IntegrityError:
            self.repo.rollback()
            logger.info(f"Duplicate invitation for map {map_id} rejected")
            return ServiceResult.reject(Rejection.duplicate_invitation)

        logger.info(f"Invitation {invitation.id} created for map {map_id} ({role.value})")
        return ServiceResult.success(invitation=invitation)

    # ============================================================
    # Lookups
    # ============================================================
    def find_by_token(self, token: str) -> Optional[MapInvitation]:
        """Pending, unexpired invitation or None. Expired looks like missing."""
        if not token:
            return None
        invitation = self.repo.get_invitation_by_token(token, pending_only=True, now=self.clock())
        if invitation is None or not hmac.compare_digest(invitation.token, token):
            return None
        return invitation

    def inspect_token(self, token: str) -> Optional[MapInvitation]:
        """Invitation in any status, for "no longer valid" messaging."""
        if not token:
            return None
        invitation = self.repo.get_invitation_by_token(token)
        if invitation is None or not hmac.compare_digest(invitation.token, token):
            return None
        return invitation

    def effective_status(self, invitation: MapInvitation) -> InvitationStatus:
        """Stored status, with overdue pending rows reported as expired."""
        status = InvitationStatus(invitation.status)
        if status == InvitationStatus.pending and as_utc(invitation.expires_at) <= self.clock():
            return InvitationStatus.expired
        return status

    def list_pending_for_map(self, map_id: str) -> List[MapInvitation]:
        return self.repo.list_pending_invitations(map_id=map_id, now=self.clock())

    def list_pending_for_email(self, email: str) -> List[MapInvitation]:
        return self.repo.list_pending_invitations(email=email, now=self.clock())

    # ============================================================
    # Transitions
    # ============================================================
    def transition(self, token: str, new_status: InvitationStatus, commit: bool = True) -> int:
        """
        Move a pending invitation to a terminal status.
        Returns affected rows: 0 means another caller got there first.
        """
        new_status = InvitationStatus(new_status)
        if new_status not in TERMINAL_INVITATION_STATUSES:
            raise ValueError(f"Invalid target status: {new_status}")

        affected = self.repo.transition_invitation(token, new_status, now=self.clock())
        if commit:
            self.repo.commit()
        if affected:
            logger.info(f"Invitation moved to {new_status}")
        return affected

    def cancel(self, invitation_id: str, acting_inviter_id: str) -> bool:
        """False on any mismatch, so callers can answer NotFound uniformly."""
        affected = self.repo.cancel_invitation(invitation_id, acting_inviter_id, now=self.clock())
        self.repo.commit()
        if affected:
            logger.info(f"Invitation {invitation_id} cancelled by {acting_inviter_id}")
        return affected > 0

    def expire_due(self) -> int:
        """Persist expiry of every overdue pending invitation. Idempotent."""
        affected = self.repo.expire_pending(now=self.clock())
        self.repo.commit()
        if affected:
            logger.info(f"Expired {affected} invitation(s)")
        return affected
