# tests/test_invitations.py

from datetime import timedelta, timezone

import pytest

from core.invitations import InvitationEngine
from core.utils import as_utc, utcnow
from models.enums import InvitationStatus
from models.results import Rejection


def create(invitations, map_id, owner, email="e@x.com", role="viewer"):
    result = invitations.create(map_id, owner.id, email, role)
    assert result.ok, result
    return result.data["invitation"]


def force_overdue(repo, invitation_id):
    invitation = repo.get_invitation(invitation_id)
    invitation.expires_at = utcnow() - timedelta(minutes=1)
    repo.session.add(invitation)
    repo.commit()


# ============================================================
# create
# ============================================================
def test_create_pending_invitation(invitations, private_map, owner):
    invitation = create(invitations, private_map, owner, email="  E@X.com ")

    assert invitation.status == "pending"
    assert invitation.invitee_email == "e@x.com"
    assert len(invitation.token) == 64
    assert invitation.expires_at - invitation.created_at == timedelta(days=7)


def test_create_normalises_legacy_role(invitations, private_map, owner):
    assert create(invitations, private_map, owner, role="editor").role == "editor_all"


def test_create_rejects_invalid_role(invitations, private_map, owner):
    result = invitations.create(private_map, owner.id, "e@x.com", "owner")
    assert result.reason == Rejection.invalid_role


def test_tokens_are_unique(invitations, private_map, owner):
    first = create(invitations, private_map, owner, email="a@x.com")
    second = create(invitations, private_map, owner, email="b@x.com")
    assert first.token != second.token


def test_duplicate_then_expire_then_recreate(repo, invitations, private_map, owner):
    first = create(invitations, private_map, owner)
    first_id = first.id

    duplicate = invitations.create(private_map, owner.id, "E@x.com", "editor_all")
    assert duplicate.reason == Rejection.duplicate_invitation

    force_overdue(repo, first_id)
    assert invitations.expire_due() == 1

    assert invitations.create(private_map, owner.id, "e@x.com", "viewer").ok
    assert repo.get_invitation(first_id).status == "expired"


def test_overdue_pending_row_does_not_block_create(repo, invitations, private_map, owner):
    first_id = create(invitations, private_map, owner).id
    force_overdue(repo, first_id)

    # No sweep has run yet
    assert invitations.create(private_map, owner.id, "e@x.com", "viewer").ok


def test_same_email_on_another_map_is_fine(invitations, private_map, public_map, owner):
    create(invitations, private_map, owner)
    create(invitations, public_map, owner)


# ============================================================
# Lookups
# ============================================================
def test_find_by_token_only_returns_live_invitations(repo, invitations, private_map, owner):
    invitation = create(invitations, private_map, owner)
    token, invitation_id = invitation.token, invitation.id

    assert invitations.find_by_token(token).id == invitation_id
    assert invitations.find_by_token("nope") is None
    assert invitations.find_by_token("") is None

    force_overdue(repo, invitation_id)
    assert invitations.find_by_token(token) is None


def test_inspect_token_reports_effective_status(repo, invitations, private_map, owner):
    invitation = create(invitations, private_map, owner)
    token, invitation_id = invitation.token, invitation.id
    force_overdue(repo, invitation_id)

    inspected = invitations.inspect_token(token)

    assert inspected.status == "pending"
    assert invitations.effective_status(inspected) == InvitationStatus.expired
    assert invitations.inspect_token("nope") is None


def test_clock_drives_expiry(repo, private_map, owner):
    now = utcnow()
    engine = InvitationEngine(repo, ttl_days=7, clock=lambda: now)
    token = engine.create(private_map, owner.id, "e@x.com", "viewer").data["invitation"].token

    later = InvitationEngine(repo, ttl_days=7, clock=lambda: now + timedelta(days=8))

    assert engine.find_by_token(token) is not None
    assert later.find_by_token(token) is None
    assert later.expire_due() == 1
    assert engine.find_by_token(token) is None


def test_pending_listings(invitations, private_map, public_map, owner):
    create(invitations, private_map, owner, email="a@x.com")
    create(invitations, private_map, owner, email="b@x.com")
    create(invitations, public_map, owner, email="a@x.com")

    assert len(invitations.list_pending_for_map(private_map)) == 2
    assert len(invitations.list_pending_for_email("A@x.com")) == 2


# ============================================================
# Transitions
# ============================================================
def test_transition_is_single_use(repo, invitations, private_map, owner):
    invitation = create(invitations, private_map, owner)
    token, invitation_id = invitation.token, invitation.id

    assert invitations.transition(token, InvitationStatus.accepted) == 1
    assert invitations.transition(token, InvitationStatus.rejected) == 0

    stored = repo.get_invitation(invitation_id)
    assert stored.status == "accepted"
    assert stored.pending_key is None
    assert stored.responded_at is not None


def test_transition_to_pending_is_refused(invitations, private_map, owner):
    token = create(invitations, private_map, owner).token
    with pytest.raises(ValueError):
        invitations.transition(token, InvitationStatus.pending)


def test_terminal_invitation_frees_the_pair(invitations, private_map, owner):
    token = create(invitations, private_map, owner).token
    invitations.transition(token, InvitationStatus.rejected)

    assert invitations.create(private_map, owner.id, "e@x.com", "viewer").ok


def test_cancel_requires_matching_inviter(repo, invitations, private_map, owner, alice):
    invitation_id = create(invitations, private_map, owner).id

    assert invitations.cancel(invitation_id, alice.id) is False
    assert invitations.cancel("missing", owner.id) is False
    assert invitations.cancel(invitation_id, owner.id) is True
    assert invitations.cancel(invitation_id, owner.id) is False

    assert repo.get_invitation(invitation_id).status == "cancelled"


def test_cancel_loses_to_earlier_response(invitations, private_map, owner):
    invitation = create(invitations, private_map, owner)
    invitation_id, token = invitation.id, invitation.token

    invitations.transition(token, InvitationStatus.accepted)

    assert invitations.cancel(invitation_id, owner.id) is False


def test_expire_due_is_idempotent(repo, invitations, private_map, owner):
    live_token = create(invitations, private_map, owner, email="live@x.com").token
    overdue_id = create(invitations, private_map, owner, email="old@x.com").id
    force_overdue(repo, overdue_id)

    assert invitations.expire_due() == 1
    assert invitations.expire_due() == 0
    assert invitations.find_by_token(live_token) is not None


def test_timestamps_are_timezone_aware(repo, invitations, private_map, owner):
    assert utcnow().tzinfo is timezone.utc

    invitation = create(invitations, private_map, owner)
    invitation_id, token = invitation.id, invitation.token

    stored = as_utc(repo.get_invitation(invitation_id).expires_at)
    assert stored.utcoffset() == timedelta(0)
    assert stored > utcnow()

    force_overdue(repo, invitation_id)

    assert invitations.effective_status(invitations.inspect_token(token)) == InvitationStatus.expired
    assert invitations.expire_due() == 1
    assert repo.get_invitation(invitation_id).status == "expired"
