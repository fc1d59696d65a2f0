from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# MAP ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """Per-map role held by a non-owner user."""

    viewer = "viewer"
    editor_all = "editor_all"
    editor_own = "editor_own"  # edit/delete limited to own resources
    contributor = "contributor"
    banned = "banned"  # revokes view, even on public maps


# -----------------------------------------------------
# PERMISSION
# -----------------------------------------------------
class Permission(BaseStrEnum):
    view = "view"
    create = "create"
    edit = "edit"
    delete = "delete"


# -----------------------------------------------------
# INVITATION STATUS
# -----------------------------------------------------
class InvitationStatus(BaseStrEnum):
    """Invitation lifecycle. Only pending ever transitions."""

    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    expired = "expired"
    cancelled = "cancelled"


TERMINAL_INVITATION_STATUSES = frozenset({
    InvitationStatus.accepted,
    InvitationStatus.rejected,
    InvitationStatus.expired,
    InvitationStatus.cancelled,
})


# -----------------------------------------------------
# INVITATION ACTION
# -----------------------------------------------------
class InvitationAction(BaseStrEnum):
    accept = "accept"
    reject = "reject"
