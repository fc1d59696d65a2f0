# models/results.py

from typing import Any, Dict, Optional
from pydantic import BaseModel

from models.enums import BaseStrEnum


# -----------------------------------------------------
# REJECTION REASONS
# -----------------------------------------------------
class Rejection(BaseStrEnum):
    """Closed set of domain outcomes other than success."""

    forbidden = "forbidden"
    not_found = "not_found"
    invalid_role = "invalid_role"
    invalid_target = "invalid_target"
    self_action_forbidden = "self_action_forbidden"
    last_editor_protected = "last_editor_protected"
    duplicate_invitation = "duplicate_invitation"
    invitation_invalid = "invitation_invalid"
    already_processed = "already_processed"  # benign: a concurrent call won
    registration_required = "registration_required"
    wrong_user = "wrong_user"


class ServiceResult(BaseModel):
    """
    Typed outcome returned by every engine operation.

    Domain failures never raise; the HTTP layer maps `reason`
    1:1 to a status code and message.
    """
    ok: bool
    reason: Optional[Rejection] = None
    detail: Optional[str] = None
    data: Dict[str, Any] = {}

    @classmethod
    def success(cls, **data) -> "ServiceResult":
        return cls(ok=True, data=data)

    @classmethod
    def reject(cls, reason: Rejection, detail: Optional[str] = None, **data) -> "ServiceResult":
        return cls(ok=False, reason=reason, detail=detail, data=data)
