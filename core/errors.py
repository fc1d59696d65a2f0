# core/errors.py

from fastapi import HTTPException

from models.results import Rejection, ServiceResult


class InvalidRoleError(ValueError):
    """Raised by the role table for any value outside the enumeration."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid role: {value!r}")


# -----------------------------------------------------
# Rejection → HTTP status
# -----------------------------------------------------
REJECTION_STATUS = {
    Rejection.forbidden: 403,
    Rejection.not_found: 404,
    Rejection.invalid_role: 400,
    Rejection.invalid_target: 400,
    Rejection.self_action_forbidden: 400,
    Rejection.last_editor_protected: 409,
    Rejection.duplicate_invitation: 409,
    Rejection.invitation_invalid: 410,
    Rejection.already_processed: 200,
    Rejection.registration_required: 400,
    Rejection.wrong_user: 403,
}

REJECTION_MESSAGES = {
    Rejection.forbidden: "You do not have permission to perform this action",
    Rejection.not_found: "Not found",
    Rejection.invalid_role: "Invalid role",
    Rejection.invalid_target: "This user's role cannot be changed",
    Rejection.self_action_forbidden: "You cannot ban yourself or remove your own role",
    Rejection.last_editor_protected: "Cannot remove or downgrade the last editor of this map",
    Rejection.duplicate_invitation: "An invitation is already pending for this email",
    Rejection.invitation_invalid: "This invitation is no longer valid",
    Rejection.already_processed: "Invitation already processed",
    Rejection.registration_required: "Registration data required for new account",
    Rejection.wrong_user: "You must be logged in with the invited email address",
}


def rejection_to_http(result: ServiceResult) -> HTTPException:
    """
    Convert a rejected ServiceResult into an HTTPException.
    Returns (doesn't raise) so caller can customize or re-raise.
    """
    reason = result.reason
    return HTTPException(
        status_code=REJECTION_STATUS.get(reason, 400),
        detail={
            "error": reason.value if reason else "error",
            "message": result.detail or REJECTION_MESSAGES.get(reason, "Request rejected"),
        },
    )


def raise_for_result(result: ServiceResult) -> ServiceResult:
    """
    Pass through successful and benign results, raise for the rest.
    `already_processed` is benign and is returned as-is.
    """
    if result.ok or result.reason == Rejection.already_processed:
        return result
    raise rejection_to_http(result)
