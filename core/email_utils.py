# core/email_utils.py

from core.config import settings


def invitation_link(token: str) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}/invitations/{token}"


def invitation_email(inviter_name: str, map_name: str, role: str, token: str):
    """Subject and plain-text body of the invitation e-mail."""

    link = invitation_link(token)

    subject = "Invitation to collaborate on a map"
    body = f"""
Hello,

{inviter_name} invites you to collaborate on the map "{map_name}" as {role}.

Open the link below to accept or decline:

{link}

This invitation will expire in {settings.INVITATION_TTL_DAYS} days.
"""
    return subject, body


def invitation_response_email(invitee_name: str, map_name: str, status: str):
    """Subject and plain-text body of the e-mail sent back to the inviter."""

    verb = "accepted" if status == "accepted" else "rejected"

    subject = f"Invitation response - {verb.capitalize()}"
    body = f"""
Hello,

{invitee_name or "The invitee"} has {verb} your invitation to collaborate on the map "{map_name}".
"""
    return subject, body
