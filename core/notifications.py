# core/notifications.py
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import List, Optional
from core.config import settings
from core.logging_config import logger
from core.email_utils import invitation_email, invitation_response_email


# -----------------------------------------------------
# 📧 Send email (SMTP)
# -----------------------------------------------------
def send_email(
    subject: str,
    body: str,
    to: str = None,
    recipients: Optional[List[str]] = None,
    html_body: Optional[str] = None
):
    """
    Send email via SMTP.

    Args:
        subject: Email subject
        body: Plain text email body
        to: Single recipient email
        recipients: List of recipient email addresses
        html_body: Optional HTML email body
    """
    smtp_host = settings.SMTP_HOST
    smtp_port = settings.SMTP_PORT
    smtp_user = settings.SMTP_USER
    smtp_pass = settings.SMTP_PASS

    recipient_list = recipients or ([to] if to else [])

    if not recipient_list:
        logger.warning("No recipients specified; skipping email.")
        return False

    if not all([smtp_host, smtp_port, smtp_user, smtp_pass]):
        logger.warning("Email credentials missing; skipping email.")
        return False

    try:
        msg = MIMEMultipart('alternative')
        msg["From"] = settings.SMTP_FROM or smtp_user
        msg["To"] = ", ".join(recipient_list)
        msg["Subject"] = subject

        msg.attach(MIMEText(body, "plain"))
        if html_body:
            msg.attach(MIMEText(html_body, "html"))

        with smtplib.SMTP_SSL(smtp_host, smtp_port) as server:
            server.login(smtp_user, smtp_pass)
            server.send_message(msg)

        logger.info(f"Email sent to {', '.join(recipient_list)}")
        return True

    except Exception as e:
        logger.error(f"Email failed: {e}")
        raise


# -----------------------------------------------------
# Invitation notifier
# -----------------------------------------------------
class EmailNotifier:
    """
    Notification collaborator used by the invitation flow.
    Both methods may raise; callers treat them as best-effort.
    """

    def send_invitation_email(self, email: str, inviter_name: str, map_name: str,
                              role: str, token: str):
        subject, body = invitation_email(inviter_name, map_name, role, token)
        return send_email(subject=subject, body=body, to=email)

    def send_response_email(self, inviter_email: str, invitee_name: str, map_name: str,
                            status: str):
        subject, body = invitation_response_email(invitee_name, map_name, status)
        return send_email(subject=subject, body=body, to=inviter_email)
