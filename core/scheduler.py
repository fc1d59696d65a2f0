# core/scheduler.py
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlmodel import Session

from core.config import settings
from core.invitations import InvitationEngine
from core.logging_config import logger
from core.repository import MapRepository


def run_invitation_expiry(bind=None) -> int:
    """Persist expiry of overdue pending invitations. Returns rows expired."""
    if bind is None:
        from database import engine as bind

    try:
        with Session(bind) as session:
            expired = InvitationEngine(MapRepository(session)).expire_due()
        logger.info(f"[SCHEDULER] Invitation expiry sweep done ({expired} expired)")
        return expired
    except Exception as e:
        logger.error(f"[SCHEDULER] Invitation expiry sweep failed: {e}", exc_info=True)
        return 0


def start_scheduler() -> BackgroundScheduler:
    """
    Initialize the APScheduler background process.
    Runs the expiry sweep every INVITATION_CLEANUP_HOURS.
    """
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        run_invitation_expiry,
        trigger=IntervalTrigger(hours=settings.INVITATION_CLEANUP_HOURS),
        id="invitation_expiry_job",
        replace_existing=True,
    )

    scheduler.start()
    logger.info(f"Scheduler started. Invitation expiry every {settings.INVITATION_CLEANUP_HOURS}h.")
    return scheduler
