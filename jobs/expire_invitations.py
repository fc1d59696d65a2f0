# jobs/expire_invitations.py

from core.scheduler import run_invitation_expiry
from database import create_db_and_tables


def run():
    """
    CLI entry point for the invitation expiry sweep.
    This is what an external cron job calls when the in-process
    scheduler is disabled.
    """
    create_db_and_tables()
    run_invitation_expiry()


if __name__ == "__main__":
    run()
