# core/accounts.py

from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError

from core.logging_config import logger
from core.repository import MapRepository
from models.tables import User


class AccountProvisioner:
    """
    Account lookup/creation used by the invitation flow.
    Receives an already-hashed password; hashing happens at the HTTP edge.
    """

    def __init__(self, repo: MapRepository):
        self.repo = repo

    def find_by_email(self, email: str) -> Optional[User]:
        return self.repo.find_user_by_email(email)

    def create_account(self, email: str, password_hash: str, display_name: str,
                       email_verified: bool = True) -> Tuple[str, bool]:
        """
        Create and commit the account on its own, so it survives whatever
        happens to the invitation afterwards.

        Returns (user_id, created). When a concurrent call registered the
        same address first, the existing id comes back with created=False.
        """
        try:
            with self.repo.transaction():
                user = self.repo.add_user(
                    email=email,
                    password_hash=password_hash,
                    display_name=display_name,
                    email_verified=email_verified,
                )
                user_id = user.id
        except IntegrityError:
            existing = self.repo.find_user_by_email(email)
            if existing is None:
                raise
            logger.info(f"Account for invitation already created by a concurrent call ({existing.id})")
            return existing.id, False

        logger.info(f"Account {user_id} created from invitation (pre-verified={email_verified})")
        return user_id, True
