# dependencies/services.py

"""
Request-scoped wiring: one Session → one repository → engine objects.
Tests override `get_session` (or `get_notifier`) on the app.
"""

from fastapi import Depends
from sqlmodel import Session

from core.accounts import AccountProvisioner
from core.invitation_response import InvitationResponseCoordinator
from core.invitations import InvitationEngine
from core.map_authority import MapAuthority
from core.notifications import EmailNotifier
from core.repository import MapRepository
from core.role_guard import RoleMutationGuard
from database import get_session


def get_repository(session: Session = Depends(get_session)) -> MapRepository:
    return MapRepository(session)


def get_notifier() -> EmailNotifier:
    return EmailNotifier()


def get_authority(repo: MapRepository = Depends(get_repository)) -> MapAuthority:
    return MapAuthority(repo)


def get_role_guard(repo: MapRepository = Depends(get_repository)) -> RoleMutationGuard:
    return RoleMutationGuard(repo)


def get_invitation_engine(repo: MapRepository = Depends(get_repository)) -> InvitationEngine:
    return InvitationEngine(repo)


def get_coordinator(
    repo: MapRepository = Depends(get_repository),
    engine: InvitationEngine = Depends(get_invitation_engine),
    notifier=Depends(get_notifier),
) -> InvitationResponseCoordinator:
    return InvitationResponseCoordinator(repo, engine, AccountProvisioner(repo), notifier)
