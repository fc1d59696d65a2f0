# core/repository.py

"""
SQLModel-backed storage for maps, roles, users and invitations.

Methods never commit on their own: callers group writes with
`repo.transaction()`. All status changes are single conditional UPDATE
statements whose rowcount tells the caller whether they won.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, update
from sqlmodel import Session, select

from core.logging_config import logger
from core.roles import is_editing_role
from core.utils import normalize_email, utcnow
from models.enums import InvitationStatus, Role
from models.tables import Category, Map, MapInvitation, MapUserRole, PointOfInterest, User

EDITING_ROLES = [role.value for role in Role if is_editing_role(role)]


def pending_key(map_id: str, email: str) -> str:
    return f"{map_id}:{normalize_email(email)}"


class MapRepository:
    def __init__(self, session: Session):
        self.session = session

    # ============================================================
    # Transactions
    # ============================================================
    @contextmanager
    def transaction(self):
        try:
            yield self
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    def _execute(self, statement) -> int:
        """Run a bulk UPDATE/DELETE in the session's transaction, return rowcount."""
        self.session.flush()
        result = self.session.connection().execute(statement)
        # Loaded rows may now be stale
        self.session.expire_all()
        return result.rowcount

    # ============================================================
    # Users
    # ============================================================
    def get_user(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def find_user_by_email(self, email: str) -> Optional[User]:
        return self.session.exec(
            select(User).where(User.email == normalize_email(email))
        ).first()

    def add_user(self, email: str, password_hash: str, display_name: str,
                 email_verified: bool = False) -> User:
        user = User(
            email=normalize_email(email),
            password_hash=password_hash,
            display_name=display_name,
            email_verified=email_verified,
        )
        self.session.add(user)
        self.session.flush()
        return user

    # ============================================================
    # Maps
    # ============================================================
    def get_map(self, map_id: str) -> Optional[Map]:
        return self.session.get(Map, map_id)

    def add_map(self, owner_id: str, name: str, is_public: bool = False,
                description: Optional[str] = None, image_url: Optional[str] = None) -> Map:
        map_ = Map(
            owner_id=owner_id,
            name=name,
            is_public=is_public,
            description=description,
            image_url=image_url,
        )
        self.session.add(map_)
        self.session.flush()
        return map_

    def delete_map(self, map_id: str) -> int:
        """Delete a map and everything hanging off it."""
        self._execute(delete(MapUserRole).where(MapUserRole.map_id == map_id))
        self._execute(delete(MapInvitation).where(MapInvitation.map_id == map_id))
        self._execute(delete(PointOfInterest).where(PointOfInterest.map_id == map_id))
        self._execute(delete(Category).where(Category.map_id == map_id))
        return self._execute(delete(Map).where(Map.id == map_id))

    def update_map(self, map_id: str, changes: dict) -> int:
        if not changes:
            return 0
        return self._execute(
            update(Map).where(Map.id == map_id).values(**changes, updated_at=utcnow())
        )

    def lock_map_roles(self, map_id: str) -> bool:
        """
        Bump the map's roles_version. Being the first write of a role
        mutation transaction, this takes the row (PostgreSQL) or database
        (SQLite) write lock, so concurrent mutations on the same map run
        one after the other. Returns False if the map does not exist.
        """
        affected = self._execute(
            update(Map)
            .where(Map.id == map_id)
            .values(roles_version=Map.roles_version + 1)
        )
        return affected == 1

    def list_shared_maps(self, user_id: str) -> List[Tuple[Map, str]]:
        rows = self.session.exec(
            select(Map, MapUserRole.role)
            .join(MapUserRole, MapUserRole.map_id == Map.id)
            .where(MapUserRole.user_id == user_id)
            .where(MapUserRole.role != Role.banned.value)
        ).all()
        return list(rows)

    # ============================================================
    # Roles
    # ============================================================
    def get_role(self, map_id: str, user_id: Optional[str]) -> Optional[str]:
        if not user_id:
            return None
        row = self.session.get(MapUserRole, {"map_id": map_id, "user_id": user_id})
        return row.role if row else None

    def list_map_users(self, map_id: str) -> List[Tuple[User, str]]:
        rows = self.session.exec(
            select(User, MapUserRole.role)
            .join(MapUserRole, MapUserRole.user_id == User.id)
            .where(MapUserRole.map_id == map_id)
        ).all()
        return list(rows)

    def count_editors(self, map_id: str, exclude_user_id: Optional[str] = None) -> int:
        query = (
            select(func.count())
            .select_from(MapUserRole)
            .where(MapUserRole.map_id == map_id)
            .where(MapUserRole.role.in_(EDITING_ROLES))
        )
        if exclude_user_id:
            query = query.where(MapUserRole.user_id != exclude_user_id)
        return self.session.exec(query).one()

    def upsert_role(self, map_id: str, user_id: str, role: str) -> None:
        row = self.session.get(MapUserRole, {"map_id": map_id, "user_id": user_id})
        if row:
            row.role = role
        else:
            self.session.add(MapUserRole(map_id=map_id, user_id=user_id, role=role))
        self.session.flush()

    def delete_role(self, map_id: str, user_id: str) -> int:
        return self._execute(
            delete(MapUserRole)
            .where(MapUserRole.map_id == map_id)
            .where(MapUserRole.user_id == user_id)
        )

    # ============================================================
    # Invitations
    # ============================================================
    def add_invitation(self, invitation: MapInvitation) -> MapInvitation:
        """Insert; raises IntegrityError if the pending_key is taken."""
        self.session.add(invitation)
        self.session.flush()
        return invitation

    def get_invitation_by_token(self, token: str, pending_only: bool = False,
                                now: Optional[datetime] = None) -> Optional[MapInvitation]:
        query = select(MapInvitation).where(MapInvitation.token == token)
        if pending_only:
            query = (
                query
                .where(MapInvitation.status == InvitationStatus.pending.value)
                .where(MapInvitation.expires_at > (now or utcnow()))
            )
        return self.session.exec(query).first()

    def get_invitation(self, invitation_id: str) -> Optional[MapInvitation]:
        return self.session.get(MapInvitation, invitation_id)

    def transition_invitation(self, token: str, new_status: InvitationStatus,
                              now: Optional[datetime] = None) -> int:
        """Conditional update: applies only while the row is still pending."""
        return self._execute(
            update(MapInvitation)
            .where(MapInvitation.token == token)
            .where(MapInvitation.status == InvitationStatus.pending.value)
            .values(status=new_status.value, pending_key=None, responded_at=now or utcnow())
        )

    def cancel_invitation(self, invitation_id: str, inviter_id: str,
                          now: Optional[datetime] = None) -> int:
        return self._execute(
            update(MapInvitation)
            .where(MapInvitation.id == invitation_id)
            .where(MapInvitation.inviter_id == inviter_id)
            .where(MapInvitation.status == InvitationStatus.pending.value)
            .values(
                status=InvitationStatus.cancelled.value,
                pending_key=None,
                responded_at=now or utcnow(),
            )
        )

    def expire_pending(self, now: Optional[datetime] = None, key: Optional[str] = None) -> int:
        """Move overdue pending invitations to expired, optionally for one (map, email)."""
        statement = (
            update(MapInvitation)
            .where(MapInvitation.status == InvitationStatus.pending.value)
            .where(MapInvitation.expires_at <= (now or utcnow()))
        )
        if key is not None:
            statement = statement.where(MapInvitation.pending_key == key)
        affected = self._execute(
            statement.values(status=InvitationStatus.expired.value, pending_key=None)
        )
        if affected:
            logger.debug(f"Expired {affected} pending invitation(s)")
        return affected

    def list_pending_invitations(self, map_id: Optional[str] = None, email: Optional[str] = None,
                                 now: Optional[datetime] = None) -> List[MapInvitation]:
        query = (
            select(MapInvitation)
            .where(MapInvitation.status == InvitationStatus.pending.value)
            .where(MapInvitation.expires_at > (now or utcnow()))
        )
        if map_id:
            query = query.where(MapInvitation.map_id == map_id)
        if email:
            query = query.where(MapInvitation.invitee_email == normalize_email(email))
        return list(self.session.exec(query.order_by(MapInvitation.created_at.desc())).all())

    # ============================================================
    # Categories
    # ============================================================
    def get_category(self, category_id: str) -> Optional[Category]:
        return self.session.get(Category, category_id)

    def list_categories(self, map_id: str) -> List[Category]:
        return list(self.session.exec(
            select(Category).where(Category.map_id == map_id).order_by(Category.name)
        ).all())

    def add_category(self, category: Category) -> Category:
        self.session.add(category)
        self.session.flush()
        return category

    def update_category(self, category_id: str, changes: dict) -> int:
        if not changes:
            return 0
        return self._execute(
            update(Category).where(Category.id == category_id).values(**changes, updated_at=utcnow())
        )

    def delete_category(self, category_id: str) -> int:
        """Points keep existing, uncategorised."""
        self._execute(
            update(PointOfInterest)
            .where(PointOfInterest.category_id == category_id)
            .values(category_id=None)
        )
        return self._execute(delete(Category).where(Category.id == category_id))

    # ============================================================
    # Points of interest
    # ============================================================
    def get_poi(self, poi_id: str) -> Optional[PointOfInterest]:
        return self.session.get(PointOfInterest, poi_id)

    def list_pois(self, map_id: str, category_id: Optional[str] = None) -> List[PointOfInterest]:
        query = select(PointOfInterest).where(PointOfInterest.map_id == map_id)
        if category_id:
            query = query.where(PointOfInterest.category_id == category_id)
        return list(self.session.exec(query.order_by(PointOfInterest.created_at)).all())

    def add_poi(self, poi: PointOfInterest) -> PointOfInterest:
        self.session.add(poi)
        self.session.flush()
        return poi

    def update_poi(self, poi_id: str, changes: dict) -> int:
        if not changes:
            return 0
        return self._execute(
            update(PointOfInterest).where(PointOfInterest.id == poi_id).values(**changes, updated_at=utcnow())
        )

    def delete_poi(self, poi_id: str) -> int:
        return self._execute(delete(PointOfInterest).where(PointOfInterest.id == poi_id))
