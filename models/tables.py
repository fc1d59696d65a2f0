# models/tables.py

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from core.utils import utcnow


def _uuid() -> str:
    return str(uuid.uuid4())


def _timestamp(**kwargs):
    """Aware UTC column."""
    return Field(sa_type=DateTime(timezone=True), **kwargs)


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=_uuid, primary_key=True)
    email: str = Field(index=True, unique=True)  # stored lower-case
    display_name: str
    password_hash: str
    email_verified: bool = False
    created_at: datetime = _timestamp(default_factory=utcnow)


class Map(SQLModel, table=True):
    __tablename__ = "maps"

    id: str = Field(default_factory=_uuid, primary_key=True)
    owner_id: str = Field(foreign_key="users.id", index=True)
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_public: bool = False
    # Bumped by every role mutation; serialises concurrent writers per map
    roles_version: int = 0
    created_at: datetime = _timestamp(default_factory=utcnow)
    updated_at: Optional[datetime] = _timestamp(default=None)


class MapUserRole(SQLModel, table=True):
    __tablename__ = "map_user_roles"

    map_id: str = Field(foreign_key="maps.id", primary_key=True)
    user_id: str = Field(foreign_key="users.id", primary_key=True)
    role: str


class Category(SQLModel, table=True):
    __tablename__ = "categories"

    id: str = Field(default_factory=_uuid, primary_key=True)
    map_id: str = Field(foreign_key="maps.id", index=True)
    creator_id: str = Field(foreign_key="users.id")
    name: str
    color: Optional[str] = None  # hex, e.g. #3498db
    icon: Optional[str] = None
    created_at: datetime = _timestamp(default_factory=utcnow)
    updated_at: Optional[datetime] = _timestamp(default=None)


class PointOfInterest(SQLModel, table=True):
    __tablename__ = "pois"

    id: str = Field(default_factory=_uuid, primary_key=True)
    map_id: str = Field(foreign_key="maps.id", index=True)
    category_id: Optional[str] = Field(default=None, foreign_key="categories.id")
    creator_id: str = Field(foreign_key="users.id", index=True)
    name: str
    description: Optional[str] = None
    x: float
    y: float
    icon: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime = _timestamp(default_factory=utcnow)
    updated_at: Optional[datetime] = _timestamp(default=None)


class MapInvitation(SQLModel, table=True):
    __tablename__ = "map_invitations"

    id: str = Field(default_factory=_uuid, primary_key=True)
    map_id: str = Field(foreign_key="maps.id", index=True)
    inviter_id: str = Field(foreign_key="users.id")
    invitee_email: str = Field(index=True)  # stored lower-case
    role: str
    token: str = Field(index=True, unique=True)
    status: str = Field(default="pending", index=True)
    # "{map_id}:{invitee_email}" while pending, NULL once terminal
    pending_key: Optional[str] = Field(default=None, unique=True)
    expires_at: datetime = _timestamp()
    created_at: datetime = _timestamp(default_factory=utcnow)
    responded_at: Optional[datetime] = _timestamp(default=None)
