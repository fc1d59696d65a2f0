# models/map.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


# -------------------------------------------------
# Create
# -------------------------------------------------
class MapCreate(BaseModel):
    """
    Used when creating a map. The owner is always the caller.
    """
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_public: bool = False


class MapUpdate(BaseModel):
    """
    Partial update. Editors may change the details; only the owner may
    change visibility.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_public: Optional[bool] = None


# -------------------------------------------------
# Read
# -------------------------------------------------
class MapRead(BaseModel):
    id: str
    owner_id: str
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_public: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MapAccessRead(BaseModel):
    """Effective rights of the caller on one map."""
    map_id: str
    is_owner: bool
    role: Optional[str] = None
    can_view: bool
    can_edit: bool
    can_add_poi: bool


class MapUserRead(BaseModel):
    id: str
    email: str
    display_name: str
    role: str


# -------------------------------------------------
# Role assignment (PUT /maps/{id}/users/{user_id}/role)
# -------------------------------------------------
class RoleUpdate(BaseModel):
    # Validated by the role table, not here, so typos surface as invalid_role
    role: str
