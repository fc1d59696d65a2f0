# models/poi.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


# -------------------------------------------------
# Categories
# -------------------------------------------------
class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")
    icon: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")
    icon: Optional[str] = None


class CategoryRead(BaseModel):
    id: str
    map_id: str
    creator_id: str
    name: str
    color: Optional[str] = None
    icon: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# -------------------------------------------------
# Points of interest
# -------------------------------------------------
class PoiCreate(BaseModel):
    """
    A point on the map image. The creator is always the caller and
    decides what an `editor_own` holder may later change.
    """
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    x: float
    y: float
    icon: Optional[str] = None
    image_url: Optional[str] = None
    category_id: Optional[str] = None


class PoiUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    icon: Optional[str] = None
    image_url: Optional[str] = None
    category_id: Optional[str] = None


class PoiRead(BaseModel):
    id: str
    map_id: str
    category_id: Optional[str] = None
    creator_id: str
    name: str
    description: Optional[str] = None
    x: float
    y: float
    icon: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
