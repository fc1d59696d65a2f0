# routers/pois.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from core.logging_config import logger
from core.map_authority import MapAuthority
from core.repository import MapRepository
from core.utils import sanitize
from dependencies.auth import get_current_principal, get_optional_principal
from dependencies.services import get_authority, get_repository
from models.poi import PoiCreate, PoiRead, PoiUpdate
from models.tables import PointOfInterest
from models.user import Principal

router = APIRouter(
    tags=["Points of interest"],
)

# Columns that cannot be cleared once set
REQUIRED_FIELDS = ("name", "x", "y")


# -----------------------------------------------------
# Helpers
# -----------------------------------------------------
def check_category(repo: MapRepository, map_id: str, category_id: Optional[str]):
    if category_id is None:
        return
    category = repo.get_category(category_id)
    if category is None or category.map_id != map_id:
        raise HTTPException(400, "Category does not belong to this map")


def get_visible_poi(repo: MapRepository, authority: MapAuthority, poi_id: str,
                    principal: Optional[Principal]) -> PointOfInterest:
    poi = repo.get_poi(poi_id)
    if poi is None or not authority.can_view(poi.map_id, principal):
        raise HTTPException(404, "Point of interest not found")
    return poi


# -----------------------------------------------------
# GET /maps/{map_id}/pois
# -----------------------------------------------------
@router.get("/maps/{map_id}/pois", response_model=List[PoiRead], summary="List a map's points")
def list_pois(
    map_id: str,
    category_id: Optional[str] = None,
    principal: Optional[Principal] = Depends(get_optional_principal),
    repo: MapRepository = Depends(get_repository),
    authority: MapAuthority = Depends(get_authority),
):
    if not authority.can_view(map_id, principal):
        raise HTTPException(404, "Map not found")
    return repo.list_pois(map_id, category_id)


# -----------------------------------------------------
# POST /maps/{map_id}/pois
# -----------------------------------------------------
@router.post("/maps/{map_id}/pois", response_model=PoiRead, status_code=201, summary="Add a point")
def create_poi(
    map_id: str,
    payload: PoiCreate,
    principal: Principal = Depends(get_current_principal),
    repo: MapRepository = Depends(get_repository),
    authority: MapAuthority = Depends(get_authority),
):
    if not authority.can_view(map_id, principal):
        raise HTTPException(404, "Map not found")
    if not authority.can_add_poi(map_id, principal):
        raise HTTPException(403, "You do not have permission to add points to this map")

    data = sanitize(payload.model_dump())
    if not data["name"]:
        raise HTTPException(400, "Point name is required")
    check_category(repo, map_id, data["category_id"])

    with repo.transaction():
        poi = repo.add_poi(PointOfInterest(map_id=map_id, creator_id=principal.id, **data))
        poi_id = poi.id

    logger.info(f"Point {poi_id} added to map {map_id} by {principal.id}")
    return repo.get_poi(poi_id)


# -----------------------------------------------------
# GET /pois/{poi_id}
# -----------------------------------------------------
@router.get("/pois/{poi_id}", response_model=PoiRead, summary="Get a point")
def get_poi(
    poi_id: str,
    principal: Optional[Principal] = Depends(get_optional_principal),
    repo: MapRepository = Depends(get_repository),
    authority: MapAuthority = Depends(get_authority),
):
    return get_visible_poi(repo, authority, poi_id, principal)


# -----------------------------------------------------
# PUT /pois/{poi_id}
# -----------------------------------------------------
@router.put("/pois/{poi_id}", response_model=PoiRead, summary="Update a point")
def update_poi(
    poi_id: str,
    payload: PoiUpdate,
    principal: Principal = Depends(get_current_principal),
    repo: MapRepository = Depends(get_repository),
    authority: MapAuthority = Depends(get_authority),
):
    poi = get_visible_poi(repo, authority, poi_id, principal)
    map_id = poi.map_id
    if not authority.can_edit_poi(map_id, principal, poi.creator_id):
        raise HTTPException(403, "You do not have permission to edit this point")

    changes = sanitize(payload.model_dump(exclude_unset=True))
    for field in REQUIRED_FIELDS:
        if field in changes and changes[field] is None:
            raise HTTPException(400, f"Point {field} cannot be empty")
    if "category_id" in changes:
        check_category(repo, map_id, changes["category_id"])

    with repo.transaction():
        repo.update_poi(poi_id, changes)

    logger.info(f"Point {poi_id} on map {map_id} updated by {principal.id}")
    return repo.get_poi(poi_id)


# -----------------------------------------------------
# DELETE /pois/{poi_id}
# -----------------------------------------------------
@router.delete("/pois/{poi_id}", summary="Delete a point")
def delete_poi(
    poi_id: str,
    principal: Principal = Depends(get_current_principal),
    repo: MapRepository = Depends(get_repository),
    authority: MapAuthority = Depends(get_authority),
):
    poi = get_visible_poi(repo, authority, poi_id, principal)
    map_id = poi.map_id
    if not authority.can_delete_poi(map_id, principal, poi.creator_id):
        raise HTTPException(403, "You do not have permission to delete this point")

    with repo.transaction():
        repo.delete_poi(poi_id)

    logger.info(f"Point {poi_id} on map {map_id} deleted by {principal.id}")
    return {"message": "Point deleted"}
