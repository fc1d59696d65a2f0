# routers/categories.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from core.logging_config import logger
from core.map_authority import MapAuthority
from core.repository import MapRepository
from core.utils import sanitize
from dependencies.auth import get_current_principal, get_optional_principal
from dependencies.services import get_authority, get_repository
from models.poi import CategoryCreate, CategoryRead, CategoryUpdate
from models.tables import Category
from models.user import Principal

router = APIRouter(
    tags=["Categories"],
)


def get_visible_category(repo: MapRepository, authority: MapAuthority, category_id: str,
                         principal: Optional[Principal]) -> Category:
    category = repo.get_category(category_id)
    if category is None or not authority.can_view(category.map_id, principal):
        raise HTTPException(404, "Category not found")
    return category


# -----------------------------------------------------
# GET /maps/{map_id}/categories
# -----------------------------------------------------
@router.get("/maps/{map_id}/categories", response_model=List[CategoryRead], summary="List a map's categories")
def list_categories(
    map_id: str,
    principal: Optional[Principal] = Depends(get_optional_principal),
    repo: MapRepository = Depends(get_repository),
    authority: MapAuthority = Depends(get_authority),
):
    if not authority.can_view(map_id, principal):
        raise HTTPException(404, "Map not found")
    return repo.list_categories(map_id)


# -----------------------------------------------------
# POST /maps/{map_id}/categories
# Same right as adding a point
# -----------------------------------------------------
@router.post("/maps/{map_id}/categories", response_model=CategoryRead, status_code=201,
             summary="Add a category")
def create_category(
    map_id: str,
    payload: CategoryCreate,
    principal: Principal = Depends(get_current_principal),
    repo: MapRepository = Depends(get_repository),
    authority: MapAuthority = Depends(get_authority),
):
    if not authority.can_view(map_id, principal):
        raise HTTPException(404, "Map not found")
    if not authority.can_add_poi(map_id, principal):
        raise HTTPException(403, "You do not have permission to add categories to this map")

    data = sanitize(payload.model_dump())
    if not data["name"]:
        raise HTTPException(400, "Category name is required")

    with repo.transaction():
        category = repo.add_category(Category(map_id=map_id, creator_id=principal.id, **data))
        category_id = category.id

    logger.info(f"Category {category_id} added to map {map_id} by {principal.id}")
    return repo.get_category(category_id)


# -----------------------------------------------------
# PUT /categories/{category_id}
# -----------------------------------------------------
@router.put("/categories/{category_id}", response_model=CategoryRead, summary="Update a category")
def update_category(
    category_id: str,
    payload: CategoryUpdate,
    principal: Principal = Depends(get_current_principal),
    repo: MapRepository = Depends(get_repository),
    authority: MapAuthority = Depends(get_authority),
):
    category = get_visible_category(repo, authority, category_id, principal)
    if not authority.can_edit_poi(category.map_id, principal, category.creator_id):
        raise HTTPException(403, "You do not have permission to edit this category")

    changes = sanitize(payload.model_dump(exclude_unset=True))
    if "name" in changes and not changes["name"]:
        raise HTTPException(400, "Category name cannot be empty")

    with repo.transaction():
        repo.update_category(category_id, changes)

    return repo.get_category(category_id)


# -----------------------------------------------------
# DELETE /categories/{category_id}
# -----------------------------------------------------
@router.delete("/categories/{category_id}", summary="Delete a category")
def delete_category(
    category_id: str,
    principal: Principal = Depends(get_current_principal),
    repo: MapRepository = Depends(get_repository),
    authority: MapAuthority = Depends(get_authority),
):
    category = get_visible_category(repo, authority, category_id, principal)
    map_id = category.map_id
    if not authority.can_delete_poi(map_id, principal, category.creator_id):
        raise HTTPException(403, "You do not have permission to delete this category")

    with repo.transaction():
        repo.delete_category(category_id)

    logger.info(f"Category {category_id} on map {map_id} deleted by {principal.id}")
    return {"message": "Category deleted"}
