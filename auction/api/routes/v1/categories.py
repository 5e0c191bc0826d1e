from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from auction.api.dependencies import get_catalog_service
from auction.schemas.catalog import (
    CategoryCreate,
    CategoryDeletion,
    CategoryEnsured,
    CategoryResponse,
    ItemResponse,
)
from auction.services.catalog import CatalogService

router = APIRouter()


@router.get("", response_model=List[CategoryResponse])
async def list_categories(
    name: Optional[str] = Query(None, description="Case-insensitive exact name match"),
    catalog: CatalogService = Depends(get_catalog_service),
) -> List[CategoryResponse]:
    """List categories by name, or look one up by its name."""
    if name is None:
        return await catalog.list_categories()
    found = await catalog.find_category_by_name(name)
    return [found] if found else []


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    catalog: CatalogService = Depends(get_catalog_service),
) -> CategoryResponse:
    """Create a category; names are unique regardless of case."""
    return await catalog.create_category(payload.name)


@router.post("/ensure", response_model=CategoryEnsured)
async def ensure_category(
    payload: CategoryCreate,
    response: Response,
    catalog: CatalogService = Depends(get_catalog_service),
) -> CategoryEnsured:
    """Get the category with this name, creating it when missing."""
    category, created = await catalog.ensure_category(payload.name)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return CategoryEnsured(category=category, created=created)


@router.delete("/{category_id}", response_model=CategoryDeletion)
async def delete_category(
    category_id: int,
    catalog: CatalogService = Depends(get_catalog_service),
) -> CategoryDeletion:
    """Delete a category with all its items, bids, images and favorites."""
    return await catalog.delete_category(category_id)


@router.get("/{category_id}/items", response_model=List[ItemResponse])
async def list_category_items(
    category_id: int,
    catalog: CatalogService = Depends(get_catalog_service),
) -> List[ItemResponse]:
    """Items of a category, newest first."""
    return await catalog.list_items_by_category(category_id)
