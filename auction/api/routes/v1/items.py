from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Response, status

from auction.api.dependencies import get_catalog_service, get_favorites_service
from auction.schemas.catalog import ImagesReorder, ItemCreate, ItemImageResponse, ItemResponse, ItemsAnnounced
from auction.services.catalog import CatalogService
from auction.services.favorites import FavoritesService

router = APIRouter()


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    payload: ItemCreate,
    catalog: CatalogService = Depends(get_catalog_service),
) -> ItemResponse:
    """List a new item for auction."""
    return await catalog.create_item(
        seller_id=payload.seller_id,
        category_id=payload.category_id,
        title=payload.title,
        description=payload.description,
        start_price=int(payload.start_price),
        images=payload.images,
    )


@router.get("/new", response_model=List[ItemResponse])
async def list_new_items(catalog: CatalogService = Depends(get_catalog_service)) -> List[ItemResponse]:
    """Items that have not been announced yet."""
    return await catalog.list_new_items()


@router.post("/announced")
async def mark_items_announced(
    payload: ItemsAnnounced,
    catalog: CatalogService = Depends(get_catalog_service),
) -> Dict[str, Any]:
    """Clear the new-lot flag once the announcement went out."""
    updated = await catalog.mark_items_announced(payload.item_ids)
    return {"updated": updated}


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(item_id: int, catalog: CatalogService = Depends(get_catalog_service)) -> ItemResponse:
    return await catalog.get_item(item_id)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: int, catalog: CatalogService = Depends(get_catalog_service)) -> Response:
    """Delete an item with its bids, images and favorites. Deleting a missing item succeeds."""
    await catalog.delete_item(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{item_id}/images", response_model=List[ItemImageResponse])
async def list_item_images(
    item_id: int,
    catalog: CatalogService = Depends(get_catalog_service),
) -> List[ItemImageResponse]:
    await catalog.get_item(item_id)
    return await catalog.list_item_images(item_id)


@router.put("/{item_id}/images", response_model=List[ItemImageResponse])
async def reorder_item_images(
    item_id: int,
    payload: ImagesReorder,
    catalog: CatalogService = Depends(get_catalog_service),
) -> List[ItemImageResponse]:
    """Replace the whole image list of an item."""
    return await catalog.reorder_images(item_id, payload.file_refs, payload.positions)


@router.get("/{item_id}/favoriters", response_model=List[int])
async def list_item_favoriters(
    item_id: int,
    favorites: FavoritesService = Depends(get_favorites_service),
) -> List[int]:
    """Users who bookmarked the item."""
    return await favorites.list_item_favoriters(item_id)
