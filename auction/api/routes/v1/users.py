from typing import List

from fastapi import APIRouter, Depends

from auction.api.dependencies import get_auction_engine, get_favorites_service, get_user_service
from auction.core.exceptions import UserNotFound
from auction.schemas.bids import UserBestBid, UserBidItem
from auction.schemas.catalog import ItemResponse
from auction.schemas.users import FavoriteState, UserResponse, UserUpsert
from auction.services.engine import AuctionEngine
from auction.services.favorites import FavoritesService
from auction.services.users import UserService

router = APIRouter()


@router.get("", response_model=List[int])
async def list_user_ids(users: UserService = Depends(get_user_service)) -> List[int]:
    """Ids of every user the bot has seen."""
    return await users.list_user_ids()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, users: UserService = Depends(get_user_service)) -> UserResponse:
    user = await users.get_user(user_id)
    if user is None:
        raise UserNotFound(user_id)
    return user


@router.put("/{user_id}", response_model=UserResponse)
async def upsert_user(
    user_id: int,
    payload: UserUpsert,
    users: UserService = Depends(get_user_service),
) -> UserResponse:
    """Record the latest profile fields of a chat user."""
    return await users.upsert_user(user_id, payload.username, payload.first_name, payload.last_name)


@router.get("/{user_id}/bids", response_model=List[UserBidItem])
async def list_user_bids(
    user_id: int,
    engine: AuctionEngine = Depends(get_auction_engine),
) -> List[UserBidItem]:
    """Items the user bid on, with their best amount on each."""
    return await engine.list_user_bid_items(user_id)


@router.get("/{user_id}/favorites", response_model=List[ItemResponse])
async def list_favorites(
    user_id: int,
    favorites: FavoritesService = Depends(get_favorites_service),
) -> List[ItemResponse]:
    """Favorited items, most recent first."""
    return await favorites.list_favorites(user_id)


@router.get("/{user_id}/items/{item_id}/best-bid", response_model=UserBestBid)
async def user_best_bid(
    user_id: int,
    item_id: int,
    engine: AuctionEngine = Depends(get_auction_engine),
) -> UserBestBid:
    best = await engine.user_best_bid(item_id, user_id)
    return UserBestBid(user_id=user_id, item_id=item_id, best_amount=best)


@router.get("/{user_id}/favorites/{item_id}", response_model=FavoriteState)
async def get_favorite(
    user_id: int,
    item_id: int,
    favorites: FavoritesService = Depends(get_favorites_service),
) -> FavoriteState:
    is_favorite = await favorites.is_favorite(user_id, item_id)
    return FavoriteState(user_id=user_id, item_id=item_id, is_favorite=is_favorite)


@router.put("/{user_id}/favorites/{item_id}", response_model=FavoriteState)
async def add_favorite(
    user_id: int,
    item_id: int,
    favorites: FavoritesService = Depends(get_favorites_service),
) -> FavoriteState:
    await favorites.add_favorite(user_id, item_id)
    return FavoriteState(user_id=user_id, item_id=item_id, is_favorite=True)


@router.delete("/{user_id}/favorites/{item_id}", response_model=FavoriteState)
async def remove_favorite(
    user_id: int,
    item_id: int,
    favorites: FavoritesService = Depends(get_favorites_service),
) -> FavoriteState:
    await favorites.remove_favorite(user_id, item_id)
    return FavoriteState(user_id=user_id, item_id=item_id, is_favorite=False)
