from typing import List, Optional

from fastapi import APIRouter, Depends, status

from auction.api.dependencies import get_auction_engine
from auction.core.config import settings
from auction.schemas.bids import BidCreate, BidResult, BidSnapshot, CloseRequest, CloseResult
from auction.services.engine import AuctionEngine

router = APIRouter()


@router.post("/{item_id}/bids", response_model=BidResult, status_code=status.HTTP_201_CREATED)
async def place_bid(
    item_id: int,
    payload: BidCreate,
    engine: AuctionEngine = Depends(get_auction_engine),
) -> BidResult:
    """Place a bid; it must beat the current highest bid or the start price."""
    return await engine.place_bid(item_id, payload.bidder_id, int(payload.amount))


@router.get("/{item_id}/bids", response_model=List[BidSnapshot])
async def list_bids(item_id: int, engine: AuctionEngine = Depends(get_auction_engine)) -> List[BidSnapshot]:
    return await engine.list_bids(item_id)


@router.get("/{item_id}/bids/highest", response_model=Optional[BidSnapshot])
async def highest_bid(
    item_id: int,
    engine: AuctionEngine = Depends(get_auction_engine),
) -> Optional[BidSnapshot]:
    """Current leader, or null when nobody has bid."""
    return await engine.highest_bid(item_id)


@router.post("/{item_id}/close", response_model=CloseResult)
async def close_item(
    item_id: int,
    payload: CloseRequest,
    engine: AuctionEngine = Depends(get_auction_engine),
) -> CloseResult:
    """Close bidding. Admins may close any item, sellers their own."""
    return await engine.close_item(item_id, payload.actor_id, authorized=settings.is_admin(payload.actor_id))


@router.get("/{item_id}/bidders", response_model=List[int])
async def list_item_bidders(item_id: int, engine: AuctionEngine = Depends(get_auction_engine)) -> List[int]:
    """Users to notify when the item closes."""
    return await engine.list_item_bidders(item_id)
