"""
Pydantic schemas for bids and auction outcomes.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

from auction.core.money import coerce_amount
from auction.schemas.catalog import ItemResponse


class BidCreate(BaseModel):
    """
    Schema for a bid placement request.
    """

    bidder_id: int = Field(..., description="Identity of the bidder")
    amount: Union[int, str] = Field(..., description="Amount in minor units, or a 0.00 string")

    @field_validator("amount")
    def parse_amount(cls, v: Union[int, str]) -> int:
        return coerce_amount(v)


class BidSnapshot(BaseModel):
    """
    A bid as recorded in the ledger.
    """

    id: int = Field(..., description="Bid ID")
    item_id: int
    bidder_id: int
    amount: int
    created_at: datetime

    model_config = {"from_attributes": True}


class BidResult(BaseModel):
    """
    Outcome of an accepted bid.
    """

    item_id: int
    highest: BidSnapshot = Field(..., description="The new current highest bid")
    previous: Optional[BidSnapshot] = Field(None, description="The highest bid before this one, if any")

    @property
    def outbid_user_id(self) -> Optional[int]:
        """Bidder who just lost the lead, when it changed hands."""
        if self.previous is None or self.previous.bidder_id == self.highest.bidder_id:
            return None
        return self.previous.bidder_id


class CloseRequest(BaseModel):
    actor_id: int = Field(..., description="Identity of the user closing the item")


class CloseResult(BaseModel):
    """
    Outcome of closing an item.
    """

    item_id: int
    winning_bid: Optional[BidSnapshot] = Field(None, description="Highest bid at close time; null when no bids")
    already_closed: bool = Field(False, description="True when the item was closed before this request")


class UserBidItem(BaseModel):
    """An item the user bid on, with the user's best amount."""

    item: ItemResponse
    best_amount: int


class UserBestBid(BaseModel):
    """The user's highest bid on one item; null when they never bid."""

    user_id: int
    item_id: int
    best_amount: Optional[int] = None
