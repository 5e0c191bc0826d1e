"""
Auction engine: bid placement, closing and highest-bid queries.

Every state transition on an item runs inside that item's critical section:
an in-process keyed lock plus a ``SELECT ... FOR UPDATE`` on the item row, so
engine instances in other processes are serialized by the database as well.
Transitions on different items never wait for each other.

The current highest bid is never stored; it is read from the ledger as the
bid with the largest amount, ties going to the earliest bid.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Tuple

from loguru import logger
from sqlalchemy import distinct, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auction.core.exceptions import (
    AuctionError,
    BidTooLow,
    InvalidInputError,
    ItemClosed,
    ItemNotFound,
    UnauthorizedError,
)
from auction.core.locks import KeyedLock, item_locks
from auction.core.metrics import observe_lock_wait, record_bid, record_item_closed
from auction.core.money import MAX_CENTS
from auction.core.tracing import create_span
from auction.db.models import Bid, Item
from auction.db.session import atomic
from auction.schemas.bids import BidResult, BidSnapshot, CloseResult, UserBidItem
from auction.services.catalog import build_item_responses


class AuctionEngine:
    """Enforces bid ordering and the open/closed lifecycle of items."""

    def __init__(self, db: AsyncSession, locks: KeyedLock = item_locks):
        self.db = db
        self.locks = locks

    @asynccontextmanager
    async def _serialized(self, item_id: int, operation: str) -> AsyncIterator[None]:
        started = time.perf_counter()
        async with self.locks.hold(item_id):
            observe_lock_wait(operation, time.perf_counter() - started)
            yield

    async def _lock_item(self, item_id: int) -> Optional[Item]:
        query = (
            select(Item)
            .where(Item.id == item_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return (await self.db.execute(query)).scalar_one_or_none()

    async def _highest(self, item_id: int) -> Optional[BidSnapshot]:
        query = (
            select(Bid.id, Bid.item_id, Bid.bidder_id, Bid.amount, Bid.created_at)
            .where(Bid.item_id == item_id)
            .order_by(Bid.amount.desc(), Bid.created_at.asc(), Bid.id.asc())
            .limit(1)
        )
        row = (await self.db.execute(query)).mappings().first()
        return BidSnapshot.model_validate(dict(row)) if row else None

    async def _require_item(self, item_id: int) -> None:
        found = (await self.db.execute(select(Item.id).where(Item.id == item_id))).scalar_one_or_none()
        if found is None:
            raise ItemNotFound(item_id)

    async def place_bid(self, item_id: int, bidder_id: int, amount: int) -> BidResult:
        """
        Append a bid if it beats the current highest bid of an open item.

        The first bid must exceed the start price. A bidder may raise their
        own leading bid.

        Raises:
            InvalidInputError: amount is not a positive integer.
            ItemNotFound: the item does not exist.
            ItemClosed: the item no longer accepts bids.
            BidTooLow: amount does not exceed the current highest amount.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            record_bid("invalid_input")
            raise InvalidInputError("Bid amount must be a positive integer", amount=amount)
        if amount > MAX_CENTS:
            record_bid("invalid_input")
            raise InvalidInputError("Bid amount exceeds supported range", amount=amount)

        bind = logger.bind(item_id=item_id, bidder_id=bidder_id, amount=amount)
        attributes = {"item.id": item_id, "bid.bidder_id": bidder_id, "bid.amount": amount}
        with create_span("auction.place_bid", attributes) as span:
            try:
                async with self._serialized(item_id, "place_bid"):
                    async with atomic(self.db):
                        item = await self._lock_item(item_id)
                        if item is None:
                            raise ItemNotFound(item_id)
                        if not item.is_open:
                            raise ItemClosed(item_id)

                        previous = await self._highest(item_id)
                        floor = previous.amount if previous else item.start_price
                        if amount <= floor:
                            raise BidTooLow(floor, amount)

                        self.db.add(Bid(item_id=item_id, bidder_id=bidder_id, amount=amount))
                        await self.db.flush()
                        highest = await self._highest(item_id)
            except IntegrityError:
                # The item row vanished between lookup and insert
                record_bid(ItemNotFound.code.lower())
                span.set_attribute("bid.outcome", ItemNotFound.code)
                bind.warning("Bid rejected: item deleted concurrently")
                raise ItemNotFound(item_id)
            except AuctionError as e:
                record_bid(e.code.lower())
                span.set_attribute("bid.outcome", e.code)
                bind.info(f"Bid rejected: {e.message}")
                raise

            span.set_attribute("bid.outcome", "accepted")

        record_bid("accepted")
        bind.info(f"Bid {highest.id} accepted")
        return BidResult(item_id=item_id, highest=highest, previous=previous)

    async def close_item(self, item_id: int, actor_id: int, authorized: bool = False) -> CloseResult:
        """
        Stop bidding on an item and report the winning bid.

        ``authorized`` is the caller's verdict on ``actor_id`` (admin rights);
        the item's own seller may always close it. Closing an item that is
        already closed changes nothing and returns the same winning bid with
        ``already_closed`` set.

        Raises:
            ItemNotFound: the item does not exist.
            UnauthorizedError: the actor may not close this item.
        """
        bind = logger.bind(item_id=item_id, actor_id=actor_id)
        with create_span("auction.close_item", {"item.id": item_id, "close.actor_id": actor_id}) as span:
            async with self._serialized(item_id, "close_item"):
                async with atomic(self.db):
                    item = await self._lock_item(item_id)
                    if item is None:
                        raise ItemNotFound(item_id)
                    if not authorized and actor_id != item.seller_id:
                        bind.warning("Close rejected: actor is neither admin nor seller")
                        raise UnauthorizedError(
                            f"User {actor_id} may not close item {item_id}", item_id=item_id, actor_id=actor_id
                        )

                    winning = await self._highest(item_id)
                    already_closed = not item.is_open
                    if not already_closed:
                        item.is_open = False

            span.set_attribute("close.already_closed", already_closed)

        if already_closed:
            bind.info("Close requested but item already closed")
        else:
            record_item_closed()
            bind.info(f"Closed item, winning amount {winning.amount if winning else None}")
        return CloseResult(item_id=item_id, winning_bid=winning, already_closed=already_closed)

    async def highest_bid(self, item_id: int) -> Optional[BidSnapshot]:
        """Current leader of an item, or None when nobody has bid."""
        await self._require_item(item_id)
        return await self._highest(item_id)

    async def list_bids(self, item_id: int) -> List[BidSnapshot]:
        """The ledger of an item in acceptance order."""
        await self._require_item(item_id)
        query = (
            select(Bid.id, Bid.item_id, Bid.bidder_id, Bid.amount, Bid.created_at)
            .where(Bid.item_id == item_id)
            .order_by(Bid.created_at.asc(), Bid.id.asc())
        )
        return [BidSnapshot.model_validate(dict(row)) for row in (await self.db.execute(query)).mappings()]

    async def user_best_bid(self, item_id: int, user_id: int) -> Optional[int]:
        query = select(func.max(Bid.amount)).where(Bid.item_id == item_id, Bid.bidder_id == user_id)
        return (await self.db.execute(query)).scalar_one_or_none()

    async def list_user_bid_items(self, user_id: int) -> List[UserBidItem]:
        """Items the user has bid on, with the user's best amount on each."""
        best = (
            select(Bid.item_id, func.max(Bid.amount).label("best_amount"))
            .where(Bid.bidder_id == user_id)
            .group_by(Bid.item_id)
            .subquery()
        )
        query = (
            select(Item, best.c.best_amount)
            .join(best, best.c.item_id == Item.id)
            .order_by(Item.id)
            .execution_options(populate_existing=True)
        )
        rows: List[Tuple[Item, int]] = [(item, amount) for item, amount in (await self.db.execute(query)).all()]
        responses = await build_item_responses(self.db, [item for item, _ in rows])
        return [UserBidItem(item=response, best_amount=amount) for response, (_, amount) in zip(responses, rows)]

    async def list_item_bidders(self, item_id: int) -> List[int]:
        """Distinct users who bid on an item."""
        await self._require_item(item_id)
        query = select(distinct(Bid.bidder_id)).where(Bid.item_id == item_id).order_by(Bid.bidder_id)
        return list((await self.db.execute(query)).scalars())
