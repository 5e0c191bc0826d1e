"""
Database model for the bid ledger.
"""

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Index, func

from auction.db.models.types import BigIntPK
from auction.db.session import Base
from auction.utils.timestamps import utcnow


class Bid(Base):
    """
    An accepted bid. Rows are insert-only; they disappear only when their
    item is deleted.
    """

    __tablename__ = "bids"
    __table_args__ = (Index("idx_bids_item_amount", "item_id", "amount"),)

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    item_id = Column(BigInteger, ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True)
    bidder_id = Column(BigInteger, nullable=False)
    amount = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
