"""
Database model for user favorites.
"""

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Index, func

from auction.db.session import Base
from auction.utils.timestamps import utcnow


class Favorite(Base):
    """A (user, item) bookmark."""

    __tablename__ = "favorites"
    __table_args__ = (Index("idx_favorites_user_created", "user_id", "created_at"),)

    user_id = Column(BigInteger, primary_key=True, autoincrement=False)
    item_id = Column(BigInteger, ForeignKey("items.id", ondelete="CASCADE"), primary_key=True, autoincrement=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
