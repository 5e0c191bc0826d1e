"""
Database model for the local user cache.
"""

from sqlalchemy import BigInteger, Column, DateTime, String, func

from auction.db.session import Base
from auction.utils.timestamps import utcnow


class User(Base):
    """
    A chat user as last seen by the bot.

    Items, bids and favorites reference users by identity only, so rows here
    are optional and may appear after the user has already bid.
    """

    __tablename__ = "users"

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    username = Column(String, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
