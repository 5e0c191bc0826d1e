"""
Database models.
"""

from auction.db.models.bid import Bid
from auction.db.models.category import Category
from auction.db.models.favorite import Favorite
from auction.db.models.item import Item, ItemImage
from auction.db.models.user import User

__all__ = [
    "Bid",
    "Category",
    "Favorite",
    "Item",
    "ItemImage",
    "User",
]
