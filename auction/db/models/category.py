"""
Database model for categories.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from auction.db.models.types import BigIntPK
from auction.db.session import Base


class Category(Base):
    """
    Database model for categories.
    """

    __tablename__ = "categories"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)

    # Relationships
    items = relationship("Item", back_populates="category", passive_deletes=True)
