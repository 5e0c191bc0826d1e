"""
Database models for items and their ordered images.
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    true,
)
from sqlalchemy.orm import relationship

from auction.db.models.types import BigIntPK
from auction.db.session import Base
from auction.utils.timestamps import utcnow


class Item(Base):
    """
    A lot listed by a seller.

    ``start_price`` is never updated after insert. ``is_open`` only ever goes
    from true to false, through the auction engine.
    """

    __tablename__ = "items"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    seller_id = Column(BigInteger, nullable=False)
    category_id = Column(
        BigInteger,
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    start_price = Column(BigInteger, nullable=False)
    # Legacy single-image column, kept as the cover image
    image_file_id = Column(String, nullable=True)
    is_open = Column(Boolean, nullable=False, default=True, server_default=true())
    is_new = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    # Relationships
    category = relationship("Category", back_populates="items")
    images = relationship(
        "ItemImage",
        back_populates="item",
        order_by="ItemImage.position",
        passive_deletes=True,
    )


class ItemImage(Base):
    """
    One image of an item; ``position`` orders the gallery.
    """

    __tablename__ = "item_images"
    __table_args__ = (UniqueConstraint("item_id", "position", name="uq_item_images_item_position"),)

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    item_id = Column(
        BigInteger,
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
    )
    file_ref = Column(String, nullable=False)
    position = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    item = relationship("Item", back_populates="images")
