"""
Pydantic schemas for categories, items and item images.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from auction.core.money import coerce_amount


class CategoryCreate(BaseModel):
    """
    Schema for creating a new category.
    """

    name: str = Field(..., min_length=1, max_length=100, description="Category name")

    @field_validator("name")
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Category name must not be blank")
        return stripped


class CategoryResponse(BaseModel):
    """
    Schema for category response.
    """

    id: int = Field(..., description="Category ID")
    name: str = Field(..., description="Category name")

    model_config = {"from_attributes": True}


class CategoryDeletion(BaseModel):
    """
    Outcome of a cascading category delete.
    """

    category_id: int
    deleted: bool = Field(..., description="False when the category did not exist")
    items_removed: int = Field(0, ge=0, description="Number of items removed with the category")


class ItemCreate(BaseModel):
    """
    Schema for listing a new item.
    """

    seller_id: int = Field(..., description="Identity of the seller")
    category_id: int = Field(..., description="Category ID")
    title: str = Field(..., min_length=1, max_length=255, description="Item title")
    description: Optional[str] = Field(None, max_length=4000, description="Item description")
    start_price: Union[int, str] = Field(..., description="Start price in minor units, or a 0.00 string")
    images: List[str] = Field(default_factory=list, description="File references, in display order")

    @field_validator("start_price")
    def parse_start_price(cls, v: Union[int, str]) -> int:
        return coerce_amount(v)


class ItemResponse(BaseModel):
    """
    Schema for item response.
    """

    id: int = Field(..., description="Item ID")
    seller_id: int
    category_id: int
    title: str
    description: Optional[str] = None
    start_price: int
    image_file_id: Optional[str] = Field(None, description="Cover image reference")
    is_open: bool
    is_new: bool
    created_at: datetime
    image_refs: List[str] = Field(default_factory=list, description="All image references ordered by position")

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": 1,
                    "seller_id": 1001,
                    "category_id": 3,
                    "title": "Vintage camera",
                    "description": "Works, minor scratches",
                    "start_price": 10000,
                    "image_file_id": "AgACAgIAAxkBAAIB",
                    "is_open": True,
                    "is_new": True,
                    "created_at": "2025-10-12T10:00:00Z",
                    "image_refs": ["AgACAgIAAxkBAAIB"],
                }
            ]
        },
    }


class ItemImageResponse(BaseModel):
    file_ref: str
    position: int

    model_config = {"from_attributes": True}


class ImagesReorder(BaseModel):
    """
    Replacement image list for an item.

    When ``positions`` is omitted the references get positions 0..N-1.
    """

    file_refs: List[str] = Field(..., description="File references")
    positions: Optional[List[int]] = Field(None, description="Explicit position for each reference")


class ItemsAnnounced(BaseModel):
    item_ids: List[int] = Field(..., description="Items whose new-lot announcement went out")


class CategoryEnsured(BaseModel):
    category: CategoryResponse
    created: bool = Field(..., description="False when a category with this name already existed")
