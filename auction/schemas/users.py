"""
Pydantic schemas for the user cache.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserUpsert(BaseModel):
    """
    Profile fields as last seen by the bot.
    """

    username: Optional[str] = Field(None, max_length=64)
    first_name: Optional[str] = Field(None, max_length=255)
    last_name: Optional[str] = Field(None, max_length=255)


class UserResponse(UserUpsert):
    id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class FavoriteState(BaseModel):
    user_id: int
    item_id: int
    is_favorite: bool
