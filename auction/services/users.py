"""Business logic for the local user cache."""

from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from auction.db.dml import upsert_insert
from auction.db.models import User
from auction.db.session import atomic
from auction.schemas.users import UserResponse
from auction.utils.timestamps import utcnow


class UserService:
    """Keeps the display attributes of chat users up to date."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def upsert_user(
        self,
        user_id: int,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> UserResponse:
        statement = upsert_insert(self.db, User).values(
            id=user_id,
            username=username,
            first_name=first_name,
            last_name=last_name,
            created_at=utcnow(),
        )
        statement = statement.on_conflict_do_update(
            index_elements=["id"],
            set_={
                "username": statement.excluded.username,
                "first_name": statement.excluded.first_name,
                "last_name": statement.excluded.last_name,
            },
        )
        async with atomic(self.db):
            await self.db.execute(statement)
            query = select(User).where(User.id == user_id).execution_options(populate_existing=True)
            user = (await self.db.execute(query)).scalar_one()

        logger.debug(f"Upserted user {user_id}")
        return UserResponse.model_validate(user)

    async def get_user(self, user_id: int) -> Optional[UserResponse]:
        user = await self.db.get(User, user_id, populate_existing=True)
        return UserResponse.model_validate(user) if user else None

    async def list_user_ids(self) -> List[int]:
        return list((await self.db.execute(select(User.id).order_by(User.id))).scalars())
