"""
Domain errors raised by the auction services.

Each error carries a stable ``code`` and the HTTP status the API maps it to.
"""

from typing import Any, Dict, Optional

from fastapi import status


class AuctionError(Exception):
    """Base class for all domain errors."""

    code = "AUCTION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.details}


class NotFoundError(AuctionError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AuctionError):
    code = "CONFLICT"
    status_code = status.HTTP_409_CONFLICT


class InvalidInputError(AuctionError):
    code = "INVALID_INPUT"
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AuctionError):
    code = "UNAUTHORIZED"
    status_code = status.HTTP_403_FORBIDDEN


class ItemNotFound(NotFoundError):
    code = "ITEM_NOT_FOUND"

    def __init__(self, item_id: int) -> None:
        super().__init__(f"Item with ID {item_id} not found", item_id=item_id)
        self.item_id = item_id


class CategoryNotFound(NotFoundError):
    code = "CATEGORY_NOT_FOUND"

    def __init__(self, category_id: int) -> None:
        super().__init__(f"Category with ID {category_id} not found", category_id=category_id)
        self.category_id = category_id


class ItemClosed(ConflictError):
    code = "ITEM_CLOSED"

    def __init__(self, item_id: int) -> None:
        super().__init__(f"Auction for item {item_id} is closed", item_id=item_id)
        self.item_id = item_id


class BidTooLow(ConflictError):
    code = "BID_TOO_LOW"

    def __init__(self, current_highest: int, amount: Optional[int] = None) -> None:
        super().__init__(
            f"Bid must exceed {current_highest}",
            current_highest=current_highest,
            amount=amount,
        )
        self.current_highest = current_highest
        self.amount = amount


class DuplicatePosition(ConflictError):
    code = "DUPLICATE_POSITION"

    def __init__(self, item_id: int, position: Optional[int] = None) -> None:
        message = f"Duplicate image position for item {item_id}"
        if position is not None:
            message = f"{message}: {position}"
        super().__init__(message, item_id=item_id, position=position)
        self.item_id = item_id
        self.position = position


class CategoryExists(ConflictError):
    code = "CATEGORY_EXISTS"

    def __init__(self, name: str) -> None:
        super().__init__(f"Category '{name}' already exists", name=name)
        self.name = name


class UserNotFound(NotFoundError):
    code = "USER_NOT_FOUND"

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User with ID {user_id} not found", user_id=user_id)
        self.user_id = user_id
