"""
Translate exceptions into JSON error bodies.

Every error body has a human readable ``detail`` and a machine readable
``code``; domain errors add their own context such as ``current_highest``.
"""

from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auction.core.exceptions import AuctionError


class ErrorResponse(BaseModel):
    """Standardized error response model."""

    detail: str
    code: str


def create_error_response(code: str, detail: str) -> Dict[str, str]:
    return {"detail": detail, "code": code}


def flatten_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """Render pydantic errors as ``body.amount: message | ...``."""
    parts = []
    for err in errors:
        location = ".".join(str(loc) for loc in err.get("loc", []))
        parts.append(f"{location}: {err.get('msg', 'Validation error')}")
    return " | ".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers for the FastAPI application.
    """

    @app.exception_handler(AuctionError)
    async def auction_exception_handler(request: Request, exc: AuctionError) -> JSONResponse:
        logger.bind(code=exc.code, **exc.details).info(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        detail = flatten_validation_errors(list(exc.errors()))
        logger.warning(f"Invalid request to {request.url.path}: {detail}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=create_error_response("INVALID_INPUT", detail),
        )

    @app.exception_handler(IntegrityError)
    async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        # Constraint races the services did not map to a domain error
        logger.error(f"Database integrity error: {exc.orig}")
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=create_error_response("DATABASE_INTEGRITY_ERROR", "Database constraint violated"),
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error(f"Database error: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=create_error_response("DATABASE_ERROR", "Database error"),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=create_error_response("INTERNAL_ERROR", "Internal server error"),
        )
