"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from auction.api.errors import register_exception_handlers
from auction.api.routes.v1.bids import router as bids_router
from auction.api.routes.v1.categories import router as categories_router
from auction.api.routes.v1.endpoints.health import router as health_router
from auction.api.routes.v1.items import router as items_router
from auction.api.routes.v1.users import router as users_router
from auction.core.config import settings
from auction.core.events import shutdown_event_handlers, startup_event_handlers
from auction.core.logging import configure_logging
from auction.core.metrics import setup_metrics
from auction.core.tracing import setup_tracing

ROUTERS = (
    (health_router, f"{settings.API_PREFIX}/health", "Health"),
    (categories_router, f"{settings.API_PREFIX}/v1/categories", "Categories"),
    (items_router, f"{settings.API_PREFIX}/v1/items", "Items"),
    (bids_router, f"{settings.API_PREFIX}/v1/items", "Bids"),
    (users_router, f"{settings.API_PREFIX}/v1/users", "Users"),
)

OPENAPI_TAGS = [
    {"name": "Health", "description": "Liveness and readiness probes"},
    {"name": "Categories", "description": "Category listing, creation and cascading delete"},
    {"name": "Items", "description": "Item listing, images and the new-lot feed"},
    {"name": "Bids", "description": "Bid placement, current leader and closing"},
    {"name": "Users", "description": "User cache, per-user bids and favorites"},
]


def init_sentry() -> None:
    if not settings.SENTRY_DSN:
        return
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        environment=settings.ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        release=f"{settings.PROJECT_NAME}@{settings.VERSION}",
    )
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Run startup hooks before serving and shutdown hooks after the last request.
    """
    init_sentry()

    for handler in startup_event_handlers:
        await handler()
    logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} ready ({settings.ENVIRONMENT})")

    yield

    for handler in shutdown_event_handlers:
        await handler()


def _docs_path(path: str) -> Optional[str]:
    # Interactive docs are not served in production
    return None if settings.ENVIRONMENT == "production" else f"{settings.API_PREFIX}{path}"


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """
    configure_logging()

    application = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.PROJECT_DESCRIPTION,
        version=settings.VERSION,
        docs_url=_docs_path("/docs"),
        redoc_url=_docs_path("/redoc"),
        openapi_url=_docs_path("/openapi.json"),
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
    )

    register_exception_handlers(application)

    origins = settings.CORS_ORIGINS_STR.split(",")
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if origins == ["*"] else [origin.strip() for origin in origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.ENABLE_METRICS:
        setup_metrics(application)

    setup_tracing(application)

    for router, prefix, tag in ROUTERS:
        application.include_router(router, prefix=prefix, tags=[tag])

    return application


app = create_application()
