from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from learnhub.api.cart import router as cart_router
from learnhub.api.certificates import router as certificates_router
from learnhub.api.checkout import router as checkout_router
from learnhub.api.courses import router as courses_router
from learnhub.api.health import router as health_router
from learnhub.api.instructor import router as instructor_router
from learnhub.api.metrics_endpoint import router as metrics_router
from learnhub.api.moderation import router as moderation_router
from learnhub.api.progress import router as progress_router
from learnhub.api.sessions import sessions
from learnhub.core.config import SETTINGS
from learnhub.core.logging import setup_logging
from learnhub.db.engine import lifespan_db
from learnhub.db.redis import lifespan_redis
from learnhub.middleware.metrics import MetricsMiddleware
from learnhub.middleware.request_context import (
    RequestContextMiddleware,
    install_log_filter,
)

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
install_log_filter()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Teardown runs in reverse: sessions drain before Redis and the DB close.
    async with lifespan_db():
        async with lifespan_redis():
            try:
                yield
            finally:
                await sessions.close_all()


app = FastAPI(
    title="learnhub-engine",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Last-added runs first: RequestContext → Metrics → route handler.
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(courses_router)
app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(progress_router)
app.include_router(certificates_router)
app.include_router(moderation_router)
app.include_router(instructor_router)

logger.info(
    "learnhub-engine started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)
