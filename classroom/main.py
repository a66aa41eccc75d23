from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from classroom.api.attendance import router as attendance_router
from classroom.api.health import router as health_router
from classroom.api.metrics_endpoint import router as metrics_router
from classroom.api.progress import router as progress_router
from classroom.api.submissions import router as submissions_router
from classroom.core.config import SETTINGS
from classroom.core.logging import setup_logging
from classroom.db.engine import lifespan_db
from classroom.db.redis import lifespan_redis
from classroom.middleware.metrics import MetricsMiddleware
from classroom.middleware.request_context import RequestContextMiddleware
from classroom.services import events

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Teardown runs in reverse order.
    async with lifespan_db():
        async with lifespan_redis():
            logger.info("Event queue backlog: %s", await events.queue_backlog())
            yield


app = FastAPI(
    title="classroom-progress",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Last-added runs first: RequestContext -> Metrics -> route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(progress_router)
app.include_router(attendance_router)
app.include_router(submissions_router)

logger.info(
    "classroom-progress started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)
