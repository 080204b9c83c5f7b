"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from esign.core.config import settings
from esign.core.logging import setup_logging
from esign.db import init_db
from esign.db.migrations import run_migrations
from esign.deps import close_gateway
from esign.lifecycle.errors import (
    AccessDenied,
    Conflict,
    InvalidTransition,
    LifecycleError,
    NotFound,
    RevealLimitReached,
    Timeout,
    ValidationError,
)
from esign.routes import (
    assist_router,
    client_router,
    documents_router,
    health_router,
    payments_router,
    requests_router,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 422,
    InvalidTransition: 409,
    Conflict: 409,
    AccessDenied: 403,
    NotFound: 404,
    RevealLimitReached: 429,
    Timeout: 504,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize resources on startup and release them on shutdown."""
    setup_logging()

    if settings.AUTO_MIGRATE:
        run_migrations(settings.DATABASE_URL)
    else:
        await init_db()

    logger.info("%s started (%s)", settings.APP_NAME, settings.APP_ENV)
    yield

    close_gateway()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)


@app.exception_handler(LifecycleError)
async def lifecycle_error_handler(request: Request, exc: LifecycleError):
    status_code = ERROR_STATUS.get(type(exc), 400)
    if status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content={"error": exc.code, "detail": exc.message})


# Register routers
app.include_router(health_router)
app.include_router(documents_router)
app.include_router(client_router)
app.include_router(requests_router)
app.include_router(assist_router)
app.include_router(payments_router)
