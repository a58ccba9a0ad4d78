"""
Main FastAPI Application
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace.api import bids, categories, items, questions, users
from marketplace.core.config import get_settings
from marketplace.core.errors import MarketplaceError
from marketplace.core.logging_config import setup_logging
from marketplace.infrastructure.database import init_db
from marketplace.infrastructure.lock import get_item_lock
from marketplace.middleware.tracing import TracingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for startup and shutdown"""
    settings = get_settings()
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    init_db()

    item_lock = get_item_lock()
    if item_lock.backend == "redis":
        from marketplace.infrastructure.redis_client import check_redis_connection
        if check_redis_connection():
            logger.info("Redis connected, using distributed item locks")
        else:
            logger.warning("Redis not connected, bids will fail until it is reachable")
    else:
        logger.info("Using in-process item locks")

    yield

    logger.info("Shutdown complete")


async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    """Render domain errors as {"error_message": ...}"""
    return JSONResponse(status_code=exc.status_code, content={"error_message": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Request validation failures are 400s with the first problem as message

    A malformed path id is reported as not found.
    """
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ())]

    if loc and loc[0] == "path":
        return JSONResponse(status_code=404, content={"error_message": "Not found"})

    field = ".".join(loc[1:]) or "request"
    message = first.get("msg", "Invalid request")
    return JSONResponse(status_code=400, content={"error_message": f"{field}: {message}"})


def create_app() -> FastAPI:
    """Build the application"""
    settings = get_settings()
    setup_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(TracingMiddleware)

    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(users.router)
    app.include_router(items.router)
    app.include_router(bids.router)
    app.include_router(questions.router)
    app.include_router(categories.router)

    @app.get("/health", tags=["health"])
    def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "lock_backend": get_item_lock().backend,
        }

    return app


app = create_app()
