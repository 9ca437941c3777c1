"""FastAPI application entry point.

Tourism Payouts API - guide scoring and monthly payouts for sponsor stores.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tourism_api.routes import api_router
from tourism_api.schemas import ErrorResponse
from tourism_api.services.errors import PayoutError
from tourism_api.services.payout_service import PayoutService
from tourism_api.settings import get_settings
from tourism_api.stores.postgres import Database
from tourism_api.stores.redis import RedisStore

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Builds the PayoutService once and exposes it on `app.state`.
    """
    # Startup
    settings = get_settings()

    db = Database.from_settings(settings)
    try:
        await db.ping()
        logger.info("Postgres connected")
    except Exception:
        logger.exception("Postgres init failed")

    # Redis is optional: without it guide summaries are simply not cached.
    cache: RedisStore | None = None
    try:
        cache = await RedisStore.connect(settings)
    except Exception:
        logger.exception("Redis init failed, continuing without cache")

    app.state.payout_service = PayoutService(db, cache)

    yield

    # Shutdown
    app.state.payout_service = None
    if cache is not None:
        await cache.close()
    await db.dispose()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Guide scoring and monthly payout API for the tourism marketplace",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PayoutError)
    async def payout_error_handler(request: Request, exc: PayoutError) -> JSONResponse:
        """Domain errors keep their code and a message fit for display."""
        if exc.status_code >= 500:
            logger.error(f"[payouts] {exc.code}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse.build(exc.code, exc.message, exc.detail).model_dump(),
        )

    # Exception handler for structured error format
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse.build(
                "INTERNAL_ERROR",
                str(exc) if settings.debug else "Internal server error",
            ).model_dump(),
        )

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    # Include API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "tourism_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
