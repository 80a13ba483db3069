from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.v1 import api_router
from .config import get_settings
from .core.database import create_tables
from .core.exceptions import NewsroomError, StorageConfigurationError, ValidationError
from .core.logging import configure_logging
from .storage import create_storage_service

settings = get_settings()

configure_logging(settings)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Newsroom Storage API", version="0.1.0")
    try:
        create_tables()
        logger.info("Database tables created/verified")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    try:
        app.state.storage_service = create_storage_service(settings)
    except StorageConfigurationError as e:
        logger.error("Object storage is not configured", **e.details)
        raise
    logger.info("Object storage ready", backend=settings.storage_backend, buckets=settings.storage_buckets)

    yield

    await app.state.storage_service.aclose()
    logger.info("Shutting down Newsroom Storage API")


def _status_for(exc: NewsroomError) -> int:
    if isinstance(exc, StorageConfigurationError):
        return 503
    if isinstance(exc, ValidationError):
        return 400
    return 500


def create_application() -> FastAPI:
    app = FastAPI(
        title="Newsroom Storage",
        description="Admin storage tools for the newsroom: image uploads and orphaned image cleanup",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/api/v1/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NewsroomError)
    async def newsroom_exception_handler(request: Request, exc: NewsroomError):
        logger.warning(
            "Request failed",
            path=request.url.path,
            error_code=exc.error_code,
            error=exc.message,
        )
        return JSONResponse(status_code=_status_for(exc), content=exc.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception occurred",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred. Please try again later.",
            }
        )

    # Health check at root
    from .api.v1.endpoints import health
    app.include_router(health.router, tags=["health"])

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "newsroom.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="info",
        access_log=False,
    )
