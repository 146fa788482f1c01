import asyncio
import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .api.v1.router import api_router
from .config import get_settings
from .core.database import create_tables
from .core.logging_config import apply_logging_preferences, configure_logging
from .exceptions import Fault, NewsdeskError
from .news.transform import IMAGES_URL_PATH
from .services.image_reconciler import run_periodically

settings = get_settings()

configure_logging(settings)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    apply_logging_preferences()
    logger.info("Starting Newsdesk API", version="0.1.0")
    try:
        create_tables()
        logger.info("Database tables created/verified")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    reconcile_task = None
    if settings.reconcile_on_startup:
        reconcile_task = asyncio.create_task(run_periodically(settings.reconcile_interval_minutes))
        logger.info("Image reconciliation scheduled", interval_minutes=settings.reconcile_interval_minutes)

    yield

    if reconcile_task is not None:
        reconcile_task.cancel()
    logger.info("Shutting down Newsdesk API")


def create_application() -> FastAPI:
    app = FastAPI(
        title="Newsdesk",
        description="News publishing API with image uploads and owner-restricted editing",
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

    @app.exception_handler(NewsdeskError)
    async def newsdesk_exception_handler(request: Request, exc: NewsdeskError):
        if isinstance(exc, Fault):
            logger.error(
                "Request failed",
                path=request.url.path,
                method=request.method,
                error_code=exc.error_code,
                error=exc.message,
                details=exc.details,
                exc_info=exc,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

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
            content={"status": 500, "message": Fault.public_message},
        )

    # Health check at root
    from .api.v1.endpoints import health
    app.include_router(health.router, tags=["health"])

    # Stored news images
    os.makedirs(settings.image_dir, exist_ok=True)
    app.mount(f"/{IMAGES_URL_PATH}", StaticFiles(directory=settings.image_dir), name="images")

    # Include API router
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "newsdesk.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="info",
        access_log=False,
    )
