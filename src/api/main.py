"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.errors import register_exception_handlers
from src.api.routes import health, uploads, videos
from src.config import settings
from src.infrastructure.logging import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging(settings.log_level, json_output=settings.log_json)
    logger.info("video_upload_api_starting")
    yield
    logger.info("video_upload_api_stopping")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Reseller Video Uploads",
        description="Resumable OneDrive upload sessions and product video metadata.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.app_origin],
        allow_origin_regex=r"^https://.*\.netlify\.app$|^http://localhost(:\d+)?$",
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(uploads.router)
    app.include_router(videos.router)

    return app


app = create_app()
