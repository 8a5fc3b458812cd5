"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from geometry_api.config import Settings, get_settings
from geometry_api.api.v1 import router as api_v1_router
from geometry_api.services.store import create_store

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application; the geometry store lives for the app's lifespan."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        # Startup
        logger.info("Starting %s...", settings.APP_NAME)
        app.state.geometry_store = await create_store(settings)
        try:
            yield
        finally:
            # Shutdown
            logger.info("Shutting down %s...", settings.APP_NAME)
            await app.state.geometry_store.close()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Normalize, validate and store point, linestring and polygon WKT",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routers
    app.include_router(api_v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "app": settings.APP_NAME, "store": settings.GEOMETRY_STORE}

    return app


app = create_app()
