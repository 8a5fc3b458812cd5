"""Store backend selection."""
import logging

from geometry_api.config import Settings
from geometry_api.services.store_base import GeometryStore

logger = logging.getLogger(__name__)


async def create_store(settings: Settings) -> GeometryStore:
    """Build the store backend configured by GEOMETRY_STORE.

    Called once per application from the lifespan handler; the caller owns
    the returned store and must ``await store.close()`` on shutdown.
    """
    if settings.GEOMETRY_STORE == "postgis":
        from geometry_api.services.store_postgis import PostgisStore

        store = PostgisStore(settings.DATABASE_URL, echo=settings.DEBUG)
        if settings.AUTO_CREATE_TABLES:
            logger.info("Creating geometry tables")
            await store.create_tables()
        logger.info("Using PostGIS geometry store")
        return store

    from geometry_api.services.store_memory import MemoryStore

    logger.info("Using in-memory geometry store")
    return MemoryStore()
