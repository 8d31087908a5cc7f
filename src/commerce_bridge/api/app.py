"""FastAPI application hosting the Commerce Bridge."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from commerce_bridge.api.router import router as commerce_router
from commerce_bridge.bridge.callbacks import TransactionCallback
from commerce_bridge.bridge.service import close_commerce_bridge, init_commerce_bridge
from commerce_bridge.config import get_settings
from commerce_bridge.store.capabilities import CapabilityProvider
from commerce_bridge.store.client import StoreClient

logger = logging.getLogger(__name__)


def create_app(
    store: StoreClient | None = None,
    callback: TransactionCallback | None = None,
    capabilities: CapabilityProvider | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Store client for the bridge (in-memory store if not provided).
        callback: Outbound transaction callback (webhook from settings if not provided).
        capabilities: Capability provider (derived from settings if not provided).

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup/shutdown events."""
        # Startup: Create the bridge and start listening for updates
        bridge = init_commerce_bridge(
            store=store,
            capabilities=capabilities,
            callback=callback,
            settings=settings,
        )
        if settings.listen_on_startup:
            logger.info("Starting transaction listener")
            await bridge.start_listening()

        yield

        # Shutdown: Stop the listener and release the bridge
        logger.info("Shutting down commerce bridge")
        await close_commerce_bridge()

    app = FastAPI(
        title="Commerce Bridge",
        description="Bridge between the application and the platform commerce store",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # Health check endpoint
    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy", "service": "commerce-bridge"}

    # Ready check endpoint
    @app.get("/ready")
    async def ready_check() -> dict:
        """Readiness check endpoint."""
        return {"status": "ready", "service": "commerce-bridge"}

    app.include_router(commerce_router)

    return app
