"""Host API for the Commerce Bridge."""

from commerce_bridge.api.app import create_app
from commerce_bridge.api.router import router as commerce_router

__all__ = ["create_app", "commerce_router"]
