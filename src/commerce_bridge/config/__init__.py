"""Configuration module for the Commerce Bridge."""

from commerce_bridge.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
