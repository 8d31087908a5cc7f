"""Tests for settings and logging setup."""

import logging

from commerce_bridge.config import Settings, get_settings
from commerce_bridge.main import HTTP_CLIENT_LOGGERS, setup_logging


class TestSettings:
    """Tests for Settings."""

    def test_environment_values(self):
        """Test values loaded from the test environment."""
        settings = get_settings()

        assert settings.store_platform == "ios"
        assert settings.store_platform_version == "18.0"
        assert settings.listen_on_startup is True
        assert settings.transaction_webhook_url is None

    def test_defaults(self):
        """Test defaults for values the environment leaves unset."""
        settings = Settings()

        assert settings.transaction_webhook_timeout_seconds == 10.0
        assert settings.bridge_port == 8000
        assert settings.log_format == "text"

    def test_overrides(self):
        """Test explicit overrides."""
        settings = Settings(store_platform="macos", store_platform_version="14.4")

        assert settings.store_platform == "macos"
        assert settings.store_platform_version == "14.4"

    def test_settings_cached(self):
        """Test that get_settings returns one instance."""
        assert get_settings() is get_settings()


class TestLogging:
    """Tests for setup_logging."""

    def test_setup_logging(self):
        """Test logger levels for the bridge and the webhook HTTP client."""
        root = logging.getLogger()
        named = [logging.getLogger(n) for n in ("commerce_bridge", *HTTP_CLIENT_LOGGERS)]
        saved_handlers, saved_level = root.handlers[:], root.level
        saved_named = [logger.level for logger in named]
        root.handlers = []
        try:
            setup_logging()

            assert root.level == logging.INFO
            assert len(root.handlers) == 1
            # DEBUG=true in the test environment
            assert logging.getLogger("commerce_bridge").level == logging.DEBUG
            assert logging.getLogger("httpx").level == logging.WARNING
            assert logging.getLogger("httpcore").level == logging.WARNING
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)
            for logger, level in zip(named, saved_named):
                logger.setLevel(level)
