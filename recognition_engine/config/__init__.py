"""
Configuration management for the recognition engine.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for service configuration.
"""

from recognition_engine.config.settings import Settings, get_settings, reset_settings_cache  # noqa: F401

__all__ = ["Settings", "get_settings", "reset_settings_cache"]
