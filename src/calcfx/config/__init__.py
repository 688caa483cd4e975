"""Configuration package."""

from .settings import Settings, default_settings, get_settings, load_settings

__all__ = ["Settings", "default_settings", "get_settings", "load_settings"]
