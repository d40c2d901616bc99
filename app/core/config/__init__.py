"""Configuration package exports."""

from .settings import BASE_DIR, Settings, settings

__all__ = ["BASE_DIR", "Settings", "settings"]
