"""Configuration helpers for the tourdesk admin backend."""

from .settings import get_settings, Settings

__all__ = ["get_settings", "Settings"]
