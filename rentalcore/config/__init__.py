"""Config package - environment settings and store profiles."""

from .settings import Settings, get_settings, load_settings

__all__ = [
    "Settings",
    "get_settings",
    "load_settings",
]
