"""Configuration for the bugreport layer."""

from .context import AppContext
from .settings import Settings, get_settings

__all__ = ["AppContext", "Settings", "get_settings"]
