"""
Configuration helpers for taxonomy files and operator settings.
"""

from .models import CategoryDescriptor, ConfigError, ContentKind, Taxonomy, load_taxonomy
from .settings import Settings, get_settings

__all__ = [
    "CategoryDescriptor",
    "ConfigError",
    "ContentKind",
    "Taxonomy",
    "load_taxonomy",
    "Settings",
    "get_settings",
]
