"""Core configuration and factory components."""

from docforge.core.config import Settings, get_settings
from docforge.core.factory import ComponentFactory, get_factory

__all__ = [
    "Settings",
    "get_settings",
    "ComponentFactory",
    "get_factory",
]
