"""
Service configuration: environment settings and permission rule loading.
"""
from .settings import Settings, settings

__all__ = ["Settings", "settings"]
