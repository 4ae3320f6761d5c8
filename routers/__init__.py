"""
API endpoints and request handling.
Can import from: services, models
"""

from . import staff

__all__ = [
    "staff",
]
