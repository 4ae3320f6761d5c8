"""
Business logic layer.
Can import from: models
Must NOT import from: routers
"""

from .user_relation_service import UserRelationService, get_user_relation_service

__all__ = [
    "UserRelationService",
    "get_user_relation_service",
]
