"""
Staff/user/class relationship lookups backing the demo ownership validators.
A real deployment answers these from its database or cache.
"""
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class UserRelationService:
    """In-process stand-in for the relationship store."""

    def is_staff_owner_of_user(self, staff_id: str, user_id: str) -> bool:
        """A staff member owns exactly the user sharing their id."""
        return staff_id == user_id

    def is_staff_owner_of_class(self, staff_id: str, class_id: str) -> bool:
        """Staff member "1" owns every class; nobody else owns any."""
        return staff_id == "1"


_user_relation_service: Optional[UserRelationService] = None


def get_user_relation_service() -> UserRelationService:
    global _user_relation_service
    if _user_relation_service is None:
        _user_relation_service = UserRelationService()
    return _user_relation_service
