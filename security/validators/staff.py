"""
Staff ownership validators used by the demo routes.

Both require every target value to be owned by the first principal value. A target that
yielded no values is not owned.
"""
import logging
from abc import abstractmethod
from typing import Optional

from security.context import PrincipalData, TargetParameter
from security.validators.base import PermissionValidator
from services.user_relation_service import UserRelationService, get_user_relation_service

logger = logging.getLogger(__name__)


class _StaffOwnershipValidator(PermissionValidator):

    def __init__(self, relation_service: Optional[UserRelationService] = None):
        self.relation_service = relation_service or get_user_relation_service()

    @abstractmethod
    def _owns(self, staff_id: str, target_value: str) -> bool:
        """Whether the staff member owns one target value."""

    def validate(self, principal: PrincipalData, target: TargetParameter) -> bool:
        if not principal.values or not target.values:
            logger.info(f"[VALIDATOR] {self.validator_id}: nothing to compare for {target.name}")
            return False
        staff_id = principal.values[0]
        return all(self._owns(staff_id, value) for value in target.values)


class StaffUserIdValidator(_StaffOwnershipValidator):
    validator_id = "staffId-userId"

    def _owns(self, staff_id: str, target_value: str) -> bool:
        return self.relation_service.is_staff_owner_of_user(staff_id, target_value)


class StaffClassIdValidator(_StaffOwnershipValidator):
    validator_id = "staffId-classId"

    def _owns(self, staff_id: str, target_value: str) -> bool:
        return self.relation_service.is_staff_owner_of_class(staff_id, target_value)
