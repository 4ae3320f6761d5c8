"""
Validator registry: validator id -> ownership predicate.
"""
import logging
from typing import Dict, Iterable, List, Optional

from security.validators.base import PermissionValidator
from utils.exceptions import UnknownValidatorError

logger = logging.getLogger(__name__)


class ValidatorRegistry:
    """Built once at startup; later registrations for an id override earlier ones."""

    def __init__(self, validators: Optional[Iterable[PermissionValidator]] = None):
        self._validators: Dict[str, PermissionValidator] = {}
        validators = list(validators or [])
        if not validators:
            logger.warning("[VALIDATOR] No permission validators supplied")
        for validator in validators:
            self.register(validator)
        logger.info(f"[VALIDATOR] Registry ready with {len(self._validators)} validator(s): {self.validator_ids()}")

    def register(self, validator: PermissionValidator) -> bool:
        class_name = type(validator).__name__
        validator_id = getattr(validator, "validator_id", None)
        if not isinstance(validator_id, str) or not validator_id.strip():
            logger.warning(f"[VALIDATOR] {class_name} has an empty validator id, skipping registration")
            return False

        existing = self._validators.get(validator_id)
        if existing is not None:
            logger.warning(
                f"[VALIDATOR] Validator id {validator_id} already served by {type(existing).__name__}, "
                f"overriding with {class_name}"
            )
        self._validators[validator_id] = validator
        logger.debug(f"[VALIDATOR] Registered {class_name} as {validator_id}")
        return True

    def get_validator(self, validator_id: Optional[str]) -> PermissionValidator:
        """Resolve a validator id; raises UnknownValidatorError naming every registered id."""
        validator = self._validators.get(validator_id) if isinstance(validator_id, str) else None
        if validator is None:
            raise UnknownValidatorError(validator_id, self._validators.keys())
        return validator

    def validator_ids(self) -> List[str]:
        return sorted(self._validators)

    def __contains__(self, validator_id: str) -> bool:
        return validator_id in self._validators

    def __len__(self) -> int:
        return len(self._validators)
