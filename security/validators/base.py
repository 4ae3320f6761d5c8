"""
Ownership validator contract.
"""
from abc import ABC, abstractmethod

from security.context import PrincipalData, TargetParameter


class PermissionValidator(ABC):
    """
    Decides whether a target parameter belongs to the principal.

    Both arguments carry every extracted value; how multiple values combine (all must be
    owned, any may be owned) is the validator's call, not the engine's.
    """

    @property
    @abstractmethod
    def validator_id(self) -> str:
        """Identifier referenced by a target's validatorId."""

    @abstractmethod
    def validate(self, principal: PrincipalData, target: TargetParameter) -> bool:
        """True when the principal owns the target."""
