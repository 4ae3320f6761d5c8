"""
Ownership validators.
"""
from .base import PermissionValidator
from .registry import ValidatorRegistry
from .staff import StaffClassIdValidator, StaffUserIdValidator

__all__ = [
    "PermissionValidator",
    "ValidatorRegistry",
    "StaffClassIdValidator",
    "StaffUserIdValidator",
]
