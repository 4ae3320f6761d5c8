"""
Exceptions for the object-level permission guard.
Three distinct failure families reach the HTTP boundary: access denial (403),
configuration defects detected while evaluating a request (400), and anything else (500).
Extraction failures are never raised; extractors degrade to an empty value list.
"""
import uuid
from typing import Optional, Dict, Any, Iterable
from datetime import datetime, timezone
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels for monitoring and alerting."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categorization for handling and monitoring."""
    AUTHORIZATION = "authorization"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


class PermissionGuardError(Exception):
    """Base exception for all permission guard errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        correlation_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)
        self.error_code = error_code or self._generate_error_code()
        self.severity = severity
        self.category = category
        self.correlation_id = correlation_id or str(uuid.uuid4())

    def _generate_error_code(self) -> str:
        """Generate a unique error code for tracking."""
        return f"{self.__class__.__name__.upper()}_{int(self.timestamp.timestamp() * 1000)}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "category": self.category.value,
            "details": self.details,
            "correlation_id": self.correlation_id,
            "timestamp": self.timestamp.isoformat(),
            "exception_type": self.__class__.__name__,
        }


# ============================================================================
# ACCESS DENIAL
# ============================================================================

class AccessDeniedError(PermissionGuardError):
    """Raised when the principal is missing or does not own the requested targets."""

    def __init__(
        self,
        message: str,
        uri: Optional[str] = None,
        rule: Optional[str] = None,
        **kwargs
    ):
        kwargs.setdefault('category', ErrorCategory.AUTHORIZATION)
        kwargs.setdefault('severity', ErrorSeverity.HIGH)
        super().__init__(message, **kwargs)
        self.uri = uri
        self.rule = rule
        self.details.update({'uri': uri, 'rule': rule})


# ============================================================================
# CONFIGURATION DEFECTS
# ============================================================================

class PermissionConfigurationError(PermissionGuardError):
    """A rule references something the running process cannot honour."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('category', ErrorCategory.CONFIGURATION)
        kwargs.setdefault('severity', ErrorSeverity.HIGH)
        super().__init__(message, **kwargs)


class UnsupportedParseMethodError(PermissionConfigurationError):
    """No extractor is registered for a parse method."""

    def __init__(self, parse_method: Optional[str], registered: Iterable[str]):
        self.parse_method = parse_method
        self.registered = sorted(registered)
        super().__init__(
            f"Unsupported parse method: {parse_method!r}, registered methods: {self.registered}",
            details={'parse_method': parse_method, 'registered': self.registered},
        )


class UnsupportedSourceError(PermissionConfigurationError):
    """An extractor was asked to read from a source it does not declare."""

    def __init__(self, parse_method: str, source: Any, param_name: Optional[str]):
        self.parse_method = parse_method
        self.source = source
        self.param_name = param_name
        source_name = getattr(source, "value", source)
        super().__init__(
            f"Extractor {parse_method} does not support source {source_name} (parameter: {param_name})",
            details={'parse_method': parse_method, 'source': source_name, 'param_name': param_name},
        )


class UnknownValidatorError(PermissionConfigurationError):
    """A target references a validator id that was never registered."""

    def __init__(self, validator_id: Optional[str], registered: Iterable[str]):
        self.validator_id = validator_id
        self.registered = sorted(registered)
        super().__init__(
            f"Unknown validator id: {validator_id!r}, registered ids: {self.registered}",
            details={'validator_id': validator_id, 'registered': self.registered},
        )
