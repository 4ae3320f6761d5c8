"""
Tests for logging formatters and the exception hierarchy.
"""
import json
import logging
import pytest

from utils.exceptions import (
    AccessDeniedError,
    ErrorCategory,
    ErrorSeverity,
    PermissionConfigurationError,
    PermissionGuardError,
    UnknownValidatorError,
    UnsupportedSourceError,
)
from utils.logging_config import ColoredFormatter, StructuredFormatter, setup_logging


def make_record(message="denied", **extra):
    record = logging.LogRecord("security.permission_engine", logging.WARNING, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestFormatters:

    def test_structured_formatter_emits_json_with_extras(self):
        output = StructuredFormatter().format(make_record(uri="/api/staffs/1/schedules", rule="/api/**"))
        entry = json.loads(output)
        assert entry["level"] == "WARNING"
        assert entry["message"] == "denied"
        assert entry["uri"] == "/api/staffs/1/schedules"
        assert entry["rule"] == "/api/**"
        assert "request_id" not in entry

    def test_colored_formatter_leaves_record_untouched(self):
        record = make_record()
        output = ColoredFormatter("%(levelname)s %(message)s").format(record)
        assert "\033[33m" in output
        assert record.levelname == "WARNING"

    def test_setup_logging_configures_root(self):
        root = logging.getLogger()
        previous_handlers, previous_level = list(root.handlers), root.level
        try:
            setup_logging("debug", structured=True)
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        finally:
            root.handlers[:] = previous_handlers
            root.setLevel(previous_level)


@pytest.mark.unit
class TestExceptions:

    def test_access_denied(self):
        error = AccessDeniedError("principal missing: staffId", uri="/api/staffs/1/schedules", rule="/api/**")
        assert isinstance(error, PermissionGuardError)
        assert not isinstance(error, PermissionConfigurationError)
        assert error.category is ErrorCategory.AUTHORIZATION
        assert error.to_dict()["details"] == {"uri": "/api/staffs/1/schedules", "rule": "/api/**"}

    def test_configuration_errors(self):
        error = UnknownValidatorError("x", {"b", "a"})
        assert isinstance(error, PermissionConfigurationError)
        assert error.registered == ["a", "b"]
        assert error.category is ErrorCategory.CONFIGURATION
        assert error.severity is ErrorSeverity.HIGH

    def test_unsupported_source_message(self):
        error = UnsupportedSourceError("CUSTOM#XML_PATH", "HEADER", "staffId")
        assert "HEADER" in error.message
        assert "staffId" in error.message
