"""
Pytest configuration and fixtures for permission guard testing.
Provides rule documents, registries, engines and fully wired test applications.
"""
import os
import copy
import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from typing import Any, Dict, List, Optional

# Set testing environment before importing the app
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("PERMISSION_RULES_FILE", None)
os.environ.pop("PERMISSION_RULES_JSON", None)
os.environ.pop("PERMISSION_ENABLED", None)

from config.rule_loader import parse_global_config
from config.settings import Settings
from main import create_app
from security.context import PrincipalData, RequestContext, TargetParameter
from security.extractors import ExtractorRegistry, RequestView, builtin_extractors
from security.permission_engine import PermissionEngine
from security.validators import PermissionValidator, StaffClassIdValidator, StaffUserIdValidator, ValidatorRegistry


SCHEDULE_RULE = {
    "uriPattern": "/api/staffs/{staffId}/schedules",
    "enabled": True,
    "principalParam": {"name": "staffId", "source": "PATH", "parseMethod": "PATH_MATCH"},
    "targetParams": [
        {
            "name": "userId",
            "source": "BODY",
            "parseMethod": "JSON_PATH",
            "parseConfig": "$.userId",
            "validatorId": "staffId-userId",
        }
    ],
    "matchMode": "ANY_MATCH",
}

LOG_RULE = {
    "uriPattern": "/staffs/{staffId}/logs/**",
    "enabled": True,
    "principalParam": {"name": "staffId", "source": "PATH"},
    "targetParams": [
        {"name": "id", "source": "PATH", "validatorId": "staffId-userId"},
        {"name": "classId", "source": "QUERY", "validatorId": "staffId-classId"},
    ],
    "matchMode": "ALL_MATCH",
}


class RecordingValidator(PermissionValidator):
    """Validator answering from a fixed table and remembering the order it was asked in."""

    def __init__(self, validator_id: str, answer: bool, calls: Optional[List[str]] = None):
        self._validator_id = validator_id
        self.answer = answer
        self.calls = calls if calls is not None else []

    @property
    def validator_id(self) -> str:
        return self._validator_id

    def validate(self, principal: PrincipalData, target: TargetParameter) -> bool:
        self.calls.append(target.name)
        return self.answer


def make_view(
    method: str = "GET",
    path: str = "/",
    path_params: Optional[Dict[str, Any]] = None,
    query: Optional[List] = None,
    headers: Optional[List] = None,
    body: Optional[bytes] = None,
) -> RequestView:
    return RequestView.build(
        method=method,
        path=path,
        path_params=path_params,
        query_items=query or [],
        headers=headers or [],
        body=body,
    )


@pytest.fixture
def schedule_rule() -> Dict[str, Any]:
    return copy.deepcopy(SCHEDULE_RULE)


@pytest.fixture
def log_rule() -> Dict[str, Any]:
    return copy.deepcopy(LOG_RULE)


@pytest.fixture
def rule_document(schedule_rule, log_rule) -> Dict[str, Any]:
    """Rule document covering both demo routes."""
    return {"enabled": True, "rules": [schedule_rule, log_rule]}


@pytest.fixture
def test_settings() -> Settings:
    return Settings(environment="test", permission_max_body_bytes=0, verbose_error_messages=False)


@pytest.fixture
def extractor_registry() -> ExtractorRegistry:
    return ExtractorRegistry(builtin_extractors())


@pytest.fixture
def validator_registry() -> ValidatorRegistry:
    return ValidatorRegistry([StaffUserIdValidator(), StaffClassIdValidator()])


@pytest.fixture
def engine_factory(extractor_registry, validator_registry):
    """Build an engine from a rule document after startup-style validation."""
    def _build(document: Dict[str, Any], validators: Optional[ValidatorRegistry] = None) -> PermissionEngine:
        config = parse_global_config(document)
        config.validate()
        return PermissionEngine(config, extractor_registry, validators or validator_registry)
    return _build


@pytest.fixture
def app_factory(test_settings):
    """Build a fully wired application from a rule document."""
    def _build(document: Dict[str, Any], settings: Optional[Settings] = None, **kwargs):
        return create_app(settings=settings or test_settings, global_config=parse_global_config(document), **kwargs)
    return _build


@pytest.fixture
def client(app_factory, rule_document):
    """Test client for the app guarded by both demo rules."""
    with TestClient(app_factory(rule_document)) as test_client:
        yield test_client


@pytest.fixture
def fresh_context() -> RequestContext:
    return RequestContext(uri="/")


@pytest.fixture
def mock_relation_service():
    """Mock relationship store for validator tests."""
    service = MagicMock()
    service.is_staff_owner_of_user.return_value = True
    service.is_staff_owner_of_class.return_value = True
    return service


@pytest.fixture
def view_factory():
    """Build RequestViews the way the permission dependency does."""
    return make_view


@pytest.fixture
def recording_validator():
    return RecordingValidator


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "security: mark test as security related")
