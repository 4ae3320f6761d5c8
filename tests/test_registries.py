"""
Tests for extractor and validator registration, overriding and lookup.
"""
import logging
import pytest
from typing import List

from models.permission import ParamSource
from security.extractors import (
    DefaultExtractor,
    ExtractorRegistry,
    JsonPathExtractor,
    ParameterExtractor,
    PathMatchExtractor,
    XmlPathExtractor,
    builtin_extractors,
)
from security.validators import StaffClassIdValidator, StaffUserIdValidator, ValidatorRegistry
from utils.exceptions import PermissionConfigurationError, UnknownValidatorError, UnsupportedParseMethodError


class StubExtractor(ParameterExtractor):
    """Extractor with a configurable self-description."""

    def __init__(self, parse_method, sources, values=None):
        self._parse_method = parse_method
        self._sources = sources
        self.values = values or []

    @property
    def parse_method(self):
        return self._parse_method

    @property
    def supported_sources(self):
        return self._sources

    def extract(self, request, param_name, parse_config, source, body_buffered) -> List[str]:
        return list(self.values)


@pytest.mark.unit
class TestExtractorRegistry:

    def test_builtins(self):
        registry = ExtractorRegistry(builtin_extractors())
        assert registry.supported_parse_methods() == ["CUSTOM#XML_PATH", "DEFAULT", "JSON_PATH", "PATH_MATCH"]
        assert isinstance(registry.get_extractor("PATH_MATCH"), PathMatchExtractor)
        assert isinstance(registry.get_extractor("json_path"), JsonPathExtractor)
        assert isinstance(registry.get_extractor("XML_PATH"), XmlPathExtractor)
        assert "DEFAULT" in registry
        assert len(registry) == 4

    def test_later_registration_overrides(self, caplog):
        replacement = StubExtractor("DEFAULT", [ParamSource.QUERY])
        with caplog.at_level(logging.WARNING):
            registry = ExtractorRegistry([DefaultExtractor(), replacement])
        assert registry.get_extractor("DEFAULT") is replacement
        assert "overriding" in caplog.text

    @pytest.mark.parametrize("parse_method", [None, "", "   "])
    def test_empty_parse_method_skipped(self, parse_method):
        registry = ExtractorRegistry([StubExtractor(parse_method, [ParamSource.QUERY])])
        assert len(registry) == 0

    def test_none_parse_method_skipped(self):
        registry = ExtractorRegistry([StubExtractor("NONE", [ParamSource.QUERY])])
        assert len(registry) == 0

    @pytest.mark.parametrize("sources", [[], None, ["QUERY", "FORM"]])
    def test_invalid_sources_skipped(self, sources):
        registry = ExtractorRegistry([StubExtractor("DEFAULT", sources)])
        assert "DEFAULT" not in registry

    def test_string_sources_accepted(self):
        extractor = StubExtractor("DEFAULT", ["query", "HEADER"])
        registry = ExtractorRegistry([extractor])
        assert registry.supports_source(extractor, ParamSource.HEADER)
        assert registry.supports_source(extractor, "QUERY")
        assert not registry.supports_source(extractor, ParamSource.BODY)

    def test_custom_parse_method_canonicalised(self):
        custom = StubExtractor("signed_token", [ParamSource.HEADER])
        registry = ExtractorRegistry([custom])
        assert registry.supported_parse_methods() == ["CUSTOM#signed_token"]
        assert registry.get_extractor("signed_token") is custom

    def test_unknown_parse_method_lookup(self):
        registry = ExtractorRegistry([DefaultExtractor()])
        with pytest.raises(UnsupportedParseMethodError) as exc_info:
            registry.get_extractor("JSON_PATH")
        assert isinstance(exc_info.value, PermissionConfigurationError)
        assert "JSON_PATH" in exc_info.value.message
        assert "DEFAULT" in exc_info.value.message

    @pytest.mark.parametrize("parse_method", [None, ""])
    def test_empty_parse_method_lookup(self, parse_method):
        registry = ExtractorRegistry(builtin_extractors())
        with pytest.raises(UnsupportedParseMethodError):
            registry.get_extractor(parse_method)

    def test_empty_registry(self):
        registry = ExtractorRegistry([])
        assert registry.supported_parse_methods() == []


@pytest.mark.unit
class TestValidatorRegistry:

    def test_lookup(self):
        registry = ValidatorRegistry([StaffUserIdValidator(), StaffClassIdValidator()])
        assert registry.validator_ids() == ["staffId-classId", "staffId-userId"]
        assert isinstance(registry.get_validator("staffId-userId"), StaffUserIdValidator)
        assert "staffId-classId" in registry

    def test_unknown_id_names_registered_ids(self):
        registry = ValidatorRegistry([StaffUserIdValidator(), StaffClassIdValidator()])
        with pytest.raises(UnknownValidatorError) as exc_info:
            registry.get_validator("staffId-orderId")
        assert exc_info.value.registered == ["staffId-classId", "staffId-userId"]
        assert "staffId-orderId" in exc_info.value.message
        assert "staffId-userId" in exc_info.value.message

    def test_none_id_lookup(self):
        with pytest.raises(UnknownValidatorError):
            ValidatorRegistry([StaffUserIdValidator()]).get_validator(None)

    def test_later_registration_overrides(self, recording_validator, caplog):
        replacement = recording_validator("staffId-userId", True)
        with caplog.at_level(logging.WARNING):
            registry = ValidatorRegistry([StaffUserIdValidator(), replacement])
        assert registry.get_validator("staffId-userId") is replacement
        assert len(registry) == 1
        assert "overriding" in caplog.text

    @pytest.mark.parametrize("validator_id", ["", "  ", None])
    def test_empty_id_skipped(self, recording_validator, validator_id):
        registry = ValidatorRegistry([recording_validator(validator_id, True)])
        assert len(registry) == 0
