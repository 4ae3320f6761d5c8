"""
Permission rule model and its self-validation.

A GlobalConfig holds an ordered list of Rules. Each Rule names one principal parameter and
one or more target parameters, where to read them from (source) and how (parse method).
validate() collects every problem in one pass, disables the offending rules and fills in
implied parse methods; it never raises.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Union

logger = logging.getLogger(__name__)

CUSTOM_PREFIX = "CUSTOM#"
NO_VALID_RULES_ERROR = "permission checks are enabled but no valid enabled rule is configured"


class ParamSource(str, Enum):
    """Request location a parameter is read from."""
    PATH = "PATH"
    BODY = "BODY"
    QUERY = "QUERY"
    HEADER = "HEADER"
    COOKIE = "COOKIE"

    @classmethod
    def from_value(cls, value: Any) -> Optional["ParamSource"]:
        """Case-insensitive lookup; None for anything outside the source domain."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                return None
        return None


class MatchMode(str, Enum):
    """Rule-level combination policy across target parameters."""
    ALL_MATCH = "ALL_MATCH"
    ANY_MATCH = "ANY_MATCH"

    @classmethod
    def from_value(cls, value: Any) -> Optional["MatchMode"]:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                return None
        return None


class ExtractorType(str, Enum):
    """Parse method families."""
    DEFAULT = "DEFAULT"
    JSON_PATH = "JSON_PATH"
    PATH_MATCH = "PATH_MATCH"
    CUSTOM = "CUSTOM"
    NONE = "NONE"

    @classmethod
    def from_string(cls, value: Any) -> "ExtractorType":
        """
        Resolve a configured parse method to its family.

        Empty values and the literal NONE resolve to NONE, built-in names match
        case-insensitively, and any other name is a custom parse method.
        """
        if not isinstance(value, str) or not value.strip():
            return cls.NONE
        name = value.strip().upper()
        if name == cls.NONE.value:
            return cls.NONE
        try:
            return cls(name)
        except ValueError:
            logger.debug(f"[CONFIG] Parse method {value!r} treated as custom")
            return cls.CUSTOM

    @classmethod
    def canonical_name(cls, value: Any) -> str:
        """Registry key for a parse method: the family name, or CUSTOM#<raw> for custom ones."""
        family = cls.from_string(value)
        if family is cls.CUSTOM:
            return f"{CUSTOM_PREFIX}{value.strip()}"
        return family.value


# Parse methods that need a non-empty parse expression.
EXPRESSION_PARSE_METHODS = frozenset({ExtractorType.JSON_PATH})

COMPATIBLE_PARSE_METHODS = {
    ParamSource.PATH: frozenset({ExtractorType.PATH_MATCH}),
    ParamSource.BODY: frozenset({ExtractorType.JSON_PATH}),
    ParamSource.QUERY: frozenset({ExtractorType.DEFAULT}),
    ParamSource.HEADER: frozenset({ExtractorType.DEFAULT}),
    ParamSource.COOKIE: frozenset({ExtractorType.DEFAULT}),
}

IMPLIED_PARSE_METHODS = {
    ParamSource.PATH: ExtractorType.PATH_MATCH,
    ParamSource.QUERY: ExtractorType.DEFAULT,
    ParamSource.HEADER: ExtractorType.DEFAULT,
    ParamSource.COOKIE: ExtractorType.DEFAULT,
}


def is_valid_combination(source: ParamSource, parse_method: str) -> bool:
    """Whether a parse method may read from a source. Custom methods accept every source."""
    family = ExtractorType.from_string(parse_method)
    if family is ExtractorType.CUSTOM:
        return True
    return family in COMPATIBLE_PARSE_METHODS.get(source, frozenset())


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


@dataclass
class ParamSpec:
    """Principal parameter: which identifier names the acting caller."""
    name: Optional[str] = None
    source: Union[ParamSource, str, None] = None
    parse_method: Optional[str] = None
    parse_config: Optional[str] = None

    def validate(self) -> List[str]:
        """Validate the parameter, filling in the parse method implied by its source."""
        errors: List[str] = []

        if _is_blank(self.name):
            errors.append("name must not be empty")

        source = None
        if self.source is None or (isinstance(self.source, str) and not self.source.strip()):
            errors.append("source must not be empty (PATH/BODY/QUERY/HEADER/COOKIE)")
        else:
            source = ParamSource.from_value(self.source)
            if source is None:
                errors.append(f"invalid source: {self.source}")
            else:
                self.source = source
                # BODY is ambiguous between structured formats and is never defaulted
                if _is_blank(self.parse_method) and source in IMPLIED_PARSE_METHODS:
                    self.parse_method = IMPLIED_PARSE_METHODS[source].value

        if _is_blank(self.parse_method):
            errors.append("parseMethod must not be empty")
            return errors

        family = ExtractorType.from_string(self.parse_method)
        if family is ExtractorType.NONE:
            errors.append(f"invalid parseMethod: {self.parse_method}")
            return errors

        if source is not None and not is_valid_combination(source, self.parse_method):
            errors.append(f"source [{source.value}] does not support parseMethod [{self.parse_method}]")

        if family in EXPRESSION_PARSE_METHODS and _is_blank(self.parse_config):
            errors.append(f"parseMethod [{family.value}] requires parseConfig")

        return errors


@dataclass
class TargetSpec(ParamSpec):
    """Target parameter: an identifier naming a resource, checked by validator_id."""
    validator_id: Optional[str] = None

    def validate(self) -> List[str]:
        errors = super().validate()
        if _is_blank(self.validator_id):
            errors.append("validatorId must not be empty")
        return errors


@dataclass
class Rule:
    """URI-scoped declaration of a principal, its targets and how they are combined."""
    uri_pattern: Optional[str] = None
    enabled: bool = False
    principal_param: Optional[ParamSpec] = None
    target_params: List[TargetSpec] = field(default_factory=list)
    match_mode: Union[MatchMode, str, None] = MatchMode.ANY_MATCH

    @property
    def label(self) -> str:
        return self.uri_pattern if isinstance(self.uri_pattern, str) and self.uri_pattern else "<no uriPattern>"

    def validate(self) -> List[str]:
        """Validate the rule; errors are not prefixed with the rule label."""
        errors: List[str] = []
        self._validate_basic_properties(errors)
        self._validate_principal(errors)
        targets_present = self._validate_targets(errors)
        if targets_present:
            duplicates = self.duplicate_target_names()
            if duplicates:
                errors.append(f"duplicate target parameter names: {duplicates}")
        return errors

    def _validate_basic_properties(self, errors: List[str]) -> None:
        if _is_blank(self.uri_pattern):
            errors.append("uriPattern must not be empty (glob such as /api/users/**)")
        elif not self.uri_pattern.startswith("/"):
            errors.append("uriPattern must start with /")

        if self.match_mode is None:
            errors.append("matchMode must not be empty (ALL_MATCH/ANY_MATCH)")
        else:
            mode = MatchMode.from_value(self.match_mode)
            if mode is None:
                errors.append(f"matchMode must be ALL_MATCH or ANY_MATCH, got: {self.match_mode}")
            else:
                self.match_mode = mode

    def _validate_principal(self, errors: List[str]) -> None:
        if not isinstance(self.principal_param, ParamSpec):
            errors.append("principalParam must not be empty")
            return
        errors.extend(f"principalParam: {error}" for error in self.principal_param.validate())

    def _validate_targets(self, errors: List[str]) -> bool:
        if not self.target_params:
            errors.append("targetParams must contain at least one target parameter")
            return False
        for target in self.target_params:
            if not isinstance(target, TargetSpec):
                errors.append("targetParams contains an empty entry")
                continue
            label = target.name if isinstance(target.name, str) and target.name else "<unnamed>"
            errors.extend(f"targetParams[{label}]: {error}" for error in target.validate())
        return True

    def duplicate_target_names(self) -> List[str]:
        names = Counter(
            target.name for target in self.target_params
            if isinstance(target, TargetSpec) and not _is_blank(target.name)
        )
        return [name for name, count in names.items() if count > 1]


@dataclass
class GlobalConfig:
    """Process-wide rule set. Validated once at startup, read-only afterwards."""
    enabled: bool = False
    rules: List[Rule] = field(default_factory=list)

    def validate(self) -> List[str]:
        """
        Validate every rule and collect all errors.

        Rules that produce at least one error are disabled; valid rules are left untouched.
        When the global switch is on and no enabled rule survives, a global error is added.
        The switch itself is never flipped here.
        """
        errors: List[str] = []
        valid_rules = 0
        for index, rule in enumerate(self.rules or []):
            if not isinstance(rule, Rule):
                errors.append(f"rule #{index}: rule entry is empty")
                continue
            try:
                rule_errors = [f"rule[{rule.label}]: {error}" for error in rule.validate()]
            except Exception as e:
                logger.exception(f"[CONFIG] Unexpected failure validating rule {rule.label}")
                rule_errors = [f"rule[{rule.label}]: validation failed: {e}"]
            if rule_errors:
                rule.enabled = False
                errors.extend(rule_errors)
            elif rule.enabled:
                valid_rules += 1

        if self.enabled and valid_rules == 0:
            errors.append(NO_VALID_RULES_ERROR)
        return errors
