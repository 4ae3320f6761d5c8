"""
Object-level permission decision engine.

For each request it walks a fixed, fail-closed sequence:

  1. global switch off                       -> allow
  2. first rule (declaration order) matching
     the path; none, or the match disabled   -> allow
  3. extract the principal; no values        -> deny
  4. extract every target, in order          -> deny if none were built
  5. run validators per matchMode:
       ALL_MATCH: stop and deny on the first False
       ANY_MATCH: stop and allow on the first True

Configuration defects met on the way (unknown parse method, a source the extractor does not
declare, unknown validator id) raise PermissionConfigurationError, which is reported apart
from a denial. Anything unexpected propagates to the boundary handler.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from models.permission import GlobalConfig, MatchMode, ParamSource, ParamSpec, Rule, TargetSpec
from security.context import PrincipalData, RequestContext, TargetParameter
from security.extractors.base import ParameterExtractor, RequestView
from security.extractors.registry import ExtractorRegistry
from security.path_matcher import match_path
from security.validators.registry import ValidatorRegistry
from utils.exceptions import AccessDeniedError, UnsupportedSourceError

logger = logging.getLogger(__name__)


class Verdict(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


class DecisionReason(str, Enum):
    DISABLED = "permission checks disabled"
    NO_MATCHING_RULE = "no enabled rule matches the request"
    PRINCIPAL_MISSING = "principal missing"
    TARGETS_MISSING = "no target parameters"
    OWNERSHIP_CONFIRMED = "ownership confirmed"
    OWNERSHIP_REJECTED = "target parameters do not belong to the principal"


@dataclass(frozen=True)
class PermissionDecision:
    verdict: Verdict
    reason: DecisionReason
    rule: Optional[str] = None
    detail: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.verdict is Verdict.ALLOW

    @property
    def message(self) -> str:
        if self.detail:
            return f"{self.reason.value}: {self.detail}"
        return self.reason.value


class PermissionEngine:
    """
    Stateless across requests: the config and both registries are shared read-only, and all
    per-request data goes into the RequestContext passed in.
    """

    def __init__(
        self,
        config: GlobalConfig,
        extractors: ExtractorRegistry,
        validators: ValidatorRegistry,
    ):
        self.config = config
        self.extractors = extractors
        self.validators = validators

    def match_rule(self, uri: str) -> Optional[Rule]:
        """First rule whose pattern matches, enabled or not."""
        for rule in self.config.rules or []:
            if isinstance(rule, Rule) and match_path(rule.uri_pattern, uri):
                return rule
        return None

    def evaluate(self, request: RequestView, context: RequestContext) -> PermissionDecision:
        """Run the decision sequence and record what was extracted in `context`."""
        context.enabled = self.config.enabled
        if not self.config.enabled:
            return PermissionDecision(Verdict.ALLOW, DecisionReason.DISABLED)

        uri = context.uri or request.path
        rule = self.match_rule(uri)
        if rule is None or not rule.enabled:
            logger.debug(f"[PERMISSION] {uri}: no enabled rule matched")
            return PermissionDecision(Verdict.ALLOW, DecisionReason.NO_MATCHING_RULE)

        principal = self._extract_principal(request, rule.principal_param, context.body_buffered)
        context.principal = principal
        context.match_mode = rule.match_mode
        if principal is None:
            logger.warning(f"[PERMISSION] {uri}: principal {rule.principal_param.name} missing, denying")
            return PermissionDecision(
                Verdict.DENY, DecisionReason.PRINCIPAL_MISSING, rule.uri_pattern, rule.principal_param.name
            )

        targets = self._extract_targets(request, rule.target_params, context.body_buffered)
        context.targets = targets
        if not targets:
            return PermissionDecision(Verdict.DENY, DecisionReason.TARGETS_MISSING, rule.uri_pattern)

        if self._validate(principal, targets, rule.match_mode):
            return PermissionDecision(Verdict.ALLOW, DecisionReason.OWNERSHIP_CONFIRMED, rule.uri_pattern)
        logger.warning(
            f"[PERMISSION] {uri}: {principal.name}={principal.values} denied access to "
            f"{[(target.name, target.values) for target in targets]}"
        )
        return PermissionDecision(Verdict.DENY, DecisionReason.OWNERSHIP_REJECTED, rule.uri_pattern)

    def enforce(self, request: RequestView, context: RequestContext) -> PermissionDecision:
        """evaluate(), raising AccessDeniedError on a deny verdict."""
        decision = self.evaluate(request, context)
        if not decision.allowed:
            raise AccessDeniedError(decision.message, uri=context.uri or request.path, rule=decision.rule)
        return decision

    def _resolve(self, spec: ParamSpec) -> Tuple[ParameterExtractor, ParamSource]:
        extractor = self.extractors.get_extractor(spec.parse_method)
        source = ParamSource.from_value(spec.source)
        if source is None or not self.extractors.supports_source(extractor, source):
            raise UnsupportedSourceError(spec.parse_method, spec.source, spec.name)
        return extractor, source

    def _extract_principal(
        self, request: RequestView, spec: ParamSpec, body_buffered: bool
    ) -> Optional[PrincipalData]:
        extractor, source = self._resolve(spec)
        values = extractor.extract(request, spec.name, spec.parse_config, source, body_buffered)
        if not values:
            return None
        return PrincipalData(name=spec.name, values=list(values))

    def _extract_targets(
        self, request: RequestView, specs: List[TargetSpec], body_buffered: bool
    ) -> List[TargetParameter]:
        targets = []
        for spec in specs or []:
            extractor, source = self._resolve(spec)
            values = extractor.extract(request, spec.name, spec.parse_config, source, body_buffered)
            targets.append(TargetParameter(name=spec.name, values=list(values), validator_id=spec.validator_id))
        return targets

    def _validate(self, principal: PrincipalData, targets: List[TargetParameter], mode) -> bool:
        mode = MatchMode.from_value(mode)
        if mode is MatchMode.ALL_MATCH:
            for target in targets:
                if not self.validators.get_validator(target.validator_id).validate(principal, target):
                    return False
            return True
        if mode is MatchMode.ANY_MATCH:
            for target in targets:
                if self.validators.get_validator(target.validator_id).validate(principal, target):
                    return True
            return False
        return False
