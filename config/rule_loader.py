"""
Permission rule loading.

Rule documents are JSON with camelCase keys:

    {
      "enabled": true,
      "rules": [
        {
          "uriPattern": "/api/staffs/*/schedules",
          "enabled": true,
          "principalParam": {"name": "staffId", "source": "PATH", "parseMethod": "PATH_MATCH"},
          "targetParams": [
            {"name": "userId", "source": "BODY", "parseMethod": "JSON_PATH",
             "parseConfig": "$.userId", "validatorId": "staffId-userId"}
          ],
          "matchMode": "ALL_MATCH"
        }
      ]
    }

Parsing is deliberately lenient: content problems (bad source names, missing fields) are
carried into the model untouched so GlobalConfig.validate() can report them all at once.
Only an unreadable document is dropped, and that yields a disabled configuration.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from config.settings import Settings
from models.permission import GlobalConfig, MatchMode, ParamSpec, Rule, TargetSpec

logger = logging.getLogger(__name__)

# Alternative key spellings accepted in rule documents
TARGET_LIST_KEYS = ("targetParams", "paramRules")
NAME_KEYS = ("name", "paramName")
MATCH_MODE_KEYS = ("matchMode", "multiParamMode")


def _first(data: Mapping[str, Any], keys, default=None):
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _parse_param(data: Any, target: bool) -> Optional[ParamSpec]:
    if not isinstance(data, Mapping):
        return None
    fields = dict(
        name=_as_text(_first(data, NAME_KEYS)),
        source=_as_text(data.get("source")),
        parse_method=_as_text(data.get("parseMethod")),
        parse_config=_as_text(data.get("parseConfig")),
    )
    if target:
        return TargetSpec(validator_id=_as_text(data.get("validatorId")), **fields)
    return ParamSpec(**fields)


def parse_rule(data: Any) -> Optional[Rule]:
    """One rule entry; None for entries that are not objects at all."""
    if not isinstance(data, Mapping):
        return None

    targets = _first(data, TARGET_LIST_KEYS)
    if isinstance(targets, Mapping):
        targets = [targets]
    if not isinstance(targets, list):
        targets = []

    return Rule(
        uri_pattern=_as_text(data.get("uriPattern")),
        enabled=_as_bool(data.get("enabled")),
        principal_param=_parse_param(data.get("principalParam"), target=False),
        target_params=[_parse_param(item, target=True) for item in targets],
        match_mode=_as_text(_first(data, MATCH_MODE_KEYS, MatchMode.ANY_MATCH.value)),
    )


def parse_global_config(data: Any) -> GlobalConfig:
    """Build a GlobalConfig from an already-decoded rule document."""
    if not isinstance(data, Mapping):
        logger.error(f"[CONFIG] Rule document must be a JSON object, got {type(data).__name__}")
        return GlobalConfig(enabled=False, rules=[])

    entries = _first(data, ("rules",), [])
    if not isinstance(entries, list):
        logger.error("[CONFIG] Rule document 'rules' must be a list, ignoring it")
        entries = []

    return GlobalConfig(
        enabled=_as_bool(data.get("enabled")),
        rules=[parse_rule(entry) for entry in entries],
    )


def parse_rules_json(text: str) -> GlobalConfig:
    try:
        data = json.loads(text)
    except ValueError as e:
        logger.error(f"[CONFIG] Rule document is not valid JSON: {e}")
        return GlobalConfig(enabled=False, rules=[])
    return parse_global_config(data)


def load_rules_file(path: Union[str, Path]) -> GlobalConfig:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"[CONFIG] Cannot read rule file {path}: {e}")
        return GlobalConfig(enabled=False, rules=[])
    logger.info(f"[CONFIG] Loading permission rules from {path}")
    return parse_rules_json(text)


def load_global_config(settings: Settings) -> GlobalConfig:
    """
    Resolve the rule set for this process.

    PERMISSION_RULES_JSON wins over PERMISSION_RULES_FILE. With neither set, permission
    checks are disabled. PERMISSION_ENABLED, when set, overrides the document's switch.
    """
    if settings.permission_rules_json:
        config = parse_rules_json(settings.permission_rules_json)
    elif settings.permission_rules_file:
        config = load_rules_file(settings.permission_rules_file)
    else:
        logger.info("[CONFIG] No permission rules configured, permission checks disabled")
        config = GlobalConfig(enabled=False, rules=[])

    if settings.permission_enabled is not None:
        config.enabled = settings.permission_enabled
    return config


def rule_summary(config: GlobalConfig) -> List[Dict[str, Any]]:
    """Compact, loggable view of the loaded rules."""
    summary = []
    for rule in config.rules:
        if not isinstance(rule, Rule):
            continue
        summary.append({
            "uriPattern": rule.uri_pattern,
            "enabled": rule.enabled,
            "matchMode": getattr(rule.match_mode, "value", rule.match_mode),
            "targets": [target.name for target in rule.target_params if isinstance(target, TargetSpec)],
        })
    return summary
