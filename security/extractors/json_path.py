"""
Structured-body extractor evaluating JSONPath expressions against a buffered JSON body.
"""
import json
import logging
from functools import lru_cache
from typing import Any, List, Optional

from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.ext import parse as parse_jsonpath

from models.permission import ExtractorType, ParamSource
from security.extractors.base import ParameterExtractor, RequestView

logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def compile_expression(expression: str):
    """Compile a JSONPath expression once per process."""
    return parse_jsonpath(expression)


def serialize_value(value: Any) -> str:
    """Literal form for primitives, compact JSON for objects and arrays."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class JsonPathExtractor(ParameterExtractor):
    parse_method = ExtractorType.JSON_PATH.value
    supported_sources = (ParamSource.BODY,)

    def extract(
        self,
        request: RequestView,
        param_name: str,
        parse_config: Optional[str],
        source: ParamSource,
        body_buffered: bool,
    ) -> List[str]:
        if source is not ParamSource.BODY:
            logger.debug(f"[EXTRACTOR] {param_name} is not a body parameter, JSONPath skipped")
            return []
        if not body_buffered or request.body is None:
            logger.debug(f"[EXTRACTOR] Body not buffered, JSONPath cannot read {param_name}")
            return []
        if not parse_config or not parse_config.strip():
            logger.warning(f"[EXTRACTOR] Empty JSONPath expression for {param_name}")
            return []
        if not request.body:
            logger.debug(f"[EXTRACTOR] Empty request body, nothing to read for {param_name}")
            return []

        try:
            expression = compile_expression(parse_config.strip())
        except JSONPathError as e:
            logger.error(f"[EXTRACTOR] Invalid JSONPath {parse_config!r} for {param_name}: {e}")
            return []

        try:
            document = json.loads(request.body)
        except (UnicodeDecodeError, ValueError) as e:
            logger.warning(f"[EXTRACTOR] Request body is not valid JSON, cannot read {param_name}: {e}")
            return []
        except RecursionError:
            logger.warning(f"[EXTRACTOR] Request body nested too deeply to decode, cannot read {param_name}")
            return []

        values = [serialize_value(match.value) for match in expression.find(document) if match.value is not None]
        logger.debug(f"[EXTRACTOR] {param_name} via {parse_config}: {len(values)} value(s)")
        return values
