"""
Path-template extractor: reads variables the router resolved from the URL template,
e.g. staffId from /api/staffs/{staffId}/schedules.
"""
import logging
from collections.abc import Mapping
from typing import List, Optional

from models.permission import ExtractorType, ParamSource
from security.extractors.base import ParameterExtractor, RequestView

logger = logging.getLogger(__name__)


class PathMatchExtractor(ParameterExtractor):
    parse_method = ExtractorType.PATH_MATCH.value
    supported_sources = (ParamSource.PATH,)

    def extract(
        self,
        request: RequestView,
        param_name: str,
        parse_config: Optional[str],
        source: ParamSource,
        body_buffered: bool,
    ) -> List[str]:
        if source is not ParamSource.PATH:
            logger.debug(f"[EXTRACTOR] {param_name} is not a path parameter ({source}), skipping")
            return []
        if not param_name:
            logger.error("[EXTRACTOR] Path parameter name is empty")
            return []

        variables = request.path_params
        if variables is None:
            logger.warning(f"[EXTRACTOR] No path template variables on {request.path}, cannot read {param_name}")
            return []
        if not isinstance(variables, Mapping) or not all(isinstance(key, str) for key in variables):
            logger.warning(
                f"[EXTRACTOR] Path variables for {param_name} have unexpected shape: {type(variables).__name__}"
            )
            return []

        value = variables.get(param_name)
        if value is None:
            logger.info(f"[EXTRACTOR] Path parameter {param_name} not present in URI template variables")
            return []
        # Router convertors may hand back ints or UUIDs
        return [value if isinstance(value, str) else str(value)]
