"""
Default extractor for query string, header and cookie parameters.
"""
import logging
from typing import List, Optional

from models.permission import ExtractorType, ParamSource
from security.extractors.base import ParameterExtractor, RequestView

logger = logging.getLogger(__name__)


class DefaultExtractor(ParameterExtractor):
    parse_method = ExtractorType.DEFAULT.value
    supported_sources = (ParamSource.QUERY, ParamSource.HEADER, ParamSource.COOKIE)

    def extract(
        self,
        request: RequestView,
        param_name: str,
        parse_config: Optional[str],
        source: ParamSource,
        body_buffered: bool,
    ) -> List[str]:
        if not param_name:
            logger.error("[EXTRACTOR] Parameter name is empty, nothing to extract")
            return []

        if source is ParamSource.QUERY:
            values = request.query_values(param_name)
        elif source is ParamSource.HEADER:
            header = request.header(param_name)
            values = [header] if header is not None else []
        elif source is ParamSource.COOKIE:
            cookie = request.cookie(param_name)
            values = [cookie] if cookie is not None else []
        else:
            logger.warning(f"[EXTRACTOR] Unsupported source {source} for parameter {param_name}")
            return []

        logger.debug(f"[EXTRACTOR] {param_name} from {source.value}: {len(values)} value(s) {values}")
        return values
