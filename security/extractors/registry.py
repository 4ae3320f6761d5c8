"""
Extractor registry: resolves a configured parse method to its extraction strategy.

Registration validates each strategy's self-description and skips broken ones without
aborting startup. A later registration for the same parse method overrides the earlier one,
which is how deployments replace a built-in strategy.
"""
import logging
from typing import Dict, Iterable, List, Optional

from models.permission import CUSTOM_PREFIX, ExtractorType, ParamSource
from security.extractors.base import ParameterExtractor
from utils.exceptions import UnsupportedParseMethodError

logger = logging.getLogger(__name__)

BUILT_IN_TYPES = (ExtractorType.DEFAULT, ExtractorType.JSON_PATH, ExtractorType.PATH_MATCH)


class ExtractorRegistry:
    """Parse method -> extractor map, built once at startup and read-only afterwards."""

    def __init__(self, extractors: Optional[Iterable[ParameterExtractor]] = None):
        self._extractors: Dict[str, ParameterExtractor] = {}
        extractors = list(extractors or [])
        if not extractors:
            logger.warning("[EXTRACTOR] No parameter extractors supplied")
        for extractor in extractors:
            self.register(extractor)
        logger.info(
            f"[EXTRACTOR] Registry ready with {len(self._extractors)} extractor(s): "
            f"{self.supported_parse_methods()}"
        )

    def register(self, extractor: ParameterExtractor) -> bool:
        """Register one extractor; returns False when it was skipped."""
        class_name = type(extractor).__name__

        parse_method = self._canonical_parse_method(extractor, class_name)
        if parse_method is None:
            return False
        if not self._sources_are_valid(extractor, class_name):
            return False

        existing = self._extractors.get(parse_method)
        if existing is not None:
            logger.warning(
                f"[EXTRACTOR] Parse method {parse_method} already served by {type(existing).__name__}, "
                f"overriding with {class_name}"
            )
        self._extractors[parse_method] = extractor
        sources = ",".join(ParamSource.from_value(s).value for s in extractor.supported_sources)
        logger.info(f"[EXTRACTOR] Registered {class_name}: parse method={parse_method}, sources={sources}")
        return True

    def _canonical_parse_method(self, extractor: ParameterExtractor, class_name: str) -> Optional[str]:
        raw = getattr(extractor, "parse_method", None)
        if not isinstance(raw, str) or not raw.strip():
            logger.error(f"[EXTRACTOR] {class_name} declares an empty parse method, skipping registration")
            return None

        family = ExtractorType.from_string(raw)
        canonical = ExtractorType.canonical_name(raw)
        if family in BUILT_IN_TYPES or (family is ExtractorType.CUSTOM and canonical.startswith(CUSTOM_PREFIX)):
            if family is ExtractorType.CUSTOM:
                logger.info(f"[EXTRACTOR] {class_name} parse method {raw!r} registered as {canonical}")
            return canonical

        logger.warning(f"[EXTRACTOR] {class_name} parse method {raw!r} is not recognised, skipping registration")
        return None

    @staticmethod
    def _sources_are_valid(extractor: ParameterExtractor, class_name: str) -> bool:
        sources = getattr(extractor, "supported_sources", None)
        if not sources:
            logger.warning(f"[EXTRACTOR] {class_name} declares no supported sources, skipping registration")
            return False
        for source in sources:
            if ParamSource.from_value(source) is None:
                logger.warning(f"[EXTRACTOR] {class_name} declares invalid source {source!r}, skipping registration")
                return False
        return True

    def get_extractor(self, parse_method: Optional[str]) -> ParameterExtractor:
        """Resolve a configured parse method; raises UnsupportedParseMethodError when absent."""
        if not isinstance(parse_method, str) or not parse_method.strip():
            raise UnsupportedParseMethodError(parse_method, self._extractors.keys())
        extractor = self._extractors.get(ExtractorType.canonical_name(parse_method))
        if extractor is None:
            raise UnsupportedParseMethodError(parse_method, self._extractors.keys())
        return extractor

    def supports_source(self, extractor: ParameterExtractor, source) -> bool:
        source = ParamSource.from_value(source)
        return source is not None and source in {ParamSource.from_value(s) for s in extractor.supported_sources}

    def supported_parse_methods(self) -> List[str]:
        return sorted(self._extractors)

    def __contains__(self, parse_method: str) -> bool:
        return ExtractorType.canonical_name(parse_method) in self._extractors

    def __len__(self) -> int:
        return len(self._extractors)
