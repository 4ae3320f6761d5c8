"""
Custom structured-body extractor for XML request bodies.

Registered under the custom parse method XML_PATH (key CUSTOM#XML_PATH). The expression uses
ElementTree path syntax: absolute paths such as /request/userId, descendant paths such as
//userId, and an optional trailing @attribute step. Like a string-valued XPath evaluation it
yields at most one value.
"""
import logging
import xml.etree.ElementTree as ET
from typing import List, Optional

from models.permission import ParamSource
from security.extractors.base import ParameterExtractor, RequestView

logger = logging.getLogger(__name__)

DOCUMENT_HOLDER_TAG = "document-root"


def evaluate_path(document: ET.Element, expression: str) -> Optional[str]:
    """Evaluate an ElementTree path against a parsed document; None when nothing matches."""
    path, _, attribute = expression.partition("/@")
    if expression.startswith("@"):
        path, attribute = "", expression[1:]

    # Wrap the root so an absolute path can name the root element itself
    holder = ET.Element(DOCUMENT_HOLDER_TAG)
    holder.append(document)
    if not path or path == "/":
        element = document if path == "/" or attribute else None
    else:
        element = holder.find("." + path if path.startswith("/") else "./" + path)

    if element is None:
        return None
    if attribute:
        return element.get(attribute)
    return "".join(element.itertext())


class XmlPathExtractor(ParameterExtractor):
    parse_method = "XML_PATH"
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
            return []
        if not body_buffered or not request.body:
            logger.debug(f"[EXTRACTOR] No buffered XML body for {param_name}")
            return []
        if not parse_config or not parse_config.strip():
            logger.warning(f"[EXTRACTOR] Empty XML path expression for {param_name}")
            return []

        try:
            document = ET.fromstring(request.body)
            value = evaluate_path(document, parse_config.strip())
        except (ET.ParseError, SyntaxError, KeyError) as e:
            logger.warning(f"[EXTRACTOR] XML extraction failed for {param_name} ({parse_config}): {e}")
            return []
        return [value] if value is not None else []
