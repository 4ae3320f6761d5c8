"""
Parameter extraction strategies.
"""
from typing import List

from .base import ParameterExtractor, RequestView
from .default import DefaultExtractor
from .json_path import JsonPathExtractor
from .path_match import PathMatchExtractor
from .registry import ExtractorRegistry
from .xml_path import XmlPathExtractor


def builtin_extractors() -> List[ParameterExtractor]:
    """Strategies every deployment registers, in registration order."""
    return [PathMatchExtractor(), DefaultExtractor(), JsonPathExtractor(), XmlPathExtractor()]


__all__ = [
    "ParameterExtractor",
    "RequestView",
    "DefaultExtractor",
    "JsonPathExtractor",
    "PathMatchExtractor",
    "XmlPathExtractor",
    "ExtractorRegistry",
    "builtin_extractors",
]
