"""
Extraction strategy contract and the request snapshot strategies read from.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from models.permission import ParamSource


@dataclass(frozen=True)
class RequestView:
    """
    Framework-neutral, read-only view of an inbound request.

    path_params is the router-resolved path-template map; it is only populated after routing.
    headers is keyed by lower-cased name and keeps the first value of repeated headers.
    body is the buffered request body, or None when the gate did not buffer it.
    """
    method: str = "GET"
    path: str = "/"
    path_params: Any = None
    query_items: Sequence[Tuple[str, str]] = ()
    headers: Mapping[str, str] = field(default_factory=dict)
    cookie_headers: Sequence[str] = ()
    body: Optional[bytes] = None

    @classmethod
    def build(
        cls,
        method: str = "GET",
        path: str = "/",
        path_params: Any = None,
        query_items: Sequence[Tuple[str, str]] = (),
        headers: Optional[Sequence[Tuple[str, str]]] = None,
        body: Optional[bytes] = None,
    ) -> "RequestView":
        """Build a view from raw (name, value) header pairs, collecting cookie headers."""
        header_map: Dict[str, str] = {}
        cookie_headers: List[str] = []
        for name, value in headers or ():
            key = name.lower()
            if key == "cookie":
                cookie_headers.append(value)
            header_map.setdefault(key, value)
        return cls(
            method=method.upper(),
            path=path,
            path_params=path_params,
            query_items=tuple(query_items),
            headers=header_map,
            cookie_headers=tuple(cookie_headers),
            body=body,
        )

    def query_values(self, name: str) -> List[str]:
        """All values of a query parameter in their original order."""
        return [value for key, value in self.query_items if key == name]

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())

    def cookie(self, name: str) -> Optional[str]:
        """Value of the first cookie called exactly `name`."""
        for cookie_header in self.cookie_headers:
            for chunk in cookie_header.split(";"):
                key, sep, value = chunk.partition("=")
                if sep and key.strip() == name:
                    return value.strip().strip('"')
        return None


class ParameterExtractor(ABC):
    """
    One parse method, able to read from one or more sources.

    extract() must never raise for malformed input: an absent parameter, an unparsable body
    or an unmet precondition all yield an empty list.
    """

    @property
    @abstractmethod
    def parse_method(self) -> str:
        """Parse method identifier; non built-in names are registered as CUSTOM#<name>."""

    @property
    @abstractmethod
    def supported_sources(self) -> Sequence[ParamSource]:
        """Sources this extractor can read from."""

    @abstractmethod
    def extract(
        self,
        request: RequestView,
        param_name: str,
        parse_config: Optional[str],
        source: ParamSource,
        body_buffered: bool,
    ) -> List[str]:
        """Return the parameter's values in request order, or an empty list."""
