"""
Request-scoped permission context.

The context is opened by the body-buffering gate before routing, filled in by the decision
engine after routing, and reset when the request finishes, whatever the outcome. It lives in
a ContextVar, so every request task (and any worker thread FastAPI hands it to, which runs on
a copy of the task's context) sees only its own data.
"""
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from models.permission import MatchMode

logger = logging.getLogger(__name__)


@dataclass
class PrincipalData:
    """The acting caller as extracted from the request."""
    name: str
    values: List[str] = field(default_factory=list)


@dataclass
class TargetParameter:
    """A resource identifier to be checked against the principal."""
    name: str
    values: List[str] = field(default_factory=list)
    validator_id: Optional[str] = None


@dataclass
class RequestContext:
    """Everything the permission check learns about one request."""
    uri: str = ""
    enabled: bool = False
    principal: Optional[PrincipalData] = None
    targets: List[TargetParameter] = field(default_factory=list)
    match_mode: Optional[MatchMode] = None
    body_buffered: bool = False
    body: Optional[bytes] = None


_request_context: ContextVar[Optional[RequestContext]] = ContextVar("permission_request_context", default=None)


def get_request_context() -> Optional[RequestContext]:
    """Context of the request currently being handled, or None outside a request."""
    return _request_context.get()


@contextmanager
def permission_context(uri: str) -> Iterator[RequestContext]:
    """
    Open a fresh context for one request and guarantee it is discarded afterwards.

    Usage:
        with permission_context(scope["path"]) as ctx:
            await app(scope, receive, send)
    """
    context = RequestContext(uri=uri)
    token = _request_context.set(context)
    try:
        yield context
    finally:
        _request_context.reset(token)
        logger.debug(f"[CONTEXT] Cleared permission context for {uri}")
