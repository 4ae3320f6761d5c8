"""
After-routing permission hook.

Installed as an app-wide FastAPI dependency so it runs once the router has resolved
path-template variables. The decision itself runs in the thread pool because validators are
free to block on a database or cache lookup.
"""
import logging

from fastapi import Request
from starlette.concurrency import run_in_threadpool

from security.context import RequestContext, get_request_context
from security.extractors.base import RequestView
from security.permission_engine import PermissionDecision, PermissionEngine

logger = logging.getLogger(__name__)


def build_request_view(request: Request, context: RequestContext) -> RequestView:
    """Snapshot what extractors may read; the body only when the gate buffered it."""
    return RequestView.build(
        method=request.method,
        path=request.url.path,
        path_params=dict(request.path_params),
        query_items=request.query_params.multi_items(),
        headers=[(name.decode("latin-1"), value.decode("latin-1")) for name, value in request.headers.raw],
        body=context.body if context.body_buffered else None,
    )


def get_permission_engine(request: Request) -> PermissionEngine:
    return request.app.state.permission_engine


async def enforce_object_permissions(request: Request) -> PermissionDecision:
    """Allow the request through or raise AccessDeniedError / PermissionConfigurationError."""
    context = get_request_context()
    if context is None:
        logger.warning(
            f"[PERMISSION] No permission context for {request.url.path}; "
            "is BodyBufferingMiddleware installed? Body parameters will be empty"
        )
        context = RequestContext(uri=request.url.path)

    engine = get_permission_engine(request)
    view = build_request_view(request, context)
    decision = await run_in_threadpool(engine.enforce, view, context)
    logger.debug(f"[PERMISSION] {request.method} {context.uri}: {decision.verdict.value} ({decision.message})")
    return decision
