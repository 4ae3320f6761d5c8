"""
Middleware package for FastAPI application.
"""
from .body_buffering import BodyBufferingMiddleware
from .error_handlers import register_exception_handlers
from .permission_dependency import enforce_object_permissions

__all__ = ["BodyBufferingMiddleware", "register_exception_handlers", "enforce_object_permissions"]
