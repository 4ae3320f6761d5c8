"""
Boundary handlers turning permission failures into `{code, message}` responses.

  AccessDeniedError              -> 403
  PermissionConfigurationError   -> 400
  anything else                  -> 500, details withheld from the client
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from config.settings import Settings
from utils.exceptions import AccessDeniedError, PermissionConfigurationError

logger = logging.getLogger(__name__)

GENERIC_FAULT_MESSAGE = "permission check failed"


def error_body(status_code: int, message: str) -> dict:
    return {"code": str(status_code), "message": message}


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:

    async def access_denied_handler(request: Request, exc: AccessDeniedError) -> JSONResponse:
        logger.warning(f"🚫 [PERMISSION] Access denied on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content=error_body(status.HTTP_403_FORBIDDEN, exc.message),
        )

    async def configuration_error_handler(request: Request, exc: PermissionConfigurationError) -> JSONResponse:
        logger.error(f"❌ [PERMISSION] Configuration error on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(status.HTTP_400_BAD_REQUEST, exc.message),
        )

    async def unexpected_fault_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"❌ [PERMISSION] Unexpected fault on {request.method} {request.url.path}: {exc}")
        message = GENERIC_FAULT_MESSAGE
        if settings.verbose_error_messages and not settings.is_production():
            message = f"{GENERIC_FAULT_MESSAGE}: {exc}"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, message),
        )

    app.add_exception_handler(AccessDeniedError, access_denied_handler)
    app.add_exception_handler(PermissionConfigurationError, configuration_error_handler)
    app.add_exception_handler(Exception, unexpected_fault_handler)
