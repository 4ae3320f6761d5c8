"""
Permission guard service entry point.

Wires the object-level permission check into a FastAPI application:
  - BodyBufferingMiddleware opens the per-request context and buffers bodies before routing
  - enforce_object_permissions runs as an app-wide dependency once path variables are resolved
  - exception handlers map denials, configuration defects and faults to {code, message}
"""
import time
import logging
from typing import Iterable, List, Optional

from fastapi import Depends, FastAPI

from config.rule_loader import load_global_config, rule_summary
from config.settings import Settings, settings as default_settings
from middleware.body_buffering import BodyBufferingMiddleware
from middleware.error_handlers import register_exception_handlers
from middleware.permission_dependency import enforce_object_permissions
from models.permission import NO_VALID_RULES_ERROR, GlobalConfig
from routers import staff
from security.extractors import ExtractorRegistry, ParameterExtractor, builtin_extractors
from security.permission_engine import PermissionEngine
from security.validators import (
    PermissionValidator,
    StaffClassIdValidator,
    StaffUserIdValidator,
    ValidatorRegistry,
)
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def builtin_validators() -> List[PermissionValidator]:
    return [StaffUserIdValidator(), StaffClassIdValidator()]


def prepare_global_config(config: GlobalConfig) -> GlobalConfig:
    """Validate the loaded rules, log every problem and react to the global one."""
    logger.info("🔍 [STARTUP] Validating permission rules...")
    errors = config.validate()
    for error in errors:
        logger.error(f"❌ [CONFIG] {error}")

    if NO_VALID_RULES_ERROR in errors:
        logger.warning("⚠️ [STARTUP] No usable permission rule, turning permission checks off")
        config.enabled = False

    logger.info(f"📋 [CONFIG] Permission checks {'✅ enabled' if config.enabled else '❌ disabled'}")
    for entry in rule_summary(config):
        logger.info(f"📋 [CONFIG]   {entry}")
    return config


def build_permission_engine(
    config: GlobalConfig,
    extractors: Optional[Iterable[ParameterExtractor]] = None,
    validators: Optional[Iterable[PermissionValidator]] = None,
) -> PermissionEngine:
    extractor_registry = ExtractorRegistry(builtin_extractors() if extractors is None else extractors)
    validator_registry = ValidatorRegistry(builtin_validators() if validators is None else validators)
    logger.info(f"🔧 [STARTUP] Parse methods: {extractor_registry.supported_parse_methods()}")
    logger.info(f"🔧 [STARTUP] Validators: {validator_registry.validator_ids()}")
    return PermissionEngine(config, extractor_registry, validator_registry)


def create_app(
    settings: Optional[Settings] = None,
    global_config: Optional[GlobalConfig] = None,
    extractors: Optional[Iterable[ParameterExtractor]] = None,
    validators: Optional[Iterable[PermissionValidator]] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: environment settings, the process-wide ones by default
        global_config: rule set to enforce; loaded from settings when omitted
        extractors: extraction strategies to register instead of the built-in ones
        validators: ownership validators to register instead of the demo ones
    """
    settings = settings or default_settings

    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.service_name} v{settings.service_version}")
    logger.info(f"📍 Environment: {settings.environment}")
    logger.info("=" * 60)

    if global_config is None:
        global_config = load_global_config(settings)
    engine = build_permission_engine(prepare_global_config(global_config), extractors, validators)

    app = FastAPI(
        title=settings.service_name,
        version=settings.service_version,
        description="Object-level permission guard",
        docs_url=None if settings.is_production() else "/docs",
        redoc_url=None if settings.is_production() else "/redoc",
        dependencies=[Depends(enforce_object_permissions)],
    )
    app.state.settings = settings
    app.state.permission_engine = engine

    app.add_middleware(BodyBufferingMiddleware, max_body_bytes=settings.permission_max_body_bytes)
    register_exception_handlers(app, settings)

    @app.get("/health")
    async def health():
        """Simple health check - must always work."""
        return {"status": "healthy", "timestamp": time.time()}

    app.include_router(staff.router)

    logger.info("🎉 [STARTUP] Application ready!")
    return app


setup_logging(
    default_settings.log_level,
    default_settings.log_format,
    structured=default_settings.log_format.strip().lower() == "json",
)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )
