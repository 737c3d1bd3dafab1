"""
AlphaChat - Main FastAPI Application
"""

import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, settings as default_settings
from .api import auth_router, temporary_chat_router, ai_router
from .core.errors import AppError, ProviderError
from .core.logging_config import setup_logging
from .core.session_state import utc_now
from .llm import ProviderRegistry, build_provider_registry
from .middleware import RequestLoggingMiddleware
from .models import SubscriptionFeatures
from .services import TemporaryChatService, AIGenerationService, UsageAccountant, CleanupScheduler
from .storage import LocalStorage, LocalSessionStore, UsageLedger, UserStorage
from .utils.auth import hash_password

logger = logging.getLogger(__name__)


def _error_body(message: str) -> dict:
    return {"error": {"message": message}}


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as ``{"error": {"message": ...}}``."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if isinstance(exc, ProviderError):
            # The cause stays in the logs; the client gets the generic message
            logger.error(
                f"Provider failure on {request.method} {request.url.path}: {exc.provider}: {exc.detail}",
                exc_info=exc.__cause__,
            )
        elif exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = first.get("msg", "Invalid request")
        if location:
            message = f"{location}: {message}"
        return JSONResponse(status_code=400, content=_error_body(message))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )


def create_app(
    config: Settings = default_settings,
    providers: Optional[ProviderRegistry] = None,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    """
    Build the application.

    Args:
        config: Application settings
        providers: Model registry; built from ``config`` when omitted
        clock: Time source shared by the stores and the usage accountant
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(config)

        storage = LocalStorage(config.local_storage_path)
        session_store = LocalSessionStore(storage, ttl_hours=config.session_ttl_hours, clock=clock)
        user_storage = UserStorage(storage, default_features=SubscriptionFeatures(
            daily_chat_limit=config.free_daily_chat_limit,
            daily_image_limit=config.free_daily_image_limit,
            daily_video_limit=config.free_daily_video_limit,
        ))
        usage = UsageAccountant(user_storage, UsageLedger(storage, clock=clock), clock=clock)
        registry = providers or build_provider_registry(config)

        chat_service = TemporaryChatService(
            session_store,
            registry,
            usage=usage,
            max_message_length=config.max_message_length,
            max_extend_hours=config.max_extend_hours,
        )
        app.state.config = config
        app.state.user_storage = user_storage
        app.state.usage_accountant = usage
        app.state.chat_service = chat_service
        app.state.ai_service = AIGenerationService(
            registry, usage, max_message_length=config.max_message_length
        )

        if config.admin_username and config.admin_password:
            await user_storage.ensure_admin(config.admin_username, hash_password(config.admin_password))

        scheduler = CleanupScheduler(
            chat_service.cleanup_expired,
            interval_seconds=config.cleanup_interval_seconds,
            startup_delay_seconds=config.cleanup_startup_delay_seconds,
        )
        app.state.cleanup_scheduler = scheduler
        if config.cleanup_enabled:
            scheduler.start()

        logger.info(f"Starting {config.app_name} v{config.app_version}")
        logger.info(f"Storage path: {config.local_storage_path}")
        logger.info(f"Session TTL: {config.session_ttl_hours}h")
        yield
        await scheduler.stop()
        logger.info(f"Shutting down {config.app_name}")

    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        description="AI chat backend with temporary sessions and usage limits",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if config.log_api_requests:
        app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)
    app.include_router(auth_router)
    app.include_router(temporary_chat_router)
    app.include_router(ai_router)

    @app.get("/")
    async def root():
        return {
            "app": config.app_name,
            "version": config.app_version,
            "status": "running",
        }

    @app.get("/health")
    async def health():
        scheduler = getattr(app.state, "cleanup_scheduler", None)
        return {
            "status": "healthy",
            "cleanup_scheduler": bool(scheduler and scheduler.is_running),
        }

    return app


app = create_app()
