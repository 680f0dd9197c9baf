"""FastAPI application entry points for the auth and todo services."""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.todoapp.config import settings
from src.todoapp.features.auth.handlers import router as auth_router
from src.todoapp.features.auth.services import get_user_service
from src.todoapp.features.logs.handlers import router as logs_router
from src.todoapp.features.todos.handlers import router as todos_router
from src.todoapp.features.todos.services import get_todo_service
from src.todoapp.services.auth import AuthServiceClient, get_auth_client, set_auth_client
from src.todoapp.services.database import get_mongo_client
from src.todoapp.services.error_handlers import install_exception_handlers
from src.todoapp.services.observability import (
    REQUEST_ID_HEADER,
    RequestContextMiddleware,
    configure_logging,
    shutdown_logging,
)
from src.todoapp.services.rate_limiter import limiter
from src.todoapp.services.responses import HealthCheckResponse, ServiceInfoResponse

logger = logging.getLogger(__name__)

AUTH_SERVICE = "todo-auth-api"
TODO_SERVICE = "todo-api"


def create_app(
    title: str,
    service: str,
    banner: str,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[None]],
) -> FastAPI:
    """
    Build an app with the middleware, error handling and endpoints both services share.

    Args:
        title: OpenAPI title
        service: Service name reported by the root endpoint
        banner: Root endpoint message
        lifespan: Startup/shutdown context manager

    Returns:
        FastAPI app without feature routers
    """
    app = FastAPI(
        title=title,
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    origins = settings.cors_origins.split(",")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(RequestContextMiddleware)

    app.state.limiter = limiter
    install_exception_handlers(app)

    @app.get("/", response_model=ServiceInfoResponse)
    async def service_info() -> ServiceInfoResponse:
        """Service banner."""
        return ServiceInfoResponse(
            message=banner,
            service=service,
            timestamp=datetime.now(UTC).isoformat(),
        )

    @app.get("/health", response_model=HealthCheckResponse)
    async def health_check() -> HealthCheckResponse:
        """Health check endpoint."""
        return HealthCheckResponse(status="healthy")

    return app


@asynccontextmanager
async def auth_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage auth service lifecycle (startup and shutdown)."""
    configure_logging(AUTH_SERVICE)

    try:
        get_user_service().ensure_indexes()
    except Exception as e:
        logger.error(
            f"Failed to prepare user collection: {e}",
            exc_info=True,
            extra={"action_type": "database_init_failed"},
        )
        raise

    logger.info(
        "Auth service started",
        extra={"action_type": "service_started", "environment": settings.environment},
    )

    yield

    get_mongo_client().close()
    logger.info("Auth service stopped", extra={"action_type": "service_stopped"})
    shutdown_logging()


@asynccontextmanager
async def todo_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage todo service lifecycle (startup and shutdown)."""
    configure_logging(TODO_SERVICE)

    try:
        get_todo_service().ensure_indexes()
    except Exception as e:
        logger.error(
            f"Failed to prepare todo collection: {e}",
            exc_info=True,
            extra={"action_type": "database_init_failed"},
        )
        raise

    set_auth_client(
        AuthServiceClient(
            base_url=settings.auth_service_url,
            timeout=settings.auth_service_timeout_seconds,
        )
    )

    logger.info(
        "Todo service started",
        extra={
            "action_type": "service_started",
            "environment": settings.environment,
            "auth_service_url": settings.auth_service_url,
        },
    )

    yield

    try:
        await get_auth_client().close()
    except Exception as e:
        logger.error(f"Error during auth client cleanup: {e}", exc_info=True)
    finally:
        set_auth_client(None)

    get_mongo_client().close()
    logger.info("Todo service stopped", extra={"action_type": "service_stopped"})
    shutdown_logging()


auth_app = create_app(
    title="Todo Auth API",
    service=AUTH_SERVICE,
    banner="Todo Auth API is running",
    lifespan=auth_lifespan,
)
auth_app.include_router(auth_router, prefix=settings.api_prefix)

todo_app = create_app(
    title="Todo API",
    service=TODO_SERVICE,
    banner="Todo API is running",
    lifespan=todo_lifespan,
)
todo_app.include_router(todos_router, prefix=settings.api_prefix)
todo_app.include_router(logs_router, prefix=settings.api_prefix)
