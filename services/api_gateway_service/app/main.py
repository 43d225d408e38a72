from __future__ import annotations

from dishka import AsyncContainer
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.gzip import GZipMiddleware

from taskflow_service_libs.error_handling.fastapi import (
    register_error_handlers as register_fastapi_error_handlers,
)
from taskflow_service_libs.logging_utils import configure_service_logging
from services.api_gateway_service.app.startup_setup import (
    create_di_container,
    lifespan,
    setup_dependency_injection,
)
from services.api_gateway_service.config import Settings, settings

from ..routers.health_routes import router as health_router
from ..routers.proxy_routes import router as proxy_router
from .middleware import CorrelationIDMiddleware, RequestLoggingMiddleware, SecurityHeadersMiddleware
from .rate_limiter import build_limiter, rate_limit_exceeded_handler


def create_app(config: Settings | None = None, container: AsyncContainer | None = None) -> FastAPI:
    config = config or settings
    app = FastAPI(
        title=config.SERVICE_NAME,
        version=config.VERSION,
        description=(
            "Taskflow API Gateway - single entry point forwarding /api traffic to the "
            "auth, task, notification, reporting and admin services"
        ),
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Register error handlers
    register_fastapi_error_handlers(app)

    # Middleware added last runs first. Resulting order, outermost first:
    # correlation ID, request logging, security headers, CORS, rate limiting, gzip.
    app.add_middleware(GZipMiddleware, minimum_size=config.GZIP_MINIMUM_SIZE)

    app.state.limiter = build_limiter(config)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=config.CORS_ALLOW_METHODS,
        allow_headers=config.CORS_ALLOW_HEADERS,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationIDMiddleware)

    # Include routers; the catch-all proxy goes last
    app.include_router(health_router, tags=["Health"])
    app.include_router(proxy_router, prefix="/api", tags=["Proxy"])

    # Setup Dishka DI
    container = container or create_di_container(config)
    setup_dependency_injection(app, container)

    return app


configure_service_logging(settings.SERVICE_NAME, log_level=settings.LOG_LEVEL)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.api_gateway_service.app.main:app",
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        reload=settings.is_development(),
        log_level=settings.LOG_LEVEL.lower(),
    )
