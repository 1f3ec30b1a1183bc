from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from app.core.config import settings
from app.core.logging_config import setup_logging
from app.middlewares.logging_middleware import LoggingMiddleware
from app.middlewares.metrics_middleware import PrometheusMiddleware, metrics
from app.schemas.health import HealthCheck

logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup...")
    app.state.client = None
    if settings.proxy_enabled:
        from app.core.proxy import create_async_client
        app.state.client = await create_async_client()
    try:
        yield
    finally:
        if app.state.client is not None:
            await app.state.client.aclose()
        logger.info("Application shutdown...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(PrometheusMiddleware)

    @app.get("/metrics")
    async def get_metrics():
        return await metrics()

    @app.get("/health", response_model=HealthCheck)
    async def health(request: Request):
        components = {"proxy": "disabled"}
        if settings.proxy_enabled:
            client = getattr(request.app.state, "client", None)
            components["proxy"] = "ok" if client is not None and not client.is_closed else "down"
        status = "ok" if "down" not in components.values() else "degraded"
        return HealthCheck(
            status=status,
            components=components,
            version=settings.version,
            upstream_url=settings.upstream_url,
        )

    if settings.proxy_enabled:
        from app.core.proxy import proxy_request_with_retries

        @app.api_route("/antigravity/{full_path:path}", methods=["GET", "POST"])
        async def proxy_request(full_path: str, request: Request):
            return await proxy_request_with_retries(request.app.state.client, full_path, request)

    return app
