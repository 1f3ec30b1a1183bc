"""Fake Antigravity upstream entrypoint.

Configures logging, creates the fake upstream app, and starts the server.
"""

from app.mock.fake_antigravity import create_app
from app.core.config import settings
from app.core.logging_config import setup_logging

# Configure logging
logger = setup_logging().bind(module=__name__)

# Create FastAPI application
app = create_app()

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting fake upstream on {settings.fake_upstream_host}:{settings.fake_upstream_port}")
    uvicorn.run(
        "fake_upstream_entrypoint:app",
        host=settings.fake_upstream_host,
        port=settings.fake_upstream_port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )
