from app.core.config import settings
import logging
import structlog

def setup_logging():
    """Configures logging for the entire application."""

    # 1. Standard logging configuration
    logging.basicConfig(
        level=settings.log_level,
        format="%(message)s",  # Structlog will handle formatting
        handlers=[logging.StreamHandler()]
    )

    # 2. Configure structlog
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # 3. Quiet the HTTP client, it logs every upstream call at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return structlog.get_logger()
