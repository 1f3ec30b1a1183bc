from app.core.logging_config import setup_logging
from app.core.security import redact_headers
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
import time
import json

logger = setup_logging()

class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        """Middleware to log request and response information with credentials redacted"""
        start_time = time.time()
        debug = logger.isEnabledFor(logging.DEBUG)

        log_data = {
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "headers": redact_headers(request.headers),
        }

        if debug:
            body = await request.body()
            if body:
                log_data["body"] = body.decode("utf-8", errors="replace")
            logger.debug("Incoming Request", **log_data)
        else:
            logger.info("Incoming Request", **log_data)

        response = await call_next(request)

        response_log = {
            "status_code": response.status_code,
            "headers": redact_headers(response.headers),
            "process_time": f"{time.time() - start_time:.4f}s",
        }

        if not debug:
            logger.info("Outgoing Response", **response_log)
            return response

        # Body can be consumed only once, rebuild the response after reading it
        response_body = b""
        async for chunk in response.body_iterator:
            response_body += chunk
        response = Response(
            content=response_body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type
        )

        try:
            response_log["body"] = json.loads(response_body.decode("utf-8"))
        except ValueError:
            response_log["body"] = response_body.decode("utf-8", errors="replace")

        logger.debug("Outgoing Response", **response_log)
        return response
