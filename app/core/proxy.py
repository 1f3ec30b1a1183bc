from fastapi import Request
from fastapi.responses import JSONResponse, Response
from httpx import AsyncClient, RequestError, Timeout, Limits
import random
import asyncio
from app.antigravity.status_error import StatusError, new_status_error
from app.antigravity.system_instruction import SystemInstructionError, inject_system_instruction
from app.core.config import settings
from app.core.logging_config import setup_logging
from app.middlewares.metrics_middleware import record_status_error
from app.schemas.proxy import ProxyError

logger = setup_logging()

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

# Upstream methods whose payloads carry a systemInstruction
GENERATE_METHODS = ("generateContent", "streamGenerateContent")

# Body is rewritten before forwarding, httpx sets its own length
_REQUEST_EXCLUDE_HEADERS = {"host", "content-length"}
# httpx already decoded the body
_RESPONSE_EXCLUDE_HEADERS = {"content-encoding", "content-length", "transfer-encoding", "connection"}


async def create_async_client() -> AsyncClient:
    """Shared client for all upstream calls, closed on application shutdown."""
    return AsyncClient(
        timeout=Timeout(
            connect=settings.proxy_connect_timeout,
            read=settings.proxy_read_timeout,
            write=settings.proxy_write_timeout,
            pool=settings.proxy_pool_timeout,
        ),
        limits=Limits(
            max_connections=settings.max_connections,
            max_keepalive_connections=settings.max_keepalive_connections,
        ),
        verify=settings.proxy_verify_ssl,
    )


def should_inject(path: str) -> bool:
    """True for 'v1internal:generateContent' style paths."""
    if ":" not in path:
        return False
    return path.rsplit(":", 1)[1] in GENERATE_METHODS


def compute_retry_delay(error: StatusError | None, attempt: int) -> float:
    """Seconds to wait before the next attempt.

    Upstream advice wins; otherwise exponential backoff with a little jitter.
    """
    if error is not None and error.retry_after is not None:
        return error.retry_after.total_seconds()
    return settings.proxy_base_delay * (settings.proxy_backoff_factor ** attempt) + random.uniform(0, 0.1)


async def exponential_backoff_retry(func, *args, **kwargs):
    """Performs an upstream request, retrying rate limits and server errors.

    Returns the last upstream response (successful or not). Re-raises the last
    connection error once retries are exhausted.
    """
    for attempt in range(settings.proxy_max_retries + 1):
        last_attempt = attempt == settings.proxy_max_retries
        try:
            response = await func(*args, **kwargs)
        except RequestError as e:
            logger.warning(
                "Upstream request failed",
                exception=str(e),
                exception_type=type(e).__name__,
                attempt=attempt + 1,
            )
            if last_attempt:
                raise
            delay = compute_retry_delay(None, attempt)
        else:
            if response.is_success:
                return response

            error = new_status_error(response.status_code, response.content)
            record_status_error(error)
            if error.code not in RETRYABLE_STATUS_CODES:
                return response
            if last_attempt:
                logger.error("Max retries exceeded", status_code=error.code, attempts=attempt + 1)
                return response

            delay = compute_retry_delay(error, attempt)
            if delay > settings.proxy_max_retry_delay:
                logger.warning(
                    "Advised retry delay too long, returning upstream error",
                    status_code=error.code,
                    delay=delay,
                    max_retry_delay=settings.proxy_max_retry_delay,
                )
                return response

            logger.warning(
                "Upstream status error, retrying",
                status_code=error.code,
                advised=error.retry_after is not None,
                delay=round(delay, 3),
                attempt=attempt + 1,
            )

        await asyncio.sleep(delay)


async def proxy_request_with_retries(client: AsyncClient, path: str, request: Request):
    target_url = f"{settings.upstream_url.rstrip('/')}/{path}"
    if request.url.query:
        target_url = f"{target_url}?{request.url.query}"
    method = request.method

    excluded = _REQUEST_EXCLUDE_HEADERS | {
        h.strip().lower() for h in settings.proxy_exclude_headers.split(",") if h.strip()
    }
    headers = {key: value for key, value in request.headers.items() if key.lower() not in excluded}
    body = await request.body()

    if should_inject(path):
        try:
            body = inject_system_instruction(body)
        except SystemInstructionError as e:
            error = ProxyError(
                status_code=400,
                message="Invalid request payload",
                details={"reason": str(e), "target_url": target_url, "method": method},
            )
            logger.warning("Rejected request payload", details=error.model_dump())
            return JSONResponse(content=error.to_content(), status_code=400)

    try:
        response = await exponential_backoff_retry(
            client.request, method, target_url, headers=headers, content=body
        )
    except RequestError as e:
        error = ProxyError(
            status_code=502,
            message="Upstream unreachable",
            details={
                "target_url": target_url,
                "method": method,
                "exception": str(e),
                "exception_type": type(e).__name__,
            },
        )
        logger.error("Proxy exception", details=error.model_dump())
        return JSONResponse(content=error.to_content(), status_code=502)

    response_headers = {
        key: value for key, value in response.headers.items() if key.lower() not in _RESPONSE_EXCLUDE_HEADERS
    }

    if response.is_success:
        logger.info(f"Proxy request successful: {method} {target_url} -> {response.status_code}")
        return Response(content=response.content, status_code=response.status_code, headers=response_headers)

    error = new_status_error(response.status_code, response.content)
    retry_after = error.retry_after_header()
    if retry_after is not None:
        response_headers["retry-after"] = retry_after

    logger.error(
        "Upstream status error",
        status_code=error.code,
        retry_after=retry_after,
        target_url=target_url,
        method=method,
    )
    return Response(content=response.content, status_code=error.code, headers=response_headers)
