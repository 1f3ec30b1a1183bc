from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import time

# Request count metric
REQUEST_COUNT = Counter(
    "http_requests_total", "Total number of HTTP requests",
    ["method", "endpoint", "status_code"]
)

# Request duration metric
REQUEST_DURATION = Histogram(
    "http_request_duration_seconds", "Histogram of request processing time",
    ["method", "endpoint"]
)

# Non-success responses received from Antigravity
UPSTREAM_STATUS_ERRORS = Counter(
    "antigravity_upstream_status_errors_total", "Non-success responses from the Antigravity upstream",
    ["status_code"]
)

# Retry delays advised by upstream RetryInfo details
UPSTREAM_RETRY_DELAY = Histogram(
    "antigravity_upstream_retry_delay_seconds", "Server-advised retry delays on rate limited responses",
    buckets=(0.5, 1, 5, 10, 30, 60, 300, 3600, float("inf")),
)

class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        method = request.method
        endpoint = request.url.path

        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=response.status_code).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration)

        return response

def record_status_error(error) -> None:
    """Count an upstream StatusError and its advised delay, if any."""
    UPSTREAM_STATUS_ERRORS.labels(status_code=error.code).inc()
    if error.retry_after is not None:
        UPSTREAM_RETRY_DELAY.observe(error.retry_after.total_seconds())

# Metrics endpoint handler
async def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
