import json
from unittest.mock import AsyncMock

import pytest
from httpx import Response as HTTPXResponse, Request as HTTPXRequest
from starlette.requests import Request

from app.antigravity.retry_delay import RETRY_INFO_TYPE


def make_request(method="POST", path="/antigravity/v1internal:generateContent", body=b"", headers=None, query=b""):
    """Create a fake Starlette Request."""
    raw_headers = [(b"host", b"localhost")]
    for key, value in (headers or {}).items():
        raw_headers.append((key.lower().encode(), value.encode()))
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": query,
        "headers": raw_headers,
        "root_path": "",
    }
    return Request(scope, receive=AsyncMock(return_value={"type": "http.request", "body": body}))


def upstream_response(status_code, content=None, headers=None):
    """httpx response as returned by the upstream client."""
    if isinstance(content, (dict, list)):
        content = json.dumps(content).encode()
    return HTTPXResponse(
        status_code=status_code,
        content=content or b"",
        headers=headers,
        request=HTTPXRequest("POST", "http://upstream/v1internal:generateContent"),
    )


def rate_limited(retry_delay):
    return upstream_response(
        429,
        {"error": {"code": 429, "details": [{"@type": RETRY_INFO_TYPE, "retryDelay": retry_delay}]}},
    )


@pytest.fixture
def proxy_settings():
    """Settings values the proxy reads, with fast retries."""
    return {
        "upstream_url": "http://upstream",
        "proxy_exclude_headers": "",
        "proxy_max_retries": 2,
        "proxy_base_delay": 0.1,
        "proxy_backoff_factor": 2.0,
        "proxy_max_retry_delay": 60.0,
    }
