"""Fake Antigravity upstream for local runs of the proxy.

Point ``ANTIGRAVITY_PROXY_UPSTREAM_URL`` at it. Send ``X-Fake-Retry-Delay: 10.5s``
to get a 429 carrying a RetryInfo detail with that delay.
"""

import json

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.antigravity.retry_delay import RETRY_INFO_TYPE
from app.core.config import settings
from app.core.logging_config import setup_logging
from app.middlewares.logging_middleware import LoggingMiddleware

logger = setup_logging()

ERROR_INFO_TYPE = "type.googleapis.com/google.rpc.ErrorInfo"


def rate_limited_body(retry_delay: str) -> dict:
    """Google RPC RESOURCE_EXHAUSTED error as Antigravity sends it."""
    return {
        "error": {
            "code": 429,
            "message": "Resource has been exhausted (e.g. check quota).",
            "status": "RESOURCE_EXHAUSTED",
            "details": [
                {"@type": ERROR_INFO_TYPE, "reason": "RATE_LIMIT_EXCEEDED", "domain": "cloudcode-pa.googleapis.com"},
                {"@type": RETRY_INFO_TYPE, "retryDelay": retry_delay},
            ],
        }
    }


def invalid_argument_body(message: str) -> dict:
    return {"error": {"code": 400, "message": message, "status": "INVALID_ARGUMENT"}}


def create_app() -> FastAPI:
    """Create and configure the fake upstream application."""
    app = FastAPI(title="Fake Antigravity Upstream", debug=settings.debug)

    app.add_middleware(LoggingMiddleware)

    @app.get("/status")
    async def status():
        return {"status": "Fake Antigravity is running"}

    async def generate(request: Request):
        retry_delay = request.headers.get("x-fake-retry-delay")
        if retry_delay:
            logger.info("Simulating rate limit", retry_delay=retry_delay)
            return JSONResponse(content=rate_limited_body(retry_delay), status_code=429)

        try:
            payload = json.loads(await request.body())
        except ValueError:
            return JSONResponse(content=invalid_argument_body("Invalid JSON payload received."), status_code=400)

        inner = payload.get("request") if isinstance(payload, dict) else None
        if not isinstance(inner, dict):
            return JSONResponse(content=invalid_argument_body("Missing 'request' field."), status_code=400)

        instruction = inner.get("systemInstruction")
        parts = (instruction.get("parts") or []) if isinstance(instruction, dict) else []
        first = parts[0].get("text", "") if parts and isinstance(parts[0], dict) else ""
        text = f"Received {len(parts)} system instruction part(s); identity: {'<identity>' in first}"
        return {
            "response": {
                "candidates": [
                    {
                        "content": {"role": "model", "parts": [{"text": text}]},
                        "finishReason": "STOP",
                    }
                ],
                "modelVersion": payload.get("model", "fake-model"),
            }
        }

    for method in ("generateContent", "streamGenerateContent"):
        app.add_api_route(f"/v1internal:{method}", generate, methods=["POST"])

    return app
