import re

# Header names (lowercase) carrying Google OAuth tokens, API keys or sessions
_SENSITIVE_HEADER_PATTERNS = [
    "authorization",
    "proxy-authorization",
    "x-goog-api-key",
    "x-api-key",
    "cookie",
    "set-cookie",
]

_SENSITIVE_RE = re.compile(
    "|".join(re.escape(p) for p in _SENSITIVE_HEADER_PATTERNS),
    re.IGNORECASE,
)


_REDACT_PREFIX_LEN = 4


def _redact_value(value: str) -> str:
    """Keep the first few chars of a credential so tokens can be told apart in logs."""
    if len(value) <= _REDACT_PREFIX_LEN:
        return "[REDACTED]"
    return value[:_REDACT_PREFIX_LEN] + "...[REDACTED]"


def redact_headers(headers) -> dict:
    """Return a plain dict copy of *headers* safe to log.

    Accepts any mapping (including Starlette and httpx header objects).
    Credential headers are masked after their first 4 characters; the input
    is never mutated.
    """
    return {
        key: _redact_value(str(value)) if _SENSITIVE_RE.fullmatch(key) else value
        for key, value in headers.items()
    }
