import math
from datetime import timedelta

from app.antigravity.retry_delay import parse_retry_delay

RATE_LIMITED = 429


class StatusError(Exception):
    """Non-success response from the Antigravity upstream.

    Attributes:
        code: HTTP status code returned by upstream.
        message: Upstream body text, or a generic "status <code>" message.
        retry_after: Server-advised delay before retrying. Only ever set for
            429 responses that carried a positive RetryInfo delay.
    """

    def __init__(self, code: int, message: str = "", retry_after: timedelta | None = None):
        self.code = code
        self.message = message or f"status {code}"
        self.retry_after = retry_after
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.code

    @property
    def is_rate_limited(self) -> bool:
        return self.code == RATE_LIMITED

    def retry_after_header(self) -> str | None:
        """Delay as whole seconds (rounded up) for an HTTP Retry-After header."""
        if self.retry_after is None:
            return None
        return str(math.ceil(self.retry_after.total_seconds()))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code}, retry_after={self.retry_after!r})"


def new_status_error(code: int, body: bytes | str | None) -> StatusError:
    """Build a StatusError for an upstream response; never raises."""
    if isinstance(body, bytes):
        message = body.decode("utf-8", errors="replace")
    else:
        message = body or ""

    retry_after = None
    if code == RATE_LIMITED:
        retry_after = parse_retry_delay(body)

    return StatusError(code, message, retry_after)
