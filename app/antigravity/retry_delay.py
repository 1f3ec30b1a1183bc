import json
import re
from datetime import timedelta
from decimal import Decimal, InvalidOperation

RETRY_INFO_TYPE = "type.googleapis.com/google.rpc.RetryInfo"

# Google RPC durations are serialized as seconds with an "s" suffix, e.g. "10.5s"
_SECONDS_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)s$")


def parse_seconds(value: str) -> timedelta | None:
    """Parse a suffixed-seconds duration ("30s", "10627.493230411s").

    Returns None when the text does not match the format or does not fit
    in a timedelta. Sign is accepted so callers can reject non-positive values.
    """
    if not _SECONDS_RE.match(value):
        return None
    try:
        seconds = Decimal(value[:-1])
        # timedelta resolution is one microsecond
        micros = int(seconds.scaleb(6).to_integral_value())
        if seconds > 0:
            # a positive delay below one microsecond must not collapse to zero
            micros = max(micros, 1)
        return timedelta(microseconds=micros)
    except (InvalidOperation, OverflowError):
        return None


def parse_retry_delay(body: bytes | str | None) -> timedelta | None:
    """Extract the server-advised retry delay from a Google RPC error body.

    The first ``error.details`` entry whose ``@type`` is RetryInfo decides the
    outcome. Anything unparseable, missing or non-positive yields None.
    """
    if not body:
        return None
    try:
        data = json.loads(body)
    except (ValueError, TypeError, RecursionError):
        return None

    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if not isinstance(error, dict):
        return None
    details = error.get("details")
    if not isinstance(details, list):
        return None

    for detail in details:
        if not isinstance(detail, dict) or detail.get("@type") != RETRY_INFO_TYPE:
            continue
        retry_delay = detail.get("retryDelay")
        if not isinstance(retry_delay, str):
            return None
        delay = parse_seconds(retry_delay)
        if delay is None or delay <= timedelta(0):
            return None
        return delay

    return None
