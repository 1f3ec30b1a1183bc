from datetime import timedelta
from unittest.mock import patch

import pytest

from app.antigravity.status_error import StatusError, new_status_error

RETRY_60S = b"""{
    "error": {
        "details": [
            {"@type": "type.googleapis.com/google.rpc.RetryInfo", "retryDelay": "60s"}
        ]
    }
}"""


def test_429_with_retry_delay():
    err = new_status_error(429, RETRY_60S)

    assert err.code == 429
    assert err.retry_after == timedelta(seconds=60)
    assert err.is_rate_limited


def test_non_429():
    err = new_status_error(500, b'{"error": {"message": "Internal error"}}')

    assert err.code == 500
    assert err.retry_after is None


def test_non_429_ignores_retry_info():
    with patch("app.antigravity.status_error.parse_retry_delay") as parse:
        err = new_status_error(503, RETRY_60S)

    assert err.code == 503
    assert err.retry_after is None
    parse.assert_not_called()


def test_429_without_retry_info():
    err = new_status_error(429, b'{"error": {"message": "Rate limit exceeded"}}')

    assert err.code == 429
    assert err.retry_after is None


@pytest.mark.parametrize("body", [None, b"", b"<html>Too Many Requests</html>", b"\xff\xfe"])
def test_never_raises_on_bad_bodies(body):
    err = new_status_error(429, body)

    assert err.code == 429
    assert err.retry_after is None


def test_message_is_body_text():
    err = new_status_error(400, b'{"error": {"message": "bad"}}')

    assert str(err) == '{"error": {"message": "bad"}}'
    assert err.status_code == 400


def test_message_defaults_to_status():
    assert str(new_status_error(502, b"")) == "status 502"


def test_is_exception():
    with pytest.raises(StatusError) as exc_info:
        raise new_status_error(429, RETRY_60S)

    assert exc_info.value.retry_after == timedelta(seconds=60)


def test_retry_after_header_rounds_up():
    assert StatusError(429, retry_after=timedelta(seconds=10.5)).retry_after_header() == "11"
    assert StatusError(429, retry_after=timedelta(seconds=30)).retry_after_header() == "30"
    assert StatusError(429).retry_after_header() is None


def test_repr():
    assert repr(StatusError(500)) == "StatusError(code=500, retry_after=None)"


def test_deeply_nested_body_does_not_raise():
    err = new_status_error(429, b"[" * 200000)

    assert err.code == 429
    assert err.retry_after is None
