"""Span-level access to JSON text.

Helpers for editing a JSON document in place: they locate member values inside
the original text so a caller can splice new content in without re-serializing
(and reformatting) the rest of the document. Input is assumed to be valid JSON;
validate it with ``json.loads`` first.
"""

import json
import re
from json.decoder import scanstring

_WHITESPACE = re.compile(r"[ \t\n\r]*")
_decoder = json.JSONDecoder()


def skip_whitespace(text: str, index: int) -> int:
    return _WHITESPACE.match(text, index).end()


def member_spans(text: str, start: int) -> dict[str, tuple[int, int]]:
    """Map each member of the object opening at ``text[start]`` to its value span.

    Spans are ``(begin, end)`` indexes into ``text``. Duplicate keys keep the
    last occurrence, the same way ``json.loads`` resolves them.
    """
    if text[start] != "{":
        raise ValueError(f"Expected JSON object at index {start}")

    spans: dict[str, tuple[int, int]] = {}
    index = skip_whitespace(text, start + 1)
    if text[index] == "}":
        return spans

    while True:
        key, index = scanstring(text, index + 1)
        index = skip_whitespace(text, index)
        index = skip_whitespace(text, index + 1)  # ':'
        _, end = _decoder.raw_decode(text, index)
        spans[key] = (index, end)

        index = skip_whitespace(text, end)
        if text[index] == "}":
            return spans
        index = skip_whitespace(text, index + 1)  # ','


def dump(value) -> str:
    """Compact JSON for spliced fragments."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def insert_member(text: str, start: int, key: str, raw_value: str, empty: bool) -> str:
    """Return ``text`` with ``"key": raw_value`` added as the first member of the object at ``start``."""
    member = f"{dump(key)}:{raw_value}"
    if not empty:
        member += ","
    return text[: start + 1] + member + text[start + 1 :]


def insert_array_item(text: str, start: int, raw_value: str, empty: bool) -> str:
    """Return ``text`` with ``raw_value`` added as the first item of the array at ``start``."""
    if text[start] != "[":
        raise ValueError(f"Expected JSON array at index {start}")
    item = raw_value if empty else raw_value + ","
    return text[: start + 1] + item + text[start + 1 :]


def replace_span(text: str, span: tuple[int, int], raw_value: str) -> str:
    begin, end = span
    return text[:begin] + raw_value + text[end:]
