"""Percent-encoding of single values and query-string splitting/joining.

Thin wrappers over ``urllib.parse``.  ``encode_component`` escapes the same
characters as ECMAScript's ``encodeURIComponent`` so links produced here read
the same as links produced by a browser front end.
"""
from __future__ import annotations

import re
from urllib.parse import quote, unquote

URI_COMPONENT_SAFE = "-_.!~*'()"

_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def encode_component(value: str) -> str:
    """Percent-encode *value* as UTF-8, leaving unreserved characters alone."""
    return quote(value, safe=URI_COMPONENT_SAFE)


def decode_component(value: str) -> str:
    """Inverse of ``encode_component``.

    Raises ``ValueError`` on a ``%`` not followed by two hex digits, or when
    the escaped bytes are not valid UTF-8.
    """
    bad = _BAD_ESCAPE_RE.search(value)
    if bad is not None:
        raise ValueError(f"malformed escape at offset {bad.start()}")
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError as exc:
        raise ValueError(f"escaped bytes are not valid UTF-8 ({exc.reason})") from exc


def split_query(query: str) -> list[tuple[str, str]]:
    """Split ``a=1&a=2&b`` into ``[("a", "1"), ("a", "2"), ("b", "")]``.

    Keys are percent-decoded; values are left raw for the value combinators
    to decode.  A leading ``?`` and empty segments are ignored.
    """
    if query.startswith("?"):
        query = query[1:]
    pairs: list[tuple[str, str]] = []
    for segment in query.split("&"):
        if not segment:
            continue
        key, _, value = segment.partition("=")
        pairs.append((unquote(key), value))
    return pairs


def join_query(pairs: list[tuple[str, str]] | tuple[tuple[str, str], ...]) -> str:
    """Join already-encoded values into a query string (keys are encoded here)."""
    return "&".join(f"{encode_component(k)}={v}" for k, v in pairs)
