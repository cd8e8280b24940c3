"""Diagnostic taxonomy and exception types.

Data problems never raise: they travel as plain message strings inside a
``Result``.  The builders below are the single place those strings are
written, grouped by ``ErrorKind``.  ``classify_message`` maps a message back
to its kind for reporting.

Exceptions are reserved for programmer errors (``MappingConfigError``) and for
callers that explicitly ask to unwrap a failed parse (``ParamParseError``).
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from enum import StrEnum


class ErrorKind(StrEnum):
    MISSING_PARAMETER = "missing_parameter"
    INVALID_FORMAT = "invalid_format"
    LOSSY_FORMAT = "lossy_format"  # warning only
    MEMBERSHIP = "membership"
    UNCONSUMED_INPUT = "unconsumed_input"  # warning only
    AGGREGATE = "aggregate"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class MappingConfigError(ValueError):
    """A combinator tree that cannot work, whatever the input."""


class ParamParseError(ValueError):
    """Raised by ``expect_data`` when a parse failed."""

    def __init__(self, errors: Iterable[str], warnings: Iterable[str] = ()) -> None:
        self.errors = tuple(errors)
        self.warnings = tuple(warnings)
        lines = [f"Query parameters could not be parsed ({len(self.errors)} errors):"]
        lines.extend(f"  - {e}" for e in self.errors)
        if self.warnings:
            lines.append("Warnings:")
            lines.extend(f"  - {w}" for w in self.warnings)
        super().__init__("\n".join(lines))


# ---------------------------------------------------------------------------
# Message builders
# ---------------------------------------------------------------------------

def missing_parameter(key: str) -> str:
    return f"Required search parameter [{key}] was not found."


def exhausted_parameter(key: str, ordinal: int, count: int) -> str:
    return (
        f"Could not find #{ordinal} value of search parameter [{key}]. "
        f"[{key}] only has {count} values."
    )


def invalid_format(description: str, key: str, value: str) -> str:
    """``description`` reads like "An integer" / "A numerical"."""
    return f"{description} search parameter [{key}={value}] could not be read as {_noun(description)}."


def lossy_format(description: str, key: str, value: str) -> str:
    return (
        f"{description} search parameter [{key}={value}] could only partially "
        f"be read as {_noun(description)}."
    )


def malformed_encoding(key: str, value: str, reason: str) -> str:
    return f"A string search parameter [{key}={value}] is not validly percent-encoded: {reason}."


def membership(key: str, value: str, allowed: Iterable[str]) -> str:
    return (
        f"An enum search parameter [{key}={value}] could not be interpreted. "
        f"Expected a value in the range ...{', '.join(allowed)}..."
    )


def unknown_variant(tag: str, variants: Iterable[str]) -> str:
    return (
        f"A tagged union discriminant [{tag}] names no configured variant. "
        f"Known variants: {', '.join(variants)}."
    )


def unconsumed_input(key: str) -> str:
    return f"Key {key} has remaining unparsed instances"


def field_error(field: str, message: str) -> str:
    return f"{field}: {message}"


_NOUNS = {
    "An integer": "an integer",
    "A numerical": "a number",
}


def _noun(description: str) -> str:
    return _NOUNS.get(description, "a value")


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

_FIELD_PREFIX_RE = re.compile(r"^(?:[\w.\-\[\]]+: )+")

_KIND_PATTERNS: tuple[tuple[ErrorKind, re.Pattern[str]], ...] = (
    (ErrorKind.MISSING_PARAMETER, re.compile(r"^Required search parameter \[|^Could not find #\d+ value")),
    (ErrorKind.LOSSY_FORMAT, re.compile(r"could only partially be read as")),
    (ErrorKind.INVALID_FORMAT, re.compile(r"could not be read as|is not validly percent-encoded")),
    (ErrorKind.MEMBERSHIP, re.compile(r"^An enum search parameter|^A tagged union discriminant")),
    (ErrorKind.UNCONSUMED_INPUT, re.compile(r"^Key .+ has remaining unparsed instances$")),
    (ErrorKind.AGGREGATE, re.compile(r"^Both parse branches")),
)


def classify_message(message: str) -> ErrorKind | None:
    """Return the kind of a diagnostic produced by this package, or None.

    Field prefixes added by object aggregation (``"outer: inner: ..."``) are
    ignored.
    """
    bare = _FIELD_PREFIX_RE.sub("", message, count=1)
    for kind, pattern in _KIND_PATTERNS:
        if pattern.search(bare):
            return kind
    return None
