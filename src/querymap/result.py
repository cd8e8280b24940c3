"""Three-state result algebra: success, warning, error.

Every combinator reports its outcome as a ``Result`` value instead of raising.

* **Success** — a payload, no diagnostics.
* **Warned** — a payload plus one or more warnings (the value is usable, but
  something about the input was not canonical).
* **Failure** — no payload, one or more errors, plus any warnings collected
  before the failure.

Functions:

* ``success`` / ``warning`` / ``error`` — constructors.
* ``map_result`` / ``flatten`` / ``bind`` — functor and monad operations.
* ``either`` — disjunction of two alternative parses.
* ``map2`` / ``map3`` — applicative lifting, first error wins.
* ``collect`` — applicative lifting that keeps *every* error (aggregation).
* ``split`` / ``add_warnings`` / ``with_default`` / ``expect_data`` — helpers.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Literal

from querymap.errors import ParamParseError

type Status = Literal["success", "warning", "error"]


# ---------------------------------------------------------------------------
# Result variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Success[T]:
    """A clean payload."""

    data: T

    @property
    def status(self) -> Status:
        return "success"

    @property
    def ok(self) -> bool:
        return True

    @property
    def warnings(self) -> tuple[str, ...]:
        return ()

    @property
    def errors(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class Warned[T]:
    """A usable payload with at least one warning attached."""

    data: T
    warnings: tuple[str, ...]

    @property
    def status(self) -> Status:
        return "warning"

    @property
    def ok(self) -> bool:
        return True

    @property
    def errors(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class Failure:
    """No payload. Errors plus any warnings gathered on the way."""

    errors: tuple[str, ...]
    warnings: tuple[str, ...] = ()

    @property
    def status(self) -> Status:
        return "error"

    @property
    def ok(self) -> bool:
        return False


type Result[T] = Success[T] | Warned[T] | Failure


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

def success[T](data: T) -> Result[T]:
    return Success(data)


def warning[T](data: T, message: str, *messages: str) -> Result[T]:
    return Warned(data, (message, *messages))


def error(message: str, *messages: str) -> Result[Any]:
    return Failure((message, *messages))


def _with_warnings[T](data: T, warnings: tuple[str, ...]) -> Result[T]:
    """Success when *warnings* is empty, otherwise Warned."""
    if warnings:
        return Warned(data, warnings)
    return Success(data)


# ---------------------------------------------------------------------------
# Functor / monad
# ---------------------------------------------------------------------------

def map_result[U, V](f: Callable[[U], V], result: Result[U]) -> Result[V]:
    """Apply *f* to the payload; errors pass through untouched."""
    if isinstance(result, Failure):
        return result
    if isinstance(result, Warned):
        return Warned(f(result.data), result.warnings)
    return Success(f(result.data))


def flatten[U](nested: Result[Result[U]]) -> Result[U]:
    """Collapse a nested result.

    * error outside → the outer error;
    * success outside → the inner result as-is;
    * warning outside → the inner state, with the outer warnings placed
      before the inner ones (an inner error keeps the outer warnings).
    """
    if isinstance(nested, Failure):
        return nested
    if isinstance(nested, Success):
        return nested.data
    inner = nested.data
    if isinstance(inner, Failure):
        return Failure(inner.errors, nested.warnings + inner.warnings)
    if isinstance(inner, Warned):
        return Warned(inner.data, nested.warnings + inner.warnings)
    return Warned(inner.data, nested.warnings)


def bind[U, V](f: Callable[[U], Result[V]], result: Result[U]) -> Result[V]:
    return flatten(map_result(f, result))


# ---------------------------------------------------------------------------
# Disjunction
# ---------------------------------------------------------------------------

BOTH_FAILED = "Both parse branches encountered errors."
BOTH_VALID_ARBITRARY = "Both parse branches produced valid data, returned value may be arbitrary."
BOTH_VALID_FEWER_WARNINGS = (
    "Both parse branches produced valid data, returned value with fewer warnings."
)


def either[U](a: Result[U], b: Result[U]) -> Result[U]:
    """Pick between two alternative parses of the same input.

    If only one branch produced data, that branch wins unchanged.  If both
    failed, the errors of both are reported under a leading summary line.

    If *both* produced data the input was ambiguous and the returned value is
    demoted to a warning:

    * success vs. warning (in either order): the clean branch wins, and the
      other branch's warnings ride along after the note;
    * success vs. success, warning vs. warning: the **left** branch wins and
      the note says the choice may be arbitrary.

    The operation is therefore not symmetric: ``either(a, b)`` and
    ``either(b, a)`` return different payloads when both branches succeed
    equally well.  Callers that care should assert on the warning, not on
    which value won.
    """
    if isinstance(a, Failure):
        if not isinstance(b, Failure):
            return b
        return Failure(
            (BOTH_FAILED, *a.errors, *b.errors),
            a.warnings + b.warnings,
        )
    if isinstance(b, Failure):
        return a

    if isinstance(a, Success):
        if isinstance(b, Success):
            return Warned(a.data, (BOTH_VALID_ARBITRARY,))
        return Warned(a.data, (BOTH_VALID_FEWER_WARNINGS, *b.warnings))

    if isinstance(b, Success):
        return Warned(b.data, (BOTH_VALID_FEWER_WARNINGS, *a.warnings))
    return Warned(a.data, (BOTH_VALID_ARBITRARY, *a.warnings, *b.warnings))


# ---------------------------------------------------------------------------
# Applicative lifting
# ---------------------------------------------------------------------------

def _lift(f: Callable[..., Any], results: tuple[Result[Any], ...]) -> Result[Any]:
    warnings: list[str] = []
    first_error: Failure | None = None
    for r in results:
        warnings.extend(r.warnings)
        if first_error is None and isinstance(r, Failure):
            first_error = r
    if first_error is not None:
        return Failure(first_error.errors, tuple(warnings))
    return _with_warnings(f(*(r.data for r in results)), tuple(warnings))  # type: ignore[union-attr]


def map2[A, B, V](f: Callable[[A, B], V], a: Result[A], b: Result[B]) -> Result[V]:
    """Combine two results; the first error wins, warnings from all operands merge."""
    return _lift(f, (a, b))


def map3[A, B, C, V](
    f: Callable[[A, B, C], V],
    a: Result[A],
    b: Result[B],
    c: Result[C],
) -> Result[V]:
    return _lift(f, (a, b, c))


def collect(results: Iterable[Result[Any]]) -> Result[tuple[Any, ...]]:
    """Aggregate results into a tuple, keeping the errors of every failure.

    Unlike ``map2``, a failure does not hide later failures: all errors are
    concatenated in operand order.
    """
    values: list[Any] = []
    errors: list[str] = []
    warnings: list[str] = []
    for r in results:
        warnings.extend(r.warnings)
        if isinstance(r, Failure):
            errors.extend(r.errors)
        elif not errors:
            values.append(r.data)
    if errors:
        return Failure(tuple(errors), tuple(warnings))
    return _with_warnings(tuple(values), tuple(warnings))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def split[U, V](result: Result[tuple[U, V]]) -> tuple[Result[U], Result[V]]:
    return map_result(lambda pair: pair[0], result), map_result(lambda pair: pair[1], result)


def add_warnings[T](result: Result[T], *messages: str) -> Result[T]:
    """Append warnings; a success becomes a warning, an error keeps failing."""
    if not messages:
        return result
    if isinstance(result, Failure):
        return Failure(result.errors, result.warnings + messages)
    return Warned(result.data, result.warnings + messages)


def with_default[T](result: Result[T], default: T) -> T:
    if isinstance(result, Failure):
        return default
    return result.data


def expect_data[T](result: Result[T]) -> T:
    """Return the payload or raise ``ParamParseError`` listing every message."""
    if isinstance(result, Failure):
        raise ParamParseError(result.errors, result.warnings)
    return result.data


def result_to_json(result: Result[Any]) -> dict[str, Any]:
    """Serialize a result to a JSON-compatible dict.

    ::

        {"status": "success", "data": ..., "errors": [], "warnings": []}
        {"status": "error", "errors": [...], "warnings": [...]}
    """
    d: dict[str, Any] = {"status": result.status}
    if not isinstance(result, Failure):
        d["data"] = result.data
    d["errors"] = list(result.errors)
    d["warnings"] = list(result.warnings)
    return d
