"""Immutable consumption context: per-key read cursors over the parse input.

A ``ParamContext`` is never modified.  Reading a value returns a *new*
context with that key's cursor advanced, so alternative branches can try a
parse, drop the resulting context on failure and retry from the original.

A *partial result* is the pair ``(context, result)`` returned by every
``parse``; the helpers at the bottom compose them.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from querymap import errors
from querymap.params import QueryParams
from querymap.result import (
    Failure,
    Result,
    bind,
    either,
    error,
    map_result,
    split,
    success,
    with_default,
)


@dataclass(frozen=True, slots=True)
class ParamContext:
    """Read positions over a fixed key → occurrences mapping."""

    values: Mapping[str, tuple[str, ...]]
    cursors: Mapping[str, int] = field(default_factory=dict)

    @classmethod
    def from_input(cls, source: QueryParams | Mapping[str, Sequence[str]]) -> ParamContext:
        """Create a context with every cursor at 0."""
        if isinstance(source, QueryParams):
            grouped: Mapping[str, Sequence[str]] = source.to_multimap()
        else:
            grouped = source
        values = {key: tuple(occurrences) for key, occurrences in grouped.items()}
        return cls(values, {key: 0 for key in values})

    def cursor(self, key: str) -> int:
        return self.cursors.get(key, 0)

    def get(self, key: str) -> tuple[ParamContext, Result[str]]:
        """Read the next unread occurrence of *key*.

        A failed read on an existing key still counts as consumed: the
        returned context is new, and the cursor sits at the end of the
        sequence.  An absent key returns this very context.
        """
        occurrences = self.values.get(key)
        if occurrences is None:
            return self, error(errors.missing_parameter(key))

        index = self.cursor(key)
        next_cursors = dict(self.cursors)
        next_cursors[key] = min(index + 1, len(occurrences))
        next_ctx = ParamContext(self.values, next_cursors)
        if index >= len(occurrences):
            return next_ctx, error(
                errors.exhausted_parameter(key, index + 1, len(occurrences)),
            )
        return next_ctx, success(occurrences[index])

    def remaining_keys(self) -> list[str]:
        """Keys that still have unread occurrences, in input order."""
        return [key for key, occ in self.values.items() if self.cursor(key) < len(occ)]


type PartialResult[T] = tuple[ParamContext, Result[T]]


# ---------------------------------------------------------------------------
# Partial result composition
# ---------------------------------------------------------------------------

def map_partial[U, V](f: Callable[[U], V], partial: PartialResult[U]) -> PartialResult[V]:
    ctx, result = partial
    return ctx, map_result(f, result)


def bind_partial[U, V](
    f: Callable[[U], PartialResult[V]],
    partial: PartialResult[U],
) -> PartialResult[V]:
    """Continue a parse with *f* when *partial* holds data.

    When the first step failed, its context is returned with the error.
    When *f* runs, its context wins and its result is flattened into the
    outer one (so outer warnings are kept).
    """
    ctx, result = partial
    if isinstance(result, Failure):
        return ctx, result
    next_ctx, next_result = f(result.data)
    return next_ctx, bind(lambda _: next_result, result)


def either_partial[U](a: PartialResult[U], b: PartialResult[U]) -> PartialResult[U]:
    """``either`` over partial results, keeping the chosen branch's context.

    When both branches fail, the right branch's context is returned.
    """
    a_ctx, a_result = a
    b_ctx, b_result = b
    tagged: Result[tuple[ParamContext, Any]] = either(
        map_result(lambda x: (a_ctx, x), a_result),
        map_result(lambda x: (b_ctx, x), b_result),
    )
    chosen_ctx, chosen = split(tagged)
    return with_default(chosen_ctx, b_ctx), chosen
