"""The parse/serialize pair contract and its composition operators.

A ``ParamMapping[T]`` knows how to read a ``T`` out of a ``ParamContext`` and
how to write a ``T`` into a ``QueryParams`` accumulator.  Implementations are
frozen dataclasses holding their child mappings, so one instance can be
built at import time and shared freely.

Round-trip law: for every value ``v`` a mapping accepts,
``parse(from_input(serialize(v, QueryParams())))`` yields ``v``.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from querymap.context import ParamContext, PartialResult
from querymap.params import QueryParams
from querymap.result import Result, bind, map_result, success


class ParamMapping[T](ABC):
    """Abstract parse/serialize pair for one typed value."""

    __slots__ = ()

    @abstractmethod
    def parse(self, ctx: ParamContext) -> PartialResult[T]:
        """Consume occurrences from *ctx*; return the advanced context and a result."""

    @abstractmethod
    def serialize(self, value: T, params: QueryParams) -> QueryParams:
        """Return *params* extended with the encoding of *value*."""


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class MappedParam[U, V](ParamMapping[V]):
    """Post-process parsed values, pre-process values before serializing.

    ``parse_fn`` and ``serialize_fn`` must be inverses on valid values.
    """

    parse_fn: Callable[[U], V]
    serialize_fn: Callable[[V], U]
    inner: ParamMapping[U]

    def parse(self, ctx: ParamContext) -> PartialResult[V]:
        remainder, result = self.inner.parse(ctx)
        return remainder, map_result(self.parse_fn, result)

    def serialize(self, value: V, params: QueryParams) -> QueryParams:
        return self.inner.serialize(self.serialize_fn(value), params)


@dataclass(frozen=True, slots=True)
class BoundParam[U, V](ParamMapping[V]):
    """Like ``MappedParam`` but the parse step may itself warn or fail."""

    parse_fn: Callable[[U], Result[V]]
    serialize_fn: Callable[[V], U]
    inner: ParamMapping[U]

    def parse(self, ctx: ParamContext) -> PartialResult[V]:
        remainder, result = self.inner.parse(ctx)
        return remainder, bind(self.parse_fn, result)

    def serialize(self, value: V, params: QueryParams) -> QueryParams:
        return self.inner.serialize(self.serialize_fn(value), params)


@dataclass(frozen=True, slots=True)
class PureParam[T](ParamMapping[T]):
    """Always succeeds with ``value``; reads and writes nothing."""

    value: T

    def parse(self, ctx: ParamContext) -> PartialResult[T]:
        return ctx, success(self.value)

    def serialize(self, value: T, params: QueryParams) -> QueryParams:
        return params


def map_param[U, V](
    parse_fn: Callable[[U], V],
    serialize_fn: Callable[[V], U],
    inner: ParamMapping[U],
) -> ParamMapping[V]:
    return MappedParam(parse_fn, serialize_fn, inner)


def bind_param[U, V](
    parse_fn: Callable[[U], Result[V]],
    serialize_fn: Callable[[V], U],
    inner: ParamMapping[U],
) -> ParamMapping[V]:
    return BoundParam(parse_fn, serialize_fn, inner)


def pure(value: Any) -> ParamMapping[Any]:
    return PureParam(value)
