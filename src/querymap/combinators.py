"""Primitive, modifier and structural parameter combinators.

Primitives (one key each):

* ``RawParam`` — the occurrence verbatim.  Prefer ``StringParam``: nothing
  stops a raw value from producing a malformed link.
* ``StringParam`` — percent-decoded / percent-encoded text.
* ``IntegerParam`` / ``NumberParam`` — numbers; readable but non-canonical
  text (``42.5`` for an integer, ``23abc`` for a number) parses with a
  warning so that old links keep working.
* ``EnumParam`` / ``make_enum`` — one of a fixed set of strings.
* ``BooleanParam`` — ``"true"`` / ``"false"``.
* ``constant`` — a fixed value, never read or written.

Modifiers: ``optional``, ``with_default``, ``alternative``.

Structures: ``array``, ``object_param``, ``tagged_union``.
"""
from __future__ import annotations

import logging
import math
import re
from abc import abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from querymap import errors
from querymap.codec import decode_component, encode_component
from querymap.context import ParamContext, PartialResult, bind_partial, either_partial
from querymap.errors import MappingConfigError
from querymap.mapping import BoundParam, MappedParam, ParamMapping, PureParam
from querymap.params import QueryParams
from querymap.result import (
    Failure,
    Result,
    add_warnings,
    collect,
    error,
    map_result,
    success,
    warning,
)

log = logging.getLogger(__name__)

_INTEGER_PREFIX_RE = re.compile(r"\s*([+-]?[0-9]+)")
_NUMBER_PREFIX_RE = re.compile(
    r"\s*([+-]?(?:Infinity|(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?))",
)

# Integral floats below this magnitude print without an exponent.
_PLAIN_INTEGER_LIMIT = 1e21


# ---------------------------------------------------------------------------
# Number text
# ---------------------------------------------------------------------------

def format_number(n: float) -> str:
    """Canonical text for a number: ``69``, ``0.5``, ``1.23e+32``, ``Infinity``."""
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "Infinity" if n > 0 else "-Infinity"
    f = float(n)
    if f.is_integer() and abs(f) < _PLAIN_INTEGER_LIMIT:
        return str(int(f))
    return repr(f)


def read_integer(text: str) -> int | None:
    """Base-10 integer from the leading part of *text*, or None."""
    m = _INTEGER_PREFIX_RE.match(text)
    if m is None:
        return None
    return int(m.group(1))


def read_number(text: str) -> float | None:
    """Float from the leading part of *text*, or None."""
    m = _NUMBER_PREFIX_RE.match(text)
    if m is None:
        return None
    return float(m.group(1))


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RawParam(ParamMapping[str]):
    """The next unread occurrence of ``key``, unmodified."""

    key: str

    def parse(self, ctx: ParamContext) -> PartialResult[str]:
        return ctx.get(self.key)

    def serialize(self, value: str, params: QueryParams) -> QueryParams:
        return params.append(self.key, value)


class _DerivedParam[T](ParamMapping[T]):
    """A primitive defined by composing simpler mappings.

    The composed mapping is built once, after the dataclass fields are set.
    """

    __slots__ = ("_mapping",)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_mapping", self._build())

    @abstractmethod
    def _build(self) -> ParamMapping[T]: ...

    def parse(self, ctx: ParamContext) -> PartialResult[T]:
        return self._mapping.parse(ctx)

    def serialize(self, value: T, params: QueryParams) -> QueryParams:
        return self._mapping.serialize(value, params)


@dataclass(frozen=True, slots=True)
class StringParam(_DerivedParam[str]):
    """Text stored percent-encoded under ``key``."""

    key: str

    def _decode(self, raw: str) -> Result[str]:
        try:
            return success(decode_component(raw))
        except ValueError as exc:
            return error(errors.malformed_encoding(self.key, raw, str(exc)))

    def _build(self) -> ParamMapping[str]:
        return BoundParam(self._decode, encode_component, RawParam(self.key))


@dataclass(frozen=True, slots=True)
class IntegerParam(_DerivedParam[int]):
    """A base-10 integer under ``key``."""

    key: str

    def _read(self, text: str) -> Result[int]:
        n = read_integer(text)
        if n is None:
            return error(errors.invalid_format("An integer", self.key, text))
        if str(n) != text:
            return warning(n, errors.lossy_format("An integer", self.key, text))
        return success(n)

    def _build(self) -> ParamMapping[int]:
        return BoundParam(self._read, str, StringParam(self.key))


@dataclass(frozen=True, slots=True)
class NumberParam(_DerivedParam[float]):
    """A floating point number under ``key``.  NaN does not round-trip."""

    key: str

    def _read(self, text: str) -> Result[float]:
        n = read_number(text)
        if n is None:
            return error(errors.invalid_format("A numerical", self.key, text))
        if format_number(n) != text:
            return warning(n, errors.lossy_format("A numerical", self.key, text))
        return success(n)

    def _build(self) -> ParamMapping[float]:
        return BoundParam(self._read, format_number, StringParam(self.key))


@dataclass(frozen=True, slots=True)
class EnumParam(_DerivedParam[str]):
    """One of ``values`` under ``key``."""

    key: str
    values: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))
        if not self.values:
            raise MappingConfigError(f"Enum parameter [{self.key}] needs at least one value")
        _DerivedParam.__post_init__(self)

    def _check(self, value: str) -> Result[str]:
        if value in self.values:
            return success(value)
        return error(errors.membership(self.key, value, self.values))

    def _build(self) -> ParamMapping[str]:
        return BoundParam(self._check, _identity, StringParam(self.key))


def make_enum(*values: str) -> Callable[[str], EnumParam]:
    """``make_enum("foo", "bar")("a")`` — an enum factory, applied to a key later."""
    return lambda key: EnumParam(key, values)


@dataclass(frozen=True, slots=True)
class BooleanParam(_DerivedParam[bool]):
    """``"true"`` / ``"false"`` under ``key``."""

    key: str

    def _build(self) -> ParamMapping[bool]:
        return MappedParam(
            lambda text: text == "true",
            lambda flag: "true" if flag else "false",
            EnumParam(self.key, ("true", "false")),
        )


def _identity(value: Any) -> Any:
    return value


ConstantParam = PureParam


def constant(value: Any) -> ParamMapping[Any]:
    """Always parses to ``value``; consumes and writes nothing."""
    return PureParam(value)


# ---------------------------------------------------------------------------
# Modifiers
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class OptionalParam[T](ParamMapping[T | None]):
    """``inner`` or None.  A failed attempt leaves the context untouched."""

    inner: ParamMapping[T]

    def parse(self, ctx: ParamContext) -> PartialResult[T | None]:
        remainder, result = self.inner.parse(ctx)
        if isinstance(result, Failure):
            return ctx, success(None)
        return remainder, result

    def serialize(self, value: T | None, params: QueryParams) -> QueryParams:
        if value is None:
            return params
        return self.inner.serialize(value, params)


@dataclass(frozen=True, slots=True)
class DefaultParam[T](ParamMapping[T]):
    """``inner`` or ``default``.  The default value is never written out."""

    inner: ParamMapping[T]
    default: T

    def parse(self, ctx: ParamContext) -> PartialResult[T]:
        remainder, result = self.inner.parse(ctx)
        if isinstance(result, Failure):
            return ctx, success(self.default)
        return remainder, result

    def serialize(self, value: T, params: QueryParams) -> QueryParams:
        if value == self.default:
            return params
        return self.inner.serialize(value, params)


@dataclass(frozen=True, slots=True)
class AlternativeParam[T](ParamMapping[T]):
    """Accept either encoding; always write the ``left`` one.

    Both branches parse from the same context and are combined with
    ``either``, so input readable both ways comes back with an ambiguity
    warning.
    """

    left: ParamMapping[T]
    right: ParamMapping[T]

    def parse(self, ctx: ParamContext) -> PartialResult[T]:
        return either_partial(self.left.parse(ctx), self.right.parse(ctx))

    def serialize(self, value: T, params: QueryParams) -> QueryParams:
        return self.left.serialize(value, params)


def optional[T](inner: ParamMapping[T]) -> ParamMapping[T | None]:
    return OptionalParam(inner)


def with_default[T](inner: ParamMapping[T], default: T) -> ParamMapping[T]:
    return DefaultParam(inner, default)


def alternative[T](left: ParamMapping[T], right: ParamMapping[T]) -> ParamMapping[T]:
    return AlternativeParam(left, right)


# ---------------------------------------------------------------------------
# Structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ArrayParam[T](ParamMapping[list[T]]):
    """Repeated ``item``; parses greedily until the first failing element.

    An element that succeeds without reading anything also ends the array
    and is dropped, e.g. a record of optional fields once its keys run out.
    """

    item: ParamMapping[T]

    def __post_init__(self) -> None:
        if isinstance(self.item, (OptionalParam, DefaultParam, PureParam)):
            raise MappingConfigError(
                f"Array element {self.item!r} can succeed without consuming input; "
                "the array would never end",
            )

    def parse(self, ctx: ParamContext) -> PartialResult[list[T]]:
        items: list[T] = []
        warnings: list[str] = []
        current = ctx
        while True:
            next_ctx, result = self.item.parse(current)
            if isinstance(result, Failure):
                break
            if next_ctx.cursors == current.cursors:
                log.debug("Array element consumed no input after %d item(s)", len(items))
                break
            items.append(result.data)
            warnings.extend(result.warnings)
            current = next_ctx
        return current, add_warnings(success(items), *warnings)

    def serialize(self, value: Iterable[T], params: QueryParams) -> QueryParams:
        for element in value:
            params = self.item.serialize(element, params)
        return params


def array[T](item: ParamMapping[T]) -> ParamMapping[list[T]]:
    return ArrayParam(item)


def _field_value(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value[name]
    return getattr(value, name)


def _writes_nothing(mapping: ParamMapping[Any]) -> bool:
    """True for fields that may be left out of a value when serializing."""
    return isinstance(mapping, (OptionalParam, DefaultParam, PureParam))


def _prefix_errors[T](name: str, result: Result[T]) -> Result[T]:
    if isinstance(result, Failure):
        return Failure(
            tuple(errors.field_error(name, e) for e in result.errors),
            result.warnings,
        )
    return result


@dataclass(frozen=True, slots=True)
class ObjectParam(ParamMapping[Any]):
    """Named fields parsed and written in declaration order.

    Every field is attempted even after a failure, so the error lists all
    broken fields, each message prefixed with the field name.  The value is
    a ``dict``, or ``factory(**fields)`` when a factory is given.
    """

    fields: tuple[tuple[str, ParamMapping[Any]], ...]
    factory: Callable[..., Any] | None = None
    _names: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        names = tuple(name for name, _ in self.fields)
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise MappingConfigError(f"Duplicate object fields: {', '.join(dupes)}")
        object.__setattr__(self, "_names", names)

    def _assemble(self, values: tuple[Any, ...]) -> Any:
        record = dict(zip(self._names, values, strict=True))
        if self.factory is None:
            return record
        return self.factory(**record)

    def parse(self, ctx: ParamContext) -> PartialResult[Any]:
        current = ctx
        results: list[Result[Any]] = []
        for name, mapping in self.fields:
            current, result = mapping.parse(current)
            results.append(_prefix_errors(name, result))
        return current, map_result(self._assemble, collect(results))

    def serialize(self, value: Any, params: QueryParams) -> QueryParams:
        for name, mapping in self.fields:
            if isinstance(value, Mapping) and name not in value and _writes_nothing(mapping):
                continue
            params = mapping.serialize(_field_value(value, name), params)
        return params


def object_param(
    fields: Mapping[str, ParamMapping[Any]],
    *,
    factory: Callable[..., Any] | None = None,
) -> ObjectParam:
    return ObjectParam(tuple(fields.items()), factory)


@dataclass(frozen=True, slots=True)
class TaggedUnionParam(ParamMapping[dict[str, Any]]):
    """Discriminated variants: ``tag`` picks which variant mapping follows.

    The parsed value is the variant's dict with ``{tag_field: tag}`` merged
    in.  With an ``EnumParam`` tag, every enumerated value must have a
    variant; this is checked at construction.
    """

    tag: ParamMapping[str]
    variants: Mapping[str, ParamMapping[Any]]
    tag_field: str = "type"

    def __post_init__(self) -> None:
        object.__setattr__(self, "variants", dict(self.variants))
        if not self.variants:
            raise MappingConfigError("Tagged union needs at least one variant")
        for name, variant in self.variants.items():
            if isinstance(variant, ObjectParam) and variant.factory is not None:
                raise MappingConfigError(
                    f"Tagged union variant [{name}] builds its value with a factory; "
                    "variants must parse to a mapping",
                )
        if isinstance(self.tag, EnumParam):
            missing = [v for v in self.tag.values if v not in self.variants]
            if missing:
                raise MappingConfigError(
                    f"Tagged union tag [{self.tag.key}] can yield {', '.join(missing)} "
                    "but no variant is configured for it",
                )

    def _parse_variant(self, tag: str, ctx: ParamContext) -> PartialResult[dict[str, Any]]:
        mapping = self.variants.get(tag)
        if mapping is None:
            log.warning("Unknown tagged union variant %r (known: %s)", tag, sorted(self.variants))
            return ctx, error(errors.unknown_variant(tag, self.variants))
        remainder, result = mapping.parse(ctx)
        return remainder, map_result(lambda value: self._merge(tag, value), result)

    def _merge(self, tag: str, value: Any) -> dict[str, Any]:
        if not isinstance(value, Mapping):
            raise MappingConfigError(
                f"Tagged union variant [{tag}] must parse to a mapping, got {type(value).__name__}",
            )
        return {**value, self.tag_field: tag}

    def parse(self, ctx: ParamContext) -> PartialResult[dict[str, Any]]:
        remainder, tag_result = self.tag.parse(ctx)
        return bind_partial(
            lambda tag: self._parse_variant(tag, remainder),
            (remainder, tag_result),
        )

    def serialize(self, value: Any, params: QueryParams) -> QueryParams:
        tag = _field_value(value, self.tag_field)
        mapping = self.variants.get(tag)
        if mapping is None:
            raise MappingConfigError(errors.unknown_variant(tag, self.variants))
        params = self.tag.serialize(tag, params)
        return mapping.serialize(value, params)


def tagged_union(
    tag: ParamMapping[str],
    variants: Mapping[str, ParamMapping[Any]],
    *,
    tag_field: str = "type",
) -> TaggedUnionParam:
    return TaggedUnionParam(tag, variants, tag_field)
