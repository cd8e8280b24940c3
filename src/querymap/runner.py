"""Top-level entry points: run a mapping over a whole parameter collection.

* ``run_parse`` — parse, then warn once per key that still has unread
  occurrences (each occurrence should be used exactly once).
* ``run_serialize`` — serialize into a fresh ``QueryParams``.
* ``parse_query`` / ``format_query`` — the same, from and to a literal
  query string.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from querymap import errors
from querymap.context import ParamContext
from querymap.mapping import ParamMapping
from querymap.params import QueryParams
from querymap.result import Result, add_warnings

log = logging.getLogger(__name__)

type ParamSource = QueryParams | Mapping[str, Sequence[str]] | str


def _to_context(source: ParamSource) -> ParamContext:
    if isinstance(source, str):
        return ParamContext.from_input(QueryParams.from_query_string(source))
    return ParamContext.from_input(source)


def run_parse[T](mapping: ParamMapping[T], source: ParamSource) -> Result[T]:
    """Parse *source* with *mapping* and flag leftover occurrences."""
    remainder, result = mapping.parse(_to_context(source))
    leftover = remainder.remaining_keys()
    if leftover:
        log.debug("Unconsumed query parameters: %s", ", ".join(leftover))
    result = add_warnings(result, *(errors.unconsumed_input(key) for key in leftover))
    log.debug(
        "Parsed query parameters: status=%s errors=%d warnings=%d",
        result.status,
        len(result.errors),
        len(result.warnings),
    )
    return result


def run_serialize[T](mapping: ParamMapping[T], value: T) -> QueryParams:
    return mapping.serialize(value, QueryParams())


def parse_query[T](mapping: ParamMapping[T], query: str) -> Result[T]:
    return run_parse(mapping, query)


def format_query(mapping: ParamMapping[Any], value: Any) -> str:
    """Serialize *value* straight to a query string (no leading ``?``)."""
    return run_serialize(mapping, value).to_query_string()
