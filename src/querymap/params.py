"""Immutable ordered multi-valued query parameter collection.

``QueryParams`` is both the output accumulator threaded through ``serialize``
and one of the accepted inputs of a parse.  Pairs keep insertion order, the
same key may appear many times, and every "mutation" returns a new instance.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass

from querymap.codec import join_query, split_query


@dataclass(frozen=True, slots=True)
class QueryParams:
    """Ordered ``(key, value)`` pairs."""

    items: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_query_string(cls, query: str) -> QueryParams:
        return cls(tuple(split_query(query)))

    @classmethod
    def from_multimap(cls, data: Mapping[str, Sequence[str] | str]) -> QueryParams:
        """Build from ``{"a": ["1", "2"], "b": "x"}``; a bare string is one value."""
        pairs: list[tuple[str, str]] = []
        for key, values in data.items():
            if isinstance(values, str):
                pairs.append((key, values))
            else:
                pairs.extend((key, v) for v in values)
        return cls(tuple(pairs))

    def append(self, key: str, value: str) -> QueryParams:
        return QueryParams(self.items + ((key, value),))

    def get_all(self, key: str) -> list[str]:
        return [v for k, v in self.items if k == key]

    def get(self, key: str) -> str | None:
        """First value for *key*, or None."""
        for k, v in self.items:
            if k == key:
                return v
        return None

    def keys(self) -> list[str]:
        """Distinct keys in first-seen order."""
        return list(dict.fromkeys(k for k, _ in self.items))

    def to_multimap(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for k, v in self.items:
            grouped.setdefault(k, []).append(v)
        return grouped

    def to_query_string(self) -> str:
        return join_query(self.items)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, key: object) -> bool:
        return any(k == key for k, _ in self.items)

    def __str__(self) -> str:
        return self.to_query_string()
