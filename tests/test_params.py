"""Tests for querymap.params and querymap.codec."""
from __future__ import annotations

import pytest

from querymap.codec import decode_component, encode_component, join_query, split_query
from querymap.params import QueryParams


# ───────────────────────────── codec ──────────────────────────────


class TestEncodeComponent:
    def test_unreserved_untouched(self) -> None:
        assert encode_component("abc-_.!~*'()") == "abc-_.!~*'()"

    def test_reserved_escaped(self) -> None:
        assert encode_component("a b&c=d/e+f") == "a%20b%26c%3Dd%2Fe%2Bf"

    def test_unicode(self) -> None:
        assert encode_component("é") == "%C3%A9"

    def test_newline(self) -> None:
        assert encode_component("a\nb") == "a%0Ab"


class TestDecodeComponent:
    def test_roundtrip(self) -> None:
        value = "abc+def\nghi & é"
        assert decode_component(encode_component(value)) == value

    def test_plus_is_literal(self) -> None:
        assert decode_component("a+b") == "a+b"

    @pytest.mark.parametrize("raw", ["%", "%2", "%zz", "abc%g1"])
    def test_malformed_escape(self, raw: str) -> None:
        with pytest.raises(ValueError, match="malformed escape"):
            decode_component(raw)

    def test_invalid_utf8(self) -> None:
        with pytest.raises(ValueError, match="UTF-8"):
            decode_component("%FF")


class TestQuerySplitting:
    def test_split(self) -> None:
        assert split_query("?a=1&a=2&b") == [("a", "1"), ("a", "2"), ("b", "")]

    def test_split_skips_empty_segments(self) -> None:
        assert split_query("a=1&&b=2&") == [("a", "1"), ("b", "2")]

    def test_split_decodes_keys_only(self) -> None:
        assert split_query("my%20key=a%20b") == [("my key", "a%20b")]

    def test_value_may_contain_equals(self) -> None:
        assert split_query("a=x=y") == [("a", "x=y")]

    def test_join(self) -> None:
        assert join_query([("my key", "a%20b"), ("n", "1")]) == "my%20key=a%20b&n=1"


# ───────────────────────────── QueryParams ─────────────────────────────


class TestQueryParams:
    def test_append_is_persistent(self) -> None:
        empty = QueryParams()
        one = empty.append("a", "1")
        assert len(empty) == 0
        assert list(one) == [("a", "1")]

    def test_multimap_views(self) -> None:
        params = QueryParams.from_query_string("a=1&b=x&a=2")
        assert params.keys() == ["a", "b"]
        assert params.get_all("a") == ["1", "2"]
        assert params.get("b") == "x"
        assert params.get("zzz") is None
        assert params.to_multimap() == {"a": ["1", "2"], "b": ["x"]}
        assert "a" in params

    def test_from_multimap(self) -> None:
        params = QueryParams.from_multimap({"a": ["1", "2"], "b": "x"})
        assert params.items == (("a", "1"), ("a", "2"), ("b", "x"))

    def test_query_string_roundtrip(self) -> None:
        query = "a=1&b=x%20y&a=2"
        assert QueryParams.from_query_string(query).to_query_string() == query
        assert str(QueryParams.from_query_string(query)) == query
