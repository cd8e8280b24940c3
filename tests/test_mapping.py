"""Tests for querymap.mapping — map / bind / pure composition."""
from __future__ import annotations

from querymap.combinators import RawParam
from querymap.context import ParamContext
from querymap.mapping import BoundParam, MappedParam, PureParam, bind_param, map_param, pure
from querymap.params import QueryParams
from querymap.result import error, success, warning


def _ctx(query: str) -> ParamContext:
    return ParamContext.from_input(QueryParams.from_query_string(query))


class TestMapParam:
    def test_parse_and_serialize_transform(self) -> None:
        upper = map_param(str.upper, str.lower, RawParam("a"))
        assert isinstance(upper, MappedParam)
        _, result = upper.parse(_ctx("a=abc"))
        assert result == success("ABC")
        assert upper.serialize("XYZ", QueryParams()).items == (("a", "xyz"),)

    def test_error_passes_through(self) -> None:
        upper = map_param(str.upper, str.lower, RawParam("a"))
        _, result = upper.parse(_ctx("b=1"))
        assert result.status == "error"


class TestBindParam:
    @staticmethod
    def _positive(text: str):
        n = int(text)
        if n < 0:
            return error("negative")
        if n == 0:
            return warning(n, "zero")
        return success(n)

    def test_validation(self) -> None:
        m = bind_param(self._positive, str, RawParam("n"))
        assert isinstance(m, BoundParam)
        assert m.parse(_ctx("n=5"))[1] == success(5)
        assert m.parse(_ctx("n=0"))[1] == warning(0, "zero")
        assert m.parse(_ctx("n=-1"))[1] == error("negative")

    def test_failed_validation_still_consumes(self) -> None:
        m = bind_param(self._positive, str, RawParam("n"))
        remainder, _ = m.parse(_ctx("n=-1"))
        assert remainder.remaining_keys() == []


class TestPure:
    def test_consumes_and_writes_nothing(self) -> None:
        m = pure(42)
        assert isinstance(m, PureParam)
        ctx = _ctx("a=1")
        remainder, result = m.parse(ctx)
        assert remainder is ctx
        assert result == success(42)
        params = QueryParams().append("x", "y")
        assert m.serialize(42, params) is params

    def test_mappings_are_reusable(self) -> None:
        m = map_param(int, str, RawParam("n"))
        assert m.parse(_ctx("n=1"))[1] == success(1)
        assert m.parse(_ctx("n=2"))[1] == success(2)
