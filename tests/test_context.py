"""Tests for querymap.context — immutable consumption cursors."""
from __future__ import annotations

from querymap.context import ParamContext, bind_partial, either_partial, map_partial
from querymap.params import QueryParams
from querymap.result import BOTH_FAILED, Failure, error, success, warning


def _ctx(**values: list[str]) -> ParamContext:
    return ParamContext.from_input(values)


class TestFromInput:
    def test_cursors_start_at_zero(self) -> None:
        ctx = _ctx(a=["1", "2"], b=["x"])
        assert ctx.cursor("a") == 0
        assert ctx.cursor("b") == 0
        assert ctx.remaining_keys() == ["a", "b"]

    def test_from_query_params(self) -> None:
        ctx = ParamContext.from_input(QueryParams.from_query_string("a=1&b=2&a=3"))
        assert ctx.values == {"a": ("1", "3"), "b": ("2",)}


class TestGet:
    def test_reads_in_order(self) -> None:
        ctx = _ctx(a=["1", "2"])
        ctx1, r1 = ctx.get("a")
        ctx2, r2 = ctx1.get("a")
        assert r1 == success("1")
        assert r2 == success("2")
        assert ctx2.remaining_keys() == []

    def test_original_context_untouched(self) -> None:
        ctx = _ctx(a=["1", "2"])
        ctx.get("a")
        assert ctx.cursor("a") == 0
        _, again = ctx.get("a")
        assert again == success("1")

    def test_missing_key(self) -> None:
        ctx = _ctx(a=["1"])
        next_ctx, result = ctx.get("zzz")
        assert next_ctx is ctx
        assert isinstance(result, Failure)
        assert "[zzz] was not found" in result.errors[0]

    def test_exhausted_key_counts_the_attempt(self) -> None:
        ctx = _ctx(a=["1"])
        ctx1, _ = ctx.get("a")
        ctx2, result = ctx1.get("a")
        assert isinstance(result, Failure)
        assert "#2 value" in result.errors[0]
        assert "only has 1 values" in result.errors[0]
        assert ctx2 is not ctx1
        assert ctx2.cursor("a") == 1

    def test_cursor_never_exceeds_length(self) -> None:
        ctx = _ctx(a=[])
        for _ in range(3):
            ctx, result = ctx.get("a")
            assert isinstance(result, Failure)
        assert ctx.cursor("a") == 0

    def test_remaining_keys(self) -> None:
        ctx = _ctx(a=["1"], b=["1", "2"])
        ctx, _ = ctx.get("b")
        ctx, _ = ctx.get("a")
        assert ctx.remaining_keys() == ["b"]


class TestPartialResults:
    def test_map_partial(self) -> None:
        ctx = _ctx(a=["1"])
        assert map_partial(int, (ctx, success("1"))) == (ctx, success(1))

    def test_bind_partial_threads_context(self) -> None:
        ctx = _ctx(a=["1"], b=["2"])
        first = ctx.get("a")
        next_ctx, result = bind_partial(lambda a: map_partial(lambda b: a + b, first[0].get("b")), first)
        assert result == success("12")
        assert next_ctx.remaining_keys() == []

    def test_bind_partial_stops_on_error(self) -> None:
        ctx = _ctx(a=["1"])
        called = []
        out_ctx, result = bind_partial(lambda v: called.append(v) or (ctx, success(v)), (ctx, error("e")))
        assert called == []
        assert out_ctx is ctx
        assert result == error("e")

    def test_bind_partial_keeps_outer_warnings(self) -> None:
        ctx = _ctx(a=["1"])
        _, result = bind_partial(lambda v: (ctx, error("inner")), (ctx, warning(1, "outer")))
        assert result == Failure(("inner",), ("outer",))

    def test_either_partial_keeps_chosen_context(self) -> None:
        ctx = _ctx(a=["1"], b=["2"])
        a_branch = ctx.get("a")
        b_branch = ctx.get("missing")
        chosen_ctx, result = either_partial(a_branch, b_branch)
        assert result == success("1")
        assert chosen_ctx is a_branch[0]

    def test_either_partial_both_fail_uses_right_context(self) -> None:
        ctx = _ctx(a=["1"])
        left = (ctx, error("l"))
        right_ctx, _ = ctx.get("a")
        chosen_ctx, result = either_partial(left, (right_ctx, error("r")))
        assert chosen_ctx is right_ctx
        assert result.errors == (BOTH_FAILED, "l", "r")
