"""Tests for expression trees, dependency inference and evaluation."""

from __future__ import annotations

import pytest

from tablemodel import MemoryHost
from tablemodel._bus import ChangeBus
from tablemodel._store import ValueStore
from tablemodel.calc._evaluator import ExpressionEvaluator, as_number, loose_equals
from tablemodel.calc._expression import Expression, is_expression
from tablemodel.calc._functions import product, sum_
from tablemodel.calc._selection import EmptySelection, select

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _evaluator(rows: list[list]) -> ExpressionEvaluator:
    store = ValueStore(MemoryHost.from_rows(rows), ChangeBus())
    return ExpressionEvaluator(store)


def _collect(values: list) -> list:
    return list(values)


class TestSourceSelection:
    def test_no_selection_args_is_empty(self) -> None:
        e = sum_(1, 2, 3)
        assert isinstance(e.source_selection, EmptySelection)
        assert e.source_selection.is_empty()

    def test_single_selection_used_directly(self) -> None:
        r = select.range(0, 0, 2, 0)
        e = sum_(r, 5)
        assert e.source_selection is r

    def test_transitive(self) -> None:
        inner = sum_(select.point(0, 0), select.point(0, 1))
        outer = product(inner, select.range(2, 0, 2, 3), 10)
        s = outer.source_selection
        assert s.includes(0, 0)
        assert s.includes(0, 1)
        assert s.includes(2, 3)
        assert not s.includes(1, 0)

    def test_membership_independent_of_argument_order(self) -> None:
        a = select.point(0, 0)
        b = select.range(1, 1, 2, 2)
        e1 = sum_(a, sum_(b))
        e2 = sum_(sum_(b), a)
        for row in range(4):
            for col in range(4):
                assert e1.source_selection.includes(row, col) == e2.source_selection.includes(row, col)

    def test_computed_once(self) -> None:
        e = sum_(select.point(0, 0))
        assert e.source_selection is e.source_selection
        with pytest.raises(AttributeError):
            e.source_selection = select.empty()  # type: ignore[misc]

    def test_args_are_a_tuple(self) -> None:
        args = [1, select.point(0, 0)]
        e = Expression(args, _collect)
        args.append(99)
        assert e.args == (1, select.point(0, 0))

    def test_reducer_required_without_apply(self) -> None:
        with pytest.raises(TypeError, match="needs a reducer"):
            Expression([1], None)

    def test_subclass_with_apply_needs_no_reducer(self) -> None:
        class Constant(Expression):
            __slots__ = ()

            def apply(self, values, evaluator):
                return 42

        e = Constant([select.point(0, 0)], None)
        assert e.reducer is None
        assert e.name == "expression"
        assert _evaluator([[1]]).evaluate(e) == 42

    def test_is_expression(self) -> None:
        assert is_expression(sum_())
        assert not is_expression(select.point(0, 0))
        assert not is_expression(3)


class TestEvaluate:
    def test_literals(self) -> None:
        ev = _evaluator([[None]])
        assert ev.evaluate(Expression([1, "a", None], _collect)) == [1, "a", None]

    def test_selection_resolves_to_list(self) -> None:
        ev = _evaluator([[1, 2], [3, 4]])
        e = Expression([select.range(0, 0, 1, 1)], _collect)
        assert ev.evaluate(e) == [[1, 2, 3, 4]]

    def test_flatten_splices_lists(self) -> None:
        ev = _evaluator([[1, 2], [3, 4]])
        e = Expression([select.range(0, 0, 0, 1), 9, select.point(1, 1)], _collect, flatten=True)
        assert ev.evaluate(e) == [1, 2, 9, 4]

    def test_flatten_does_not_split_strings(self) -> None:
        ev = _evaluator([["ab"]])
        e = Expression([select.point(0, 0), "cd"], _collect, flatten=True)
        assert ev.evaluate(e) == ["ab", "cd"]

    def test_missing_cells_skipped(self) -> None:
        # Grid is 1x2; (0, 2) and (5, 5) do not exist, (0, 1) is blank.
        ev = _evaluator([[7, None]])
        e = Expression([select.list([(0, 0), (0, 1), (0, 2), (5, 5)])], _collect)
        assert ev.evaluate(e) == [[7]]

    def test_nested_expression(self) -> None:
        ev = _evaluator([[2, 3]])
        inner = sum_(select.range(0, 0, 0, 1))
        outer = product(inner, 2)
        assert ev.evaluate(outer) == 10

    def test_nested_list_result_not_flattened_without_flag(self) -> None:
        ev = _evaluator([[1, 2]])
        inner = Expression([select.range(0, 0, 0, 1)], lambda v: v[0])
        outer = Expression([inner], _collect)
        assert ev.evaluate(outer) == [[1, 2]]

    def test_reducer_errors_propagate(self) -> None:
        ev = _evaluator([[1]])

        def boom(values: list) -> None:
            raise ZeroDivisionError("boom")

        with pytest.raises(ZeroDivisionError):
            ev.evaluate(Expression([select.point(0, 0)], boom))


class TestAsNumber:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("abc", 0),
            ("3.5", 3.5),
            (3, 3),
            (2.25, 2.25),
            ("  7 ", 7),
            ("-4", -4),
            ("1e3", 1000),
            (".5", 0.5),
            ("3px", 0),
            ("", 0),
            (None, 0),
            (True, 0),
            ("1_000", 0),
            ("0x10", 0),
            ("nan", 0),
            (float("nan"), 0),
        ],
    )
    def test_values(self, value, expected) -> None:
        assert as_number(value) == expected

    def test_infinity(self) -> None:
        assert as_number("Infinity") == float("inf")
        assert as_number("-Infinity") == float("-inf")
        assert as_number("inf") == 0


class TestLooseEquals:
    @pytest.mark.parametrize(
        "a,b,expected",
        [
            ("a", "a", True),
            ("a", "A", False),
            (1, "1", True),
            ("1.0", 1, True),
            (1, 1.0, True),
            (0, "", True),
            (True, 1, True),
            (None, None, True),
            (None, 0, False),
            ("", None, False),
            ("x", 0, False),
            ("1", "1.0", False),
        ],
    )
    def test_pairs(self, a, b, expected) -> None:
        assert loose_equals(a, b) is expected
