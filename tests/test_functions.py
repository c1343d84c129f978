"""Tests for the built-in expression library and its registry."""

from __future__ import annotations

import re

import pytest

from tablemodel import InvalidSelectionArgument, MemoryHost, TableModel
from tablemodel.calc._functions import (
    _BUILTINS,
    ExpressionLibrary,
    MapExpression,
    _builtin_count_if,
    _builtin_product,
    _builtin_sum,
    average,
    concat,
    count,
    count_if,
    map_values,
    maximum,
    minimum,
    product,
    sum_,
)
from tablemodel.calc._selection import select

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _model(rows: list[list]) -> TableModel:
    return TableModel(MemoryHost.from_rows(rows))


class TestLibrary:
    def test_builtins_registered(self) -> None:
        lib = ExpressionLibrary()
        assert lib.has("SUM")
        assert lib.has("countif")
        assert lib.has("Map")

    def test_custom_registration(self) -> None:
        lib = ExpressionLibrary()
        lib.register("double", lambda arg: product(arg, 2))
        model = _model([[4]])
        assert model.evaluate(lib.build("DOUBLE", select.point(0, 0))) == 8

    def test_case_insensitive_lookup(self) -> None:
        lib = ExpressionLibrary()
        assert lib.get("sum") is lib.get("SUM")

    def test_unknown_build(self) -> None:
        with pytest.raises(KeyError):
            ExpressionLibrary().build("NOPE")

    def test_supported_functions(self) -> None:
        funcs = ExpressionLibrary().supported_functions
        assert isinstance(funcs, frozenset)
        assert funcs == frozenset(_BUILTINS)

    def test_registries_are_independent(self) -> None:
        a = ExpressionLibrary()
        b = ExpressionLibrary()
        a.register("ONLY_A", sum_)
        assert not b.has("ONLY_A")


class TestSumProduct:
    def test_sum_reducer(self) -> None:
        assert _builtin_sum([1, "2", 3.5]) == 6.5

    def test_sum_non_numeric_counts_as_zero(self) -> None:
        assert _builtin_sum(["abc", 2, "4px"]) == 2

    def test_sum_identity(self) -> None:
        assert _builtin_sum([]) == 0

    def test_product_identity(self) -> None:
        assert _builtin_product([]) == 1

    def test_product_non_numeric_zeroes(self) -> None:
        assert _builtin_product([2, "x"]) == 0

    def test_sum_over_selection_and_literals(self) -> None:
        model = _model([[1, 2], [3, 4]])
        assert model.evaluate(sum_(select.range(0, 0, 1, 1), 10)) == 20

    def test_sum_ignores_holes(self) -> None:
        model = _model([[1, None, 5]])
        assert model.evaluate(sum_(select.range(0, 0, 0, 9))) == 6

    def test_sum_flattens_nested(self) -> None:
        model = _model([[2, 3]])
        assert model.evaluate(sum_(sum_(select.point(0, 0)), select.point(0, 1))) == 5

    def test_product_over_selection(self) -> None:
        model = _model([["2", "3"], ["4", "0.5"]])
        assert model.evaluate(product(select.range(0, 0, 1, 1))) == 12


class TestCountIf:
    def test_equality_condition(self) -> None:
        model = _model([["a", "b", "a"]])
        cells = select.list([(0, 0), (0, 1), (0, 2)])
        assert model.evaluate(count_if(cells, "a")) == 2

    def test_loose_equality(self) -> None:
        model = _model([["1", 1, 1.0, "one"]])
        assert model.evaluate(count_if(select.range(0, 0, 0, 3), 1)) == 3

    def test_pattern_condition(self) -> None:
        model = _model([["apple", "banana", "apricot", 42]])
        pattern = re.compile(r"^ap")
        assert model.evaluate(count_if(select.range(0, 0, 0, 3), pattern)) == 2

    def test_pattern_on_stringified_numbers(self) -> None:
        model = _model([[42, 7, 420]])
        assert model.evaluate(count_if(select.range(0, 0, 0, 2), re.compile("42"))) == 2

    def test_predicate_condition(self) -> None:
        model = _model([[1, 5, 10]])
        assert model.evaluate(count_if(select.range(0, 0, 0, 2), lambda v: v > 3)) == 2

    def test_pair_coerced_to_selection(self) -> None:
        model = _model([["x"]])
        assert model.evaluate(count_if((0, 0), "x")) == 1

    def test_invalid_selection(self) -> None:
        with pytest.raises(InvalidSelectionArgument):
            count_if("A1:A3", "x")

    def test_reducer_arity(self) -> None:
        with pytest.raises(ValueError):
            _builtin_count_if([[1]])

    def test_source_selection(self) -> None:
        e = count_if(select.range(0, 0, 3, 0), "a")
        assert e.source_selection.includes(2, 0)
        assert not e.source_selection.includes(0, 1)


class TestMap:
    def test_doubles_range(self) -> None:
        model = _model([[3, 4]])
        e = map_values(select.range(0, 0, 0, 1), lambda v, *_: v * 2)
        assert isinstance(e, MapExpression)
        assert e.reducer is None
        assert model.evaluate(e) == [6, 8]

    def test_selection_handler_gets_coordinates_and_model(self) -> None:
        model = _model([[1, 2], [3, 4]])
        seen: list[tuple] = []

        def handler(value, m, row, column):
            seen.append((value, m, row, column))
            return row * 10 + column

        result = model.evaluate(map_values(select.range(0, 0, 1, 1), handler))
        assert result == [0, 1, 10, 11]
        assert seen[0] == (1, model, 0, 0)
        assert seen[3] == (4, model, 1, 1)

    def test_over_values(self) -> None:
        model = _model([[None]])
        calls: list[tuple] = []

        def handler(value, m):
            calls.append((value, m))
            return value + 1

        assert model.evaluate(map_values([1, 2, 3], handler)) == [2, 3, 4]
        assert calls[0] == (1, model)

    def test_over_expression_result(self) -> None:
        model = _model([[2, 3]])
        e = map_values(sum_(select.range(0, 0, 0, 1)), lambda v, m: v * 10)
        assert model.evaluate(e) == [50]

    def test_skips_missing_cells(self) -> None:
        model = _model([[1, None]])
        e = map_values(select.range(0, 0, 0, 5), lambda v, m, r, c: (r, c))
        assert model.evaluate(e) == [(0, 0)]

    def test_flattened_into_enclosing_sum(self) -> None:
        model = _model([[1, 2, 3]])
        doubled = map_values(select.range(0, 0, 0, 2), lambda v, *_: v * 2)
        assert model.evaluate(sum_(doubled)) == 12

    def test_source_selection(self) -> None:
        r = select.range(0, 0, 0, 2)
        assert map_values(r, lambda v, *_: v).source_selection is r


class TestSupplementary:
    def test_average(self) -> None:
        model = _model([[2, 4, "x", None]])
        assert model.evaluate(average(select.range(0, 0, 0, 3))) == 3

    def test_average_of_nothing(self) -> None:
        assert _model([[None]]).evaluate(average()) == 0

    def test_min_max(self) -> None:
        model = _model([[5, "-2", 9, "n/a"]])
        r = select.range(0, 0, 0, 3)
        assert model.evaluate(minimum(r)) == -2
        assert model.evaluate(maximum(r)) == 9

    def test_min_of_nothing(self) -> None:
        assert _model([[None]]).evaluate(minimum("a")) is None

    def test_count(self) -> None:
        model = _model([[1, "2", "x", "", 0, "0"]])
        assert model.evaluate(count(select.range(0, 0, 0, 5))) == 4

    def test_concat(self) -> None:
        model = _model([["a", 1, "b"]])
        assert model.evaluate(concat(select.range(0, 0, 0, 2), None, "!")) == "a1b!"
