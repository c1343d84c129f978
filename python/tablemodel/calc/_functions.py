"""Built-in expression library and the registry that names it."""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from tablemodel.calc._evaluator import as_number, loose_equals
from tablemodel.calc._expression import Expression
from tablemodel.calc._selection import Selection, as_selection

if TYPE_CHECKING:
    from tablemodel.calc._evaluator import ExpressionEvaluator


# ---------------------------------------------------------------------------
# Reducers - each takes the list of resolved argument values.
# ---------------------------------------------------------------------------


def _builtin_sum(values: list[Any]) -> float:
    result: float = 0
    for value in values:
        result += as_number(value)
    return result


def _builtin_product(values: list[Any]) -> float:
    result: float = 1
    for value in values:
        result *= as_number(value)
    return result


def _numeric(values: list[Any]) -> list[float]:
    """Values that read as numbers, coerced. Text that is not numeric is dropped."""
    result: list[float] = []
    for v in values:
        if v is None or isinstance(v, bool):
            continue
        if isinstance(v, str) and not v.strip():
            continue
        number = as_number(v)
        if number == 0 and not loose_equals(v, 0):
            continue
        result.append(number)
    return result


def _builtin_average(values: list[Any]) -> float:
    nums = _numeric(values)
    if not nums:
        return 0
    return sum(nums) / len(nums)


def _builtin_min(values: list[Any]) -> float | None:
    nums = _numeric(values)
    return min(nums) if nums else None


def _builtin_max(values: list[Any]) -> float | None:
    nums = _numeric(values)
    return max(nums) if nums else None


def _builtin_count(values: list[Any]) -> int:
    return len(_numeric(values))


def _builtin_concat(values: list[Any]) -> str:
    return "".join("" if v is None else str(v) for v in values)


def _matches(condition: Any, item: Any) -> bool:
    """COUNTIF test: regex search, predicate call, or loose equality."""
    if isinstance(condition, re.Pattern):
        return condition.search("" if item is None else str(item)) is not None
    if callable(condition):
        return bool(condition(item))
    return loose_equals(condition, item)


def _builtin_count_if(values: list[Any]) -> int:
    if len(values) != 2:
        raise ValueError("count_if requires a selection and a condition")
    haystack, condition = values
    if not isinstance(haystack, (list, tuple)):
        haystack = [haystack]
    return sum(1 for item in haystack if _matches(condition, item))


# ---------------------------------------------------------------------------
# map: needs live coordinates and the model, so it overrides apply().
# ---------------------------------------------------------------------------

MapHandler = Callable[..., Any]


class MapExpression(Expression):
    """Applies a handler to each value of its source; evaluates to a list.

    Over a selection the handler is called as
    ``handler(value, model, row, column)`` for every present cell, in
    enumeration order. Over anything else it is called as
    ``handler(value, model)`` for each resolved value.
    """

    __slots__ = ("_handler",)

    def __init__(self, source: Any, handler: MapHandler) -> None:
        self._handler = handler
        super().__init__((source,), None, name="map")

    @property
    def handler(self) -> MapHandler:
        return self._handler

    def apply(self, values: list[Any], evaluator: ExpressionEvaluator) -> list[Any]:
        source = self.args[0]
        model = evaluator.model
        if isinstance(source, Selection):
            results: list[Any] = []
            for coord in source.all():
                value = evaluator.store.get(coord)
                if value is None:
                    continue
                results.append(self._handler(value, model, coord.row, coord.column))
            return results

        resolved = values[0]
        if not isinstance(resolved, (list, tuple)):
            resolved = [resolved]
        return [self._handler(value, model) for value in resolved]


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def sum_(*args: Any) -> Expression:
    """Sum of all arguments, flattened and coerced with ``as_number``."""
    return Expression(args, _builtin_sum, flatten=True, name="sum")


def product(*args: Any) -> Expression:
    """Product of all arguments, flattened and coerced with ``as_number``."""
    return Expression(args, _builtin_product, flatten=True, name="product")


def average(*args: Any) -> Expression:
    return Expression(args, _builtin_average, flatten=True, name="average")


def minimum(*args: Any) -> Expression:
    return Expression(args, _builtin_min, flatten=True, name="min")


def maximum(*args: Any) -> Expression:
    return Expression(args, _builtin_max, flatten=True, name="max")


def count(*args: Any) -> Expression:
    """Number of numeric values among the arguments."""
    return Expression(args, _builtin_count, flatten=True, name="count")


def concat(*args: Any) -> Expression:
    return Expression(args, _builtin_concat, flatten=True, name="concat")


def count_if(selection: Any, condition: Any) -> Expression:
    """Count cells of *selection* that satisfy *condition*.

    *condition* may be a compiled regular expression (searched in the cell
    text), a predicate, or a value compared with loose equality.
    """
    return Expression(
        (as_selection(selection), condition), _builtin_count_if, name="count_if"
    )


def map_values(source: Any, handler: MapHandler) -> MapExpression:
    return MapExpression(source, handler)


_BUILTINS: dict[str, Callable[..., Expression]] = {
    "SUM": sum_,
    "PRODUCT": product,
    "AVERAGE": average,
    "MIN": minimum,
    "MAX": maximum,
    "COUNT": count,
    "CONCAT": concat,
    "COUNTIF": count_if,
    "MAP": map_values,
}


class ExpressionLibrary:
    """Registry of expression builders by name.

    Starts with the builtins and can be extended with custom builders.
    Lookup is case-insensitive.
    """

    def __init__(self) -> None:
        self._builders: dict[str, Callable[..., Expression]] = dict(_BUILTINS)

    def register(self, name: str, builder: Callable[..., Expression]) -> None:
        self._builders[name.upper()] = builder

    def get(self, name: str) -> Callable[..., Expression] | None:
        return self._builders.get(name.upper())

    def has(self, name: str) -> bool:
        return name.upper() in self._builders

    def build(self, name: str, *args: Any) -> Expression:
        """Build the expression *name* over *args*; KeyError if unknown."""
        builder = self.get(name)
        if builder is None:
            raise KeyError(f"Unknown expression function: {name!r}")
        return builder(*args)

    @property
    def supported_functions(self) -> frozenset[str]:
        return frozenset(self._builders.keys())
