"""tablemodel.calc - Selections, expressions and their evaluation."""

from tablemodel.calc._evaluator import ExpressionEvaluator, as_number, loose_equals
from tablemodel.calc._expression import Expression, is_expression
from tablemodel.calc._functions import (
    ExpressionLibrary,
    MapExpression,
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
from tablemodel.calc._protocol import Binding, HostAdapter, KeystrokeSource, ModelOptions
from tablemodel.calc._selection import (
    Coordinate,
    EmptySelection,
    ListSelection,
    PointSelection,
    RangeSelection,
    Selection,
    UnionSelection,
    as_selection,
    select,
)

__all__ = [
    "Binding",
    "Coordinate",
    "EmptySelection",
    "Expression",
    "ExpressionEvaluator",
    "ExpressionLibrary",
    "HostAdapter",
    "KeystrokeSource",
    "ListSelection",
    "MapExpression",
    "ModelOptions",
    "PointSelection",
    "RangeSelection",
    "Selection",
    "UnionSelection",
    "as_number",
    "as_selection",
    "average",
    "concat",
    "count",
    "count_if",
    "is_expression",
    "loose_equals",
    "map_values",
    "maximum",
    "minimum",
    "product",
    "select",
    "sum_",
]
