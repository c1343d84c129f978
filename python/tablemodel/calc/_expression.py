"""Expression nodes: composable formulas with dependency inference."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from tablemodel.calc._selection import Selection, union

if TYPE_CHECKING:
    from tablemodel.calc._evaluator import ExpressionEvaluator

Reducer = Callable[[list[Any]], Any]


class Expression:
    """A formula node.

    Arguments are literal scalars, :class:`Selection` objects or other
    expressions. The evaluator resolves them, optionally splices list
    results into the argument list (``flatten``), and hands the result to
    ``reducer``.

    Subclasses that override :meth:`apply` may pass ``reducer=None``.

    ``source_selection`` is computed once, here: every selection argument
    plus the source selection of every sub-expression. A change to any cell
    it includes must trigger re-evaluation.
    """

    __slots__ = ("_args", "_reducer", "_flatten", "_source_selection", "name")

    def __init__(
        self,
        args: Iterable[Any],
        reducer: Reducer | None,
        *,
        flatten: bool = False,
        name: str | None = None,
    ) -> None:
        if reducer is None and type(self).apply is Expression.apply:
            raise TypeError(f"{type(self).__name__} needs a reducer or its own apply()")
        self._args: tuple[Any, ...] = tuple(args)
        self._reducer = reducer
        self._flatten = flatten
        self.name = name or getattr(reducer, "__name__", "expression")
        self._source_selection = _find_source_selection(self._args)

    @property
    def args(self) -> tuple[Any, ...]:
        return self._args

    @property
    def reducer(self) -> Reducer | None:
        return self._reducer

    @property
    def flatten(self) -> bool:
        return self._flatten

    @property
    def source_selection(self) -> Selection:
        return self._source_selection

    def apply(self, values: list[Any], evaluator: ExpressionEvaluator) -> Any:
        """Reduce resolved argument values to the expression's value."""
        return self._reducer(values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, args={len(self._args)})"


def _find_source_selection(args: tuple[Any, ...]) -> Selection:
    selections: list[Selection] = []
    for arg in args:
        if isinstance(arg, Selection):
            selections.append(arg)
        elif isinstance(arg, Expression):
            selections.append(arg.source_selection)
    return union(*selections)


def is_expression(value: Any) -> bool:
    return isinstance(value, Expression)
