"""ExpressionEvaluator: recursive resolution of expression trees.

Also hosts the scalar coercion helpers shared by the built-in library:
:func:`as_number` and :func:`loose_equals`. Both follow the loose rules of
browser scripting (``parseFloat`` and ``==``), which is what cell text
typed by a user is expected to obey.
"""

from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING, Any

from tablemodel.calc._expression import Expression
from tablemodel.calc._selection import Selection

if TYPE_CHECKING:
    from tablemodel._model import TableModel
    from tablemodel._store import ValueStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Scalar coercion
# ---------------------------------------------------------------------------

# Leading decimal literal as accepted by parseFloat (no hex, no underscores).
_FLOAT_PREFIX_RE = re.compile(
    r"^[ \t\n\r\f\v]*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)
# Whole-string numeric text as accepted by ``==`` against a number.
_NUMERIC_TEXT_RE = re.compile(
    r"^\s*[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*$"
)


def _parse_float(value: Any) -> float:
    """``parseFloat``: longest numeric prefix of ``str(value)``, else NaN."""
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    m = _FLOAT_PREFIX_RE.match(str(value))
    if not m:
        return math.nan
    return _to_float(m.group(1))


def _to_float(text: str) -> float:
    text = text.strip()
    if text.lstrip("+-") == "Infinity":
        return -math.inf if text.startswith("-") else math.inf
    return float(text)


def _to_number(value: Any) -> float:
    """Numeric view of a scalar for loose comparison (NaN when none)."""
    if value is None:
        return math.nan
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        if not value.strip():
            return 0.0
        if _NUMERIC_TEXT_RE.match(value):
            return _to_float(value)
    return math.nan


def loose_equals(a: Any, b: Any) -> bool:
    """Loose scalar equality.

    ``None`` only equals ``None``; numbers and numeric text compare by
    value; booleans compare as ``1``/``0``; everything else uses ``==``.
    """
    if a is None or b is None:
        return a is None and b is None
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    numeric = (int, float)
    if isinstance(a, numeric) or isinstance(b, numeric):
        return _to_number(a) == _to_number(b)
    return a == b


def as_number(value: Any) -> float:
    """Coerce *value* to a number, falling back to ``0``.

    The value is parsed like ``parseFloat``; unless the parsed number is
    loosely equal to the original the result is ``0``. So ``"3.5"`` gives
    ``3.5`` while ``"3px"``, ``"abc"``, ``""`` and ``None`` give ``0``.
    """
    number = _parse_float(value)
    if math.isnan(number):
        return 0
    if loose_equals(number, value):
        return number
    return 0


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


class ExpressionEvaluator:
    """Resolves expressions against a value store.

    Usage::

        evaluator = ExpressionEvaluator(store, model)
        value = evaluator.evaluate(sum_(select.range(0, 0, 0, 1)))
    """

    __slots__ = ("store", "model")

    def __init__(self, store: ValueStore, model: TableModel | None = None) -> None:
        self.store = store
        self.model = model

    def evaluate(self, expression: Expression) -> Any:
        """Evaluate *expression*, starting with its arguments."""
        values: list[Any] = []
        for arg in expression.args:
            value = self.resolve(arg)
            if expression.flatten and _is_sequence(value):
                values.extend(value)
            else:
                values.append(value)
        return expression.apply(values, self)

    def resolve(self, arg: Any) -> Any:
        """Resolve a single argument to its value."""
        if isinstance(arg, Expression):
            return self.evaluate(arg)
        if isinstance(arg, Selection):
            return self.read_selection(arg)
        return arg

    def read_selection(self, selection: Selection) -> list[Any]:
        """Current values of every cell in *selection*; missing cells are skipped."""
        values: list[Any] = []
        for coord in selection.all():
            value = self.store.get(coord)
            if value is None:
                logger.debug("Skipping missing cell %s", coord)
                continue
            values.append(value)
        return values
