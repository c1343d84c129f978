"""TableModel: reactive grid of literal and formula cells over a host."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from tablemodel._bus import CellListener, ChangeBus, ColumnListener, RowListener
from tablemodel._store import ValueStore
from tablemodel.calc._evaluator import ExpressionEvaluator
from tablemodel.calc._expression import Expression
from tablemodel.calc._protocol import Binding, HostAdapter, KeystrokeSource, ModelOptions
from tablemodel.calc._selection import Coordinate

logger = logging.getLogger(__name__)


class TableModel:
    """Binds grid cells to values and formulas, recalculating on change.

    Usage::

        model = TableModel(MemoryHost(3, 3))
        model.set(0, 0, 2)
        model.set(0, 1, 3)
        model.set(0, 2, sum_(select.range(0, 0, 0, 1)))   # 5
        model.set(0, 0, 10)                                # (0, 2) becomes 13

    All recalculation is synchronous: by the time :meth:`set` returns, every
    formula depending on the written cell, directly or through other
    formulas, holds its new value.

    Formula graphs must be acyclic. A formula whose source selection
    includes its own target (directly or through other formulas) recurses
    until :class:`~tablemodel.CyclicBindingOverflow` is raised; the model
    does not detect this.
    """

    def __init__(
        self,
        host: HostAdapter,
        options: ModelOptions | Mapping[str, Any] | None = None,
    ) -> None:
        if options is None:
            options = ModelOptions()
        elif not isinstance(options, ModelOptions):
            options = ModelOptions.from_mapping(options)
        self.options = options
        self.host = host
        self._bus = ChangeBus()
        self._store = ValueStore(
            host,
            self._bus,
            caching_enabled=options.caching_enabled,
            value_parser=options.value_parser,
        )
        self._evaluator = ExpressionEvaluator(self._store, self)
        self._bindings: list[Binding] = []

        host.on_external_edit(self._on_external_edit)
        if options.recalculate_on_every_keystroke:
            if isinstance(host, KeystrokeSource):
                host.on_keystroke(self._on_external_edit)
            else:
                logger.debug(
                    "Host %s does not report keystrokes; recalculating on edits only",
                    type(host).__name__,
                )

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------

    def get(self, row: int, column: int) -> Any:
        """Current value of the cell (never its formula); None if missing."""
        return self._store.get(Coordinate(row, column))

    def set(self, row: int, column: int, value: Any) -> bool:
        """Assign a literal or an expression to the cell.

        Literals return whether the value changed. Expressions are bound
        with :meth:`bind` and always return True.
        """
        if isinstance(value, Expression):
            self.bind(row, column, value)
            return True
        return self._store.set(Coordinate(row, column), value)

    def evaluate(self, expression: Expression) -> Any:
        """Evaluate *expression* against the current cell values."""
        return self._evaluator.evaluate(expression)

    # ------------------------------------------------------------------
    # Bindings
    # ------------------------------------------------------------------

    def bind(self, row: int, column: int, expression: Expression) -> Binding:
        """Make the cell a formula cell computing *expression*.

        The cell is evaluated immediately and again whenever a cell in
        ``expression.source_selection`` changes. Earlier bindings of the same
        cell stay registered.
        """
        binding = Binding(Coordinate(row, column), expression)
        selection = expression.source_selection

        def recalculate() -> None:
            value = self._evaluator.evaluate(expression)
            self._store.set(binding.target, value)

        def on_cell_change(changed_row: int, changed_column: int, value: Any) -> None:
            if selection.includes(changed_row, changed_column):
                recalculate()

        self._bus.on_cell_change(on_cell_change)
        self._bindings.append(binding)
        logger.debug("Bound %s to %r", binding.target, expression)
        recalculate()
        return binding

    def listen(self, expression: Expression, handler: Callable[[Any], None]) -> None:
        """Call ``handler(value)`` whenever a source cell of *expression* changes.

        *value* is the freshly evaluated expression. The handler is not
        called at registration time.
        """
        selection = expression.source_selection

        def on_cell_change(row: int, column: int, value: Any) -> None:
            if selection.includes(row, column):
                handler(self._evaluator.evaluate(expression))

        self._bus.on_cell_change(on_cell_change)

    @property
    def bindings(self) -> tuple[Binding, ...]:
        return tuple(self._bindings)

    # ------------------------------------------------------------------
    # Change listeners
    # ------------------------------------------------------------------

    def on_cell_change(self, listener: CellListener) -> None:
        self._bus.on_cell_change(listener)

    def on_row_change(self, listener: RowListener) -> None:
        self._bus.on_row_change(listener)

    def on_column_change(self, listener: ColumnListener) -> None:
        self._bus.on_column_change(listener)

    # ------------------------------------------------------------------
    # Host events
    # ------------------------------------------------------------------

    def invalidate(self, row: int | None = None, column: int | None = None) -> None:
        """Drop cached values: one cell, or everything when no cell is given."""
        if row is None or column is None:
            self._store.invalidate()
        else:
            self._store.invalidate(Coordinate(row, column))

    def _on_external_edit(self, row: int, column: int, raw: Any) -> None:
        self._store.accept_external(Coordinate(row, column), raw)
