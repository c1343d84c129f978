"""Change bus: synchronous dispatch of cell, row and column change events."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from tablemodel.calc._selection import Coordinate

logger = logging.getLogger(__name__)

CellListener = Callable[[int, int, Any], None]
RowListener = Callable[[int], None]
ColumnListener = Callable[[int], None]


class ChangeBus:
    """Ordered, append-only listener registries.

    Listeners run on the caller's stack, in registration order: all cell
    listeners, then row listeners, then column listeners. A cell listener
    that writes another cell runs that whole cascade before the next
    listener is called.
    """

    __slots__ = ("_cell_listeners", "_row_listeners", "_column_listeners")

    def __init__(self) -> None:
        self._cell_listeners: list[CellListener] = []
        self._row_listeners: list[RowListener] = []
        self._column_listeners: list[ColumnListener] = []

    def on_cell_change(self, listener: CellListener) -> None:
        self._cell_listeners.append(listener)

    def on_row_change(self, listener: RowListener) -> None:
        self._row_listeners.append(listener)

    def on_column_change(self, listener: ColumnListener) -> None:
        self._column_listeners.append(listener)

    def emit(self, coord: Coordinate, value: Any) -> None:
        """Notify every listener that the cell at *coord* now holds *value*."""
        row, column = coord
        logger.debug(
            "Dispatching change of (%d, %d) to %d cell listeners",
            row, column, len(self._cell_listeners),
        )
        # Snapshot: listeners registered during dispatch see the next event.
        for listener in list(self._cell_listeners):
            listener(row, column, value)
        for listener in list(self._row_listeners):
            listener(row)
        for listener in list(self._column_listeners):
            listener(column)

    @property
    def listener_counts(self) -> tuple[int, int, int]:
        """``(cell, row, column)`` listener counts."""
        return (
            len(self._cell_listeners),
            len(self._row_listeners),
            len(self._column_listeners),
        )
