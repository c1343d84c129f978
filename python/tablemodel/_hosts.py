"""Host adapters: where the cells of a table model actually live.

``MemoryHost`` keeps a fixed-size grid in a dict and is what tests and
headless callers use. ``WorksheetHost`` exposes an openpyxl worksheet, so a
model can drive formulas over a workbook loaded from or saved to ``.xlsx``.
Both use 0-based coordinates.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from openpyxl.cell.cell import Cell
from openpyxl.worksheet.worksheet import Worksheet

from tablemodel.calc._protocol import EditCallback
from tablemodel.calc._selection import Coordinate


class _EditNotifier:
    """Shared callback bookkeeping for hosts that simulate user edits."""

    def __init__(self) -> None:
        self._edit_callbacks: list[EditCallback] = []

    def on_external_edit(self, callback: EditCallback) -> None:
        self._edit_callbacks.append(callback)

    def _notify(self, callbacks: Iterable[EditCallback], row: int, column: int, raw: Any) -> None:
        for callback in list(callbacks):
            callback(row, column, raw)


class MemoryHost(_EditNotifier):
    """In-memory grid of ``rows`` x ``columns`` cells.

    Cells inside the grid always exist; blank cells read as ``None``.
    Cells outside it do not exist. Besides committed edits it reports
    keystrokes typed through :meth:`type_text`.
    """

    def __init__(
        self,
        rows: int,
        columns: int,
        values: Mapping[tuple[int, int], Any] | None = None,
    ) -> None:
        super().__init__()
        self._keystroke_callbacks: list[EditCallback] = []
        if rows < 0 or columns < 0:
            raise ValueError("Grid dimensions must be non-negative")
        self.rows = rows
        self.columns = columns
        self._values: dict[Coordinate, Any] = {}
        for (row, column), raw in (values or {}).items():
            handle = self.find_cell(row, column)
            if handle is None:
                raise ValueError(f"Initial value outside the grid at ({row}, {column})")
            self._values[handle] = raw

    @classmethod
    def from_rows(cls, rows: list[list[Any]]) -> MemoryHost:
        """Grid sized and filled from a list of row lists."""
        n_cols = max((len(r) for r in rows), default=0)
        values = {
            (r, c): raw
            for r, row in enumerate(rows)
            for c, raw in enumerate(row)
        }
        return cls(len(rows), n_cols, values)

    def find_cell(self, row: int, column: int) -> Coordinate | None:
        if 0 <= row < self.rows and 0 <= column < self.columns:
            return Coordinate(row, column)
        return None

    def on_keystroke(self, callback: EditCallback) -> None:
        self._keystroke_callbacks.append(callback)

    def read_raw(self, handle: Coordinate) -> Any:
        return self._values.get(handle)

    def write_raw(self, handle: Coordinate, value: Any) -> None:
        self._values[handle] = value

    def edit(self, row: int, column: int, raw: Any) -> None:
        """Simulate a committed user edit."""
        handle = self._require(row, column)
        self._values[handle] = raw
        self._notify(self._edit_callbacks, row, column, raw)

    def type_text(self, row: int, column: int, raw: Any) -> None:
        """Simulate a keystroke that changes the cell's text before commit."""
        handle = self._require(row, column)
        if self._values.get(handle) == raw:
            return
        self._values[handle] = raw
        self._notify(self._keystroke_callbacks, row, column, raw)

    def snapshot(self) -> list[list[Any]]:
        """Raw grid contents as a list of rows."""
        return [
            [self._values.get(Coordinate(r, c)) for c in range(self.columns)]
            for r in range(self.rows)
        ]

    def _require(self, row: int, column: int) -> Coordinate:
        handle = self.find_cell(row, column)
        if handle is None:
            raise IndexError(f"({row}, {column}) is outside the {self.rows}x{self.columns} grid")
        return handle


class WorksheetHost(_EditNotifier):
    """Host backed by an openpyxl worksheet.

    Coordinate ``(0, 0)`` is cell ``A1``. By default only cells within the
    worksheet's used area (``max_row`` x ``max_column``) exist; pass
    ``rows``/``columns`` to fix a larger or smaller grid.
    """

    def __init__(
        self,
        worksheet: Worksheet,
        *,
        rows: int | None = None,
        columns: int | None = None,
    ) -> None:
        super().__init__()
        self.worksheet = worksheet
        self._rows = rows
        self._columns = columns

    @property
    def rows(self) -> int:
        return self._rows if self._rows is not None else self.worksheet.max_row

    @property
    def columns(self) -> int:
        return self._columns if self._columns is not None else self.worksheet.max_column

    def find_cell(self, row: int, column: int) -> Cell | None:
        if 0 <= row < self.rows and 0 <= column < self.columns:
            return self.worksheet.cell(row=row + 1, column=column + 1)
        return None

    def read_raw(self, handle: Cell) -> Any:
        return handle.value

    def write_raw(self, handle: Cell, value: Any) -> None:
        handle.value = value

    def edit(self, row: int, column: int, raw: Any) -> None:
        """Write *raw* to the worksheet as a user edit would, then notify."""
        cell = self.find_cell(row, column)
        if cell is None:
            raise IndexError(f"({row}, {column}) is outside the worksheet grid")
        cell.value = raw
        self._notify(self._edit_callbacks, row, column, raw)
