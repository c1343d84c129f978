"""Error taxonomy for the table model."""

from __future__ import annotations


class TableModelError(Exception):
    """Base class for errors raised by the table model."""


class InvalidSelectionArgument(TableModelError, TypeError):
    """Raised when a value cannot be interpreted as a selection.

    Accepted inputs are selections, a single ``(row, column)`` pair, or a
    sequence of such pairs.
    """


class MissingCell(TableModelError, LookupError):
    """Raised when writing to a coordinate the host has no cell for.

    Reads never raise this: a missing cell reads as ``None`` and is skipped
    when a selection is aggregated.
    """

    def __init__(self, row: int, column: int) -> None:
        super().__init__(f"No cell at row {row}, column {column}")
        self.row = row
        self.column = column


# Cyclic bindings are not detected. A formula graph that feeds back into
# itself recurses until the interpreter gives up; keeping the graph acyclic
# is the caller's obligation.
CyclicBindingOverflow = RecursionError
