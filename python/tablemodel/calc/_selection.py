"""Cell coordinates and the selection algebra.

A selection is an immutable set of coordinates that knows whether it
includes a given cell, can enumerate its cells, and knows whether it is
empty. Selections compose through :func:`union`; composing never mutates the
operands.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from numbers import Integral
from types import SimpleNamespace
from typing import Any, NamedTuple

from openpyxl.utils.cell import range_boundaries

from tablemodel._errors import InvalidSelectionArgument


class Coordinate(NamedTuple):
    """Address of a single cell, 0-based."""

    row: int
    column: int


# ---------------------------------------------------------------------------
# Selection variants
# ---------------------------------------------------------------------------


class Selection(ABC):
    """Base class for all selections."""

    @abstractmethod
    def includes(self, row: int, column: int) -> bool: ...

    @abstractmethod
    def all(self) -> tuple[Coordinate, ...]:
        """Every coordinate, in enumeration order."""
        ...

    @abstractmethod
    def is_empty(self) -> bool: ...

    def __contains__(self, coord: object) -> bool:
        if not _is_pair(coord):
            return False
        row, column = coord  # type: ignore[misc]
        return self.includes(row, column)

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self.all())


@dataclass(frozen=True)
class EmptySelection(Selection):
    """Selection that includes nothing."""

    def includes(self, row: int, column: int) -> bool:
        return False

    def all(self) -> tuple[Coordinate, ...]:
        return ()

    def is_empty(self) -> bool:
        return True


@dataclass(frozen=True)
class PointSelection(Selection):
    """Selection of exactly one cell."""

    coord: Coordinate

    def includes(self, row: int, column: int) -> bool:
        return self.coord.row == row and self.coord.column == column

    def all(self) -> tuple[Coordinate, ...]:
        return (self.coord,)

    def is_empty(self) -> bool:
        return False


@dataclass(frozen=True)
class ListSelection(Selection):
    """Explicit ordered list of cells. Duplicates are kept."""

    coords: tuple[Coordinate, ...]

    def includes(self, row: int, column: int) -> bool:
        return any(c.row == row and c.column == column for c in self.coords)

    def all(self) -> tuple[Coordinate, ...]:
        return self.coords

    def is_empty(self) -> bool:
        return not self.coords


@dataclass(frozen=True)
class RangeSelection(Selection):
    """Rectangular area, inclusive on all four bounds.

    ``right == left`` selects a single column. The range is empty when
    ``bottom < top`` or ``right < left``.
    """

    top: int
    left: int
    bottom: int
    right: int

    def includes(self, row: int, column: int) -> bool:
        return self.top <= row <= self.bottom and self.left <= column <= self.right

    def all(self) -> tuple[Coordinate, ...]:
        return tuple(
            Coordinate(r, c)
            for r in range(self.top, self.bottom + 1)
            for c in range(self.left, self.right + 1)
        )

    def is_empty(self) -> bool:
        return self.bottom < self.top or self.right < self.left

    @property
    def shape(self) -> tuple[int, int]:
        """``(n_rows, n_columns)``, zero when empty."""
        if self.is_empty():
            return (0, 0)
        return (self.bottom - self.top + 1, self.right - self.left + 1)


@dataclass(frozen=True)
class UnionSelection(Selection):
    """Combination of non-empty selections.

    Enumeration concatenates the members in order without de-duplicating.
    """

    members: tuple[Selection, ...]

    def includes(self, row: int, column: int) -> bool:
        return any(m.includes(row, column) for m in self.members)

    def all(self) -> tuple[Coordinate, ...]:
        cells: list[Coordinate] = []
        for member in self.members:
            cells.extend(member.all())
        return tuple(cells)

    def is_empty(self) -> bool:
        return not self.members


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _is_index(value: Any) -> bool:
    """``True`` for a row or column number: a non-negative integer."""
    return isinstance(value, Integral) and not isinstance(value, bool) and value >= 0


def _is_pair(value: Any) -> bool:
    """``True`` for a ``(row, column)`` pair of valid indices."""
    return _is_sequence(value) and len(value) == 2 and all(_is_index(v) for v in value)


def _require_indices(*values: Any) -> None:
    if not all(_is_index(v) for v in values):
        raise InvalidSelectionArgument(
            f"Rows and columns must be non-negative integers, got {values!r}"
        )


def as_selection(value: Any) -> Selection:
    """Interpret *value* as a selection.

    Selections are returned as-is. A single ``(row, column)`` pair becomes a
    point; a sequence of pairs becomes a list selection. Rows and columns
    must be non-negative integers. Anything else raises
    :class:`InvalidSelectionArgument`.
    """
    if isinstance(value, Selection):
        return value
    if _is_pair(value):
        return PointSelection(Coordinate(int(value[0]), int(value[1])))
    if _is_sequence(value) and all(_is_pair(v) for v in value):
        return ListSelection(tuple(Coordinate(int(r), int(c)) for r, c in value))
    raise InvalidSelectionArgument(
        f"Cannot interpret {value!r} as a selection"
    )


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

_EMPTY = EmptySelection()


def empty() -> EmptySelection:
    return _EMPTY


def point(row: int, column: int) -> PointSelection:
    _require_indices(row, column)
    return PointSelection(Coordinate(row, column))


def range_(top: int, left: int, bottom: int, right: int) -> RangeSelection:
    """Rectangle from ``(top, left)`` to ``(bottom, right)``, inclusive."""
    _require_indices(top, left, bottom, right)
    return RangeSelection(top, left, bottom, right)


def list_(coords: Any) -> ListSelection:
    """Selection of an explicit sequence of ``(row, column)`` pairs."""
    if not _is_sequence(coords) or not all(_is_pair(c) for c in coords):
        raise InvalidSelectionArgument(
            f"Expected a sequence of (row, column) pairs, got {coords!r}"
        )
    return ListSelection(tuple(Coordinate(int(r), int(c)) for r, c in coords))


def union(*selections: Any) -> Selection:
    """Combine selections (or coordinate pairs) into one.

    A single selection is returned unchanged. Empty members are dropped; if
    nothing is left the empty selection is returned. ``union([a, b])`` is
    the same as ``union(a, b)``.
    """
    if len(selections) == 1:
        only = selections[0]
        if isinstance(only, Selection):
            return only
        if isinstance(only, list) and not _is_pair(only):
            selections = tuple(only)

    members = tuple(
        s for s in (as_selection(arg) for arg in selections) if not s.is_empty()
    )
    if not members:
        return _EMPTY
    return UnionSelection(members)


def a1(notation: str) -> PointSelection | RangeSelection:
    """Selection from spreadsheet A1 notation, e.g. ``"B2"`` or ``"A1:C3"``.

    Letters and row numbers are 1-based as in a spreadsheet; the resulting
    coordinates are 0-based.
    """
    try:
        min_col, min_row, max_col, max_row = range_boundaries(notation.strip())
    except (ValueError, TypeError, AttributeError) as exc:
        raise InvalidSelectionArgument(f"Invalid A1 notation: {notation!r}") from exc
    if None in (min_col, min_row, max_col, max_row):
        raise InvalidSelectionArgument(
            f"A1 notation must name whole cells, got {notation!r}"
        )
    if min_col == max_col and min_row == max_row:
        return point(min_row - 1, min_col - 1)
    return range_(min_row - 1, min_col - 1, max_row - 1, max_col - 1)


select = SimpleNamespace(
    empty=empty,
    point=point,
    range=range_,
    list=list_,
    union=union,
    a1=a1,
)
