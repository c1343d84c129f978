"""Value store: cell values fronting a host adapter, with an optional cache."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from tablemodel._errors import MissingCell
from tablemodel.calc._protocol import CellHandle, ValueParser
from tablemodel.calc._selection import Coordinate

if TYPE_CHECKING:
    from tablemodel._bus import ChangeBus
    from tablemodel.calc._protocol import HostAdapter

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Value parsers: (raw, handle) -> scalar
# ---------------------------------------------------------------------------

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")


def raw_value(raw: Any, handle: CellHandle) -> Any:
    """Identity parser: the raw host value is the cell value."""
    return raw


def strip_text(raw: Any, handle: CellHandle) -> Any:
    """Strip surrounding whitespace from text; other values pass through."""
    if isinstance(raw, str):
        return raw.strip()
    return raw


def parse_number(raw: Any, handle: CellHandle) -> Any:
    """Turn numeric text into ``int`` or ``float``; leave anything else alone."""
    if not isinstance(raw, str):
        return raw
    text = raw.strip()
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        return float(text)
    return raw


def chain_parsers(*parsers: ValueParser) -> ValueParser:
    """Compose parsers right to left: ``chain_parsers(f, g)`` is ``f(g(raw))``."""
    if not parsers:
        return raw_value

    def chained(raw: Any, handle: CellHandle) -> Any:
        value = raw
        for parser in reversed(parsers):
            value = parser(value, handle)
        return value

    return chained


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class ValueStore:
    """Reads and writes cell values through a host adapter.

    Resolved values are cached in a sparse ``row -> column -> value``
    mapping when caching is enabled. Entries change only through
    :meth:`set`, :meth:`accept_external` and :meth:`invalidate`.
    """

    __slots__ = ("_host", "_bus", "_parser", "_caching", "_cache")

    def __init__(
        self,
        host: HostAdapter,
        bus: ChangeBus,
        *,
        caching_enabled: bool = True,
        value_parser: ValueParser | None = None,
    ) -> None:
        self._host = host
        self._bus = bus
        self._parser: ValueParser = value_parser or raw_value
        self._caching = caching_enabled
        self._cache: dict[int, dict[int, Any]] = {}

    @property
    def caching_enabled(self) -> bool:
        return self._caching

    def get(self, coord: Coordinate) -> Any:
        """Current value at *coord*, or ``None`` if the host has no cell there."""
        row, column = coord
        if self._caching:
            cached_row = self._cache.get(row)
            if cached_row is not None and column in cached_row:
                return cached_row[column]

        handle = self._host.find_cell(row, column)
        if handle is None:
            return None
        value = self._parser(self._host.read_raw(handle), handle)
        if self._caching:
            self._cache.setdefault(row, {})[column] = value
        return value

    def set(self, coord: Coordinate, value: Any) -> bool:
        """Write *value* at *coord* and announce the change.

        *value* is compared, cached and announced as the value parser reads
        it, so a cell holds the same value whether or not caching is on.
        Returns False, without writing or emitting, when the current value
        already equals the parsed *value*. Raises :class:`MissingCell` when
        the host has no cell at *coord*.
        """
        coord = Coordinate(*coord)
        old = self.get(coord)
        handle = self._host.find_cell(coord.row, coord.column)
        if handle is None:
            if value is None:
                return False
            raise MissingCell(coord.row, coord.column)
        if _same_value(old, self._parser(value, handle)):
            return False

        self._host.write_raw(handle, value)
        new = self._parser(self._host.read_raw(handle), handle)
        self._remember(coord, new)
        logger.debug("Cell %s changed from %r to %r", coord, old, new)
        self._bus.emit(coord, new)
        return True

    def accept_external(self, coord: Coordinate, raw: Any) -> bool:
        """Take in an edit the host already applied, then announce it.

        With caching enabled an edit that leaves the parsed value unchanged
        is ignored. Without a cache there is nothing to compare against, so
        every edit is announced.
        """
        coord = Coordinate(*coord)
        handle = self._host.find_cell(coord.row, coord.column)
        if handle is None:
            raise MissingCell(coord.row, coord.column)
        value = self._parser(raw, handle)
        if self._caching:
            cached_row = self._cache.get(coord.row)
            if cached_row is not None and coord.column in cached_row:
                if _same_value(cached_row[coord.column], value):
                    return False
        self._remember(coord, value)
        logger.debug("External edit of %s to %r", coord, value)
        self._bus.emit(coord, value)
        return True

    def invalidate(self, coord: Coordinate | None = None) -> None:
        """Forget the cached value at *coord*, or every cached value."""
        if coord is None:
            self._cache.clear()
            return
        row, column = coord
        cached_row = self._cache.get(row)
        if cached_row is not None:
            cached_row.pop(column, None)
            if not cached_row:
                del self._cache[row]

    def cached(self, coord: Coordinate) -> bool:
        """True if a value for *coord* is currently cached."""
        row, column = coord
        return column in self._cache.get(row, {})

    def _remember(self, coord: Coordinate, value: Any) -> None:
        if self._caching:
            self._cache.setdefault(coord.row, {})[coord.column] = value


def _same_value(a: Any, b: Any) -> bool:
    """Strict equality: ``1`` and ``"1"`` differ, ``1`` and ``1.0`` do not."""
    if a is None or b is None:
        return a is None and b is None
    if isinstance(a, str) != isinstance(b, str):
        return False
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b
