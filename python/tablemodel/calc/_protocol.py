"""Host adapter protocol, model options and result dataclasses."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, fields
from typing import Any, Protocol, runtime_checkable

from tablemodel.calc._expression import Expression
from tablemodel.calc._selection import Coordinate

CellHandle = Any
ValueParser = Callable[[Any, CellHandle], Any]
EditCallback = Callable[[int, int, Any], None]


@runtime_checkable
class HostAdapter(Protocol):
    """Boundary between the model and whatever actually holds the cells."""

    def find_cell(self, row: int, column: int) -> CellHandle | None:
        """Handle for the cell at (row, column), or None if there is none."""
        ...

    def read_raw(self, handle: CellHandle) -> Any:
        """Raw content of the cell, before parsing."""
        ...

    def write_raw(self, handle: CellHandle, value: Any) -> None:
        ...

    def on_external_edit(self, callback: EditCallback) -> None:
        """Register *callback* for edits made outside the model.

        The host calls ``callback(row, column, raw)`` after the new raw value
        is already stored.
        """
        ...


@runtime_checkable
class KeystrokeSource(Protocol):
    """Optional host capability: report uncommitted edits as they are typed."""

    def on_keystroke(self, callback: EditCallback) -> None: ...


@dataclass(frozen=True)
class ModelOptions:
    """Configuration for a :class:`~tablemodel.TableModel`."""

    caching_enabled: bool = True
    value_parser: ValueParser | None = None  # None reads raw values as-is
    recalculate_on_every_keystroke: bool = False

    _ALIASES = {
        "cachingEnabled": "caching_enabled",
        "valueParser": "value_parser",
        "recalculateOnEveryKeystroke": "recalculate_on_every_keystroke",
        "recalculateOnType": "recalculate_on_every_keystroke",
    }

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> ModelOptions:
        """Build options from a mapping, accepting camelCase keys too.

        Raises ValueError for keys that are not recognised.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in options.items():
            name = cls._ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown table model option: {key!r}")
            kwargs[name] = value
        return cls(**kwargs)


@dataclass(frozen=True)
class Binding:
    """A live association of a target cell with an expression."""

    target: Coordinate
    expression: Expression
