"""tablemodel - reactive grid of literal and formula cells.

Usage::

    from tablemodel import MemoryHost, TableModel, select, sum_

    model = TableModel(MemoryHost(rows=2, columns=3))
    model.set(0, 0, 2)
    model.set(0, 1, 3)
    model.set(0, 2, sum_(select.range(0, 0, 0, 1)))
    model.get(0, 2)      # 5.0
    model.set(0, 0, 10)
    model.get(0, 2)      # 13.0

Cells are addressed by 0-based ``(row, column)``. Where the cells live is
up to the host adapter: :class:`MemoryHost` for an in-memory grid,
:class:`WorksheetHost` for an openpyxl worksheet, or any object
implementing :class:`HostAdapter`.
"""

from tablemodel._bus import ChangeBus
from tablemodel._errors import (
    CyclicBindingOverflow,
    InvalidSelectionArgument,
    MissingCell,
    TableModelError,
)
from tablemodel._hosts import MemoryHost, WorksheetHost
from tablemodel._model import TableModel
from tablemodel._store import ValueStore, chain_parsers, parse_number, raw_value, strip_text
from tablemodel.calc import (
    Binding,
    Coordinate,
    Expression,
    ExpressionLibrary,
    HostAdapter,
    ModelOptions,
    Selection,
    as_number,
    as_selection,
    average,
    concat,
    count,
    count_if,
    map_values,
    maximum,
    minimum,
    product,
    select,
    sum_,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Binding",
    "ChangeBus",
    "Coordinate",
    "CyclicBindingOverflow",
    "Expression",
    "ExpressionLibrary",
    "HostAdapter",
    "InvalidSelectionArgument",
    "MemoryHost",
    "MissingCell",
    "ModelOptions",
    "Selection",
    "TableModel",
    "TableModelError",
    "ValueStore",
    "WorksheetHost",
    "as_number",
    "as_selection",
    "average",
    "chain_parsers",
    "concat",
    "count",
    "count_if",
    "map_values",
    "maximum",
    "minimum",
    "parse_number",
    "product",
    "raw_value",
    "select",
    "strip_text",
    "sum_",
]
