"""
Rows and cells, as the Coda Api wants them.
-------------------------------------------

A row is a mapping like::

    {'cells': [{'column': 'c-tuVwxYz', 'value': '$12.34'}, ...]}

Codarows accepts plain dicts of this shape, or the ``Row`` and ``Cell``
classes below, which check the shape as soon as they are created.
Validation is purely structural: unknown column ids or values of the
wrong type for a column are only reported by the Api itself.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from codarows.exceptions import RowValidationError

REQUIRED_CELL_KEYS = ('column', 'value')


@dataclass
class RowCheck:
    """The outcome of ``check_row``: ``ok`` and a list of ``violations``."""
    ok: bool
    violations: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.ok


def _is_sequence(obj) -> bool:
    # a string is a sequence too, but certainly not a list of cells
    return (isinstance(obj, Sequence)
            and not isinstance(obj, (str, bytes, bytearray)))

def check_cell(cell: Any, strict: bool = False) -> list[str]:
    """Return a list of violations for a single cell (empty if ok)."""
    if isinstance(cell, Cell):
        cell = cell.as_dict()
    if not isinstance(cell, Mapping):
        return [f'cell is not a mapping: {cell!r}']
    violations = [f'cell has no {key!r} key: {cell!r}'
                  for key in REQUIRED_CELL_KEYS if key not in cell]
    if strict:
        violations += [f'cell {key!r} is not a string: {cell!r}'
                       for key in REQUIRED_CELL_KEYS
                       if key in cell and not isinstance(cell[key], str)]
    return violations

def check_row(row: Any, strict: bool = False) -> RowCheck:
    """Check the shape of a row, without raising.

    A valid row has a ``cells`` key holding a sequence, and every cell
    has both a ``column`` and a ``value`` key. With ``strict=True``,
    both must be strings too.
    """
    if isinstance(row, Row):
        row = row.as_dict()
    if not isinstance(row, Mapping):
        return RowCheck(False, [f'row is not a mapping: {row!r}'])
    if 'cells' not in row:
        return RowCheck(False, ["row has no 'cells' key"])
    cells = row['cells']
    if not _is_sequence(cells):
        return RowCheck(False, [f"row 'cells' is not a sequence: {cells!r}"])
    violations = []
    for cell in cells:
        violations.extend(check_cell(cell, strict))
    return RowCheck(not violations, violations)

def is_valid_row(row: Any, strict: bool = False) -> bool:
    """``True`` if ``row`` has the shape of a Coda row."""
    return check_row(row, strict).ok

def row2dict(row: Row|Mapping) -> dict:
    """Return the wire shape of a ``Row`` or of a row-like mapping."""
    if isinstance(row, Row):
        return row.as_dict()
    return {**row, 'cells': [c.as_dict() if isinstance(c, Cell) else c
                             for c in row['cells']]}


@dataclass(frozen=True)
class Cell:
    """A column/value pair. ``column`` is a column id (or name)."""
    column: str
    value: Any

    def __post_init__(self):
        if not isinstance(self.column, str):
            raise RowValidationError(self, ['cell column must be a string'])

    def as_dict(self) -> dict:
        return {'column': self.column, 'value': self.value}


@dataclass(frozen=True)
class Row:
    """An ordered collection of cells.

    Build it from ``Cell`` objects, or use ``Row.from_dict``/``Row.from_pairs``::

        Row.from_pairs([('c-tuVwxYz', '$12.34'), ('c-bCdeFgh', 42)])
    """
    cells: tuple[Cell, ...]

    def __post_init__(self):
        if not _is_sequence(self.cells):
            raise RowValidationError(self, ["'cells' is not a sequence"])
        # lists are welcome, but we store a tuple
        object.__setattr__(self, 'cells', tuple(self.cells))
        bad = [c for c in self.cells if not isinstance(c, Cell)]
        if bad:
            raise RowValidationError(self, [f'not a Cell: {c!r}' for c in bad])

    @classmethod
    def from_dict(cls, row: Mapping, strict: bool = False) -> Row:
        """Build a ``Row`` from its wire shape, checking it first."""
        check = check_row(row, strict)
        if not check:
            raise RowValidationError(row, check.violations)
        cells = row2dict(row)['cells'] # some cells may be Cell objects already
        return cls(tuple(Cell(c['column'], c['value']) for c in cells))

    @classmethod
    def from_pairs(cls, pairs) -> Row:
        return cls(tuple(Cell(col, val) for col, val in pairs))

    def as_dict(self) -> dict:
        return {'cells': [c.as_dict() for c in self.cells]}
