"""Placement of draft data on the four grids of the designer.

Every grid is addressed two ways:

* visual coordinates: 0-indexed ``(row, column)`` in render order, row 0 at
  the top and column 0 at the left;
* domain coordinates: the 1-indexed numbers stored in the WIF sections, as a
  ``(row number, column number)`` pair whose meaning depends on the grid:

  ============  ==============  ==================
  grid          row number      column number
  ============  ==============  ==================
  threading     shaft           warp thread
  tieup         shaft           treadle
  treadling     weft pick       treadle
  drawdown      weft pick       warp thread
  ============  ==============  ==================

Shafts are drawn highest at the top in both the threading and tieup grids,
and warp threads are numbered from the right so that thread 1 sits in the
rightmost column, directly above the same column of the drawdown.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from .dimensions import DraftDimensions
from .drawdown import compute_drawdown
from .errors import OutOfRangeError
from .models.draft import Draft
from .patterns import read_threading, read_tieup, read_treadling

MIN_CELL_SIZE = 10
MAX_CELL_SIZE = 30
DEFAULT_CELL_SIZE = 15


class GridKind(str, Enum):
    threading = "threading"
    tieup = "tieup"
    treadling = "treadling"
    drawdown = "drawdown"


class AxisOrder(str, Enum):
    ascending = "ascending"
    descending = "descending"


class GridCell(NamedTuple):
    row: int
    column: int


@dataclass(frozen=True)
class GridLayout:
    rows: str
    columns: str
    row_order: AxisOrder
    column_order: AxisOrder

    def shape(self, dimensions: DraftDimensions) -> tuple[int, int]:
        return getattr(dimensions, self.rows), getattr(dimensions, self.columns)


GRID_LAYOUTS: dict[GridKind, GridLayout] = {
    GridKind.threading: GridLayout(
        rows="shafts",
        columns="warp_threads",
        row_order=AxisOrder.descending,
        column_order=AxisOrder.descending,
    ),
    GridKind.tieup: GridLayout(
        rows="shafts",
        columns="treadles",
        row_order=AxisOrder.descending,
        column_order=AxisOrder.ascending,
    ),
    GridKind.treadling: GridLayout(
        rows="weft_threads",
        columns="treadles",
        row_order=AxisOrder.ascending,
        column_order=AxisOrder.ascending,
    ),
    GridKind.drawdown: GridLayout(
        rows="weft_threads",
        columns="warp_threads",
        row_order=AxisOrder.ascending,
        column_order=AxisOrder.descending,
    ),
}


def _domain_index(visual: int, size: int, order: AxisOrder) -> int | None:
    if not 0 <= visual < size:
        return None
    if order is AxisOrder.ascending:
        return visual + 1
    return size - visual


def _visual_index(domain: int, size: int, order: AxisOrder) -> int | None:
    if not 1 <= domain <= size:
        return None
    if order is AxisOrder.ascending:
        return domain - 1
    return size - domain


def grid_shape(kind: GridKind, dimensions: DraftDimensions) -> tuple[int, int]:
    """Number of ``(rows, columns)`` drawn for ``kind``."""
    return GRID_LAYOUTS[kind].shape(dimensions)


def to_domain(kind: GridKind, cell: GridCell, dimensions: DraftDimensions) -> GridCell | None:
    """Visual cell -> domain numbers, or None when the cell is off the grid."""
    layout = GRID_LAYOUTS[kind]
    rows, columns = layout.shape(dimensions)
    row = _domain_index(cell.row, rows, layout.row_order)
    column = _domain_index(cell.column, columns, layout.column_order)
    if row is None or column is None:
        return None
    return GridCell(row, column)


def to_visual(kind: GridKind, cell: GridCell, dimensions: DraftDimensions) -> GridCell | None:
    """Domain numbers -> visual cell, or None when they fall outside the draft."""
    layout = GRID_LAYOUTS[kind]
    rows, columns = layout.shape(dimensions)
    row = _visual_index(cell.row, rows, layout.row_order)
    column = _visual_index(cell.column, columns, layout.column_order)
    if row is None or column is None:
        return None
    return GridCell(row, column)


def check_cell_size(cell_size: int) -> int:
    if not MIN_CELL_SIZE <= cell_size <= MAX_CELL_SIZE:
        raise OutOfRangeError("cell size", cell_size, MAX_CELL_SIZE, lower=MIN_CELL_SIZE)
    return cell_size


def hit_test(
    kind: GridKind,
    x: float,
    y: float,
    dimensions: DraftDimensions,
    *,
    cell_size: int = DEFAULT_CELL_SIZE,
) -> GridCell | None:
    """Visual cell under a pointer at ``(x, y)`` pixels from the grid's top-left corner."""
    check_cell_size(cell_size)
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    cell = GridCell(math.floor(y / cell_size), math.floor(x / cell_size))
    rows, columns = grid_shape(kind, dimensions)
    if not (0 <= cell.row < rows and 0 <= cell.column < columns):
        return None
    return cell


def domain_cells(draft: Draft, kind: GridKind, dimensions: DraftDimensions) -> frozenset[GridCell]:
    """Filled cells of ``kind`` in domain numbers."""
    if kind is GridKind.threading:
        return frozenset(
            GridCell(shaft, thread) for thread, shaft in read_threading(draft, dimensions).items()
        )
    if kind is GridKind.tieup:
        return frozenset(
            GridCell(shaft, treadle)
            for treadle, shafts in read_tieup(draft, dimensions).items()
            for shaft in shafts
        )
    if kind is GridKind.treadling:
        return frozenset(
            GridCell(pick, treadle) for pick, treadle in read_treadling(draft, dimensions).items()
        )
    return frozenset(
        GridCell(pick, thread) for pick, thread in compute_drawdown(draft, dimensions).cells
    )


def grid_cells(draft: Draft, kind: GridKind, dimensions: DraftDimensions) -> frozenset[GridCell]:
    """Filled cells of ``kind`` in visual coordinates."""
    cells = (to_visual(kind, cell, dimensions) for cell in domain_cells(draft, kind, dimensions))
    return frozenset(cell for cell in cells if cell is not None)


def grid_matrix(draft: Draft, kind: GridKind, dimensions: DraftDimensions) -> list[list[bool]]:
    """Row-major fill state of ``kind`` in render order."""
    rows, columns = grid_shape(kind, dimensions)
    filled = grid_cells(draft, kind, dimensions)
    return [[GridCell(row, column) in filled for column in range(columns)] for row in range(rows)]


__all__ = [
    "GridKind",
    "GridCell",
    "GridLayout",
    "AxisOrder",
    "GRID_LAYOUTS",
    "MIN_CELL_SIZE",
    "MAX_CELL_SIZE",
    "DEFAULT_CELL_SIZE",
    "grid_shape",
    "to_domain",
    "to_visual",
    "check_cell_size",
    "hit_test",
    "domain_cells",
    "grid_cells",
    "grid_matrix",
]
