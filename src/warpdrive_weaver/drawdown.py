from __future__ import annotations

import logging
from typing import Iterable

from pydantic import BaseModel, ConfigDict

from .dimensions import DimensionPolicy, DraftDimensions, resolve_dimensions
from .models.draft import Draft
from .models.edits import DraftEdit, ThreadingEdit, TieupEdit, TreadlingEdit
from .patterns import read_threading, read_tieup, read_treadling

logger = logging.getLogger(__name__)


class Drawdown(BaseModel):
    """Interlacement of a draft: the ``(pick, thread)`` pairs where the warp is up."""

    model_config = ConfigDict(frozen=True)

    dimensions: DraftDimensions
    cells: frozenset[tuple[int, int]]

    def is_filled(self, pick: int, thread: int) -> bool:
        return (pick, thread) in self.cells

    def rows(self) -> list[list[bool]]:
        """Pick-major matrix, thread 1 first in each row."""
        return [
            [(pick, thread) in self.cells for thread in range(1, self.dimensions.warp_threads + 1)]
            for pick in range(1, self.dimensions.weft_threads + 1)
        ]


def _row_cells(
    pick: int,
    treadling: dict[int, int],
    tieup: dict[int, frozenset[int]],
    threading: dict[int, int],
) -> Iterable[tuple[int, int]]:
    treadle = treadling.get(pick)
    if treadle is None:
        return
    engaged = tieup.get(treadle)
    if not engaged:
        return
    for thread, shaft in threading.items():
        if shaft in engaged:
            yield pick, thread


def _column_cells(
    thread: int,
    treadling: dict[int, int],
    tieup: dict[int, frozenset[int]],
    threading: dict[int, int],
) -> Iterable[tuple[int, int]]:
    shaft = threading.get(thread)
    if shaft is None:
        return
    for pick, treadle in treadling.items():
        if shaft in tieup.get(treadle, ()):
            yield pick, thread


def compute_drawdown(
    draft: Draft,
    dimensions: DraftDimensions | None = None,
    *,
    policy: DimensionPolicy = DimensionPolicy.infer,
) -> Drawdown:
    if dimensions is None:
        dimensions = resolve_dimensions(draft, policy=policy)
    threading = read_threading(draft, dimensions)
    tieup = read_tieup(draft, dimensions)
    treadling = read_treadling(draft, dimensions)

    cells: set[tuple[int, int]] = set()
    for pick in range(1, dimensions.weft_threads + 1):
        cells.update(_row_cells(pick, treadling, tieup, threading))
    return Drawdown(dimensions=dimensions, cells=frozenset(cells))


def update_drawdown(
    previous: Drawdown,
    draft: Draft,
    edit: DraftEdit,
    dimensions: DraftDimensions | None = None,
    *,
    policy: DimensionPolicy = DimensionPolicy.infer,
) -> Drawdown:
    """Recompute only the part of ``previous`` that ``edit`` can have changed.

    ``draft`` is the draft after the edit was applied. The result is always
    equal to ``compute_drawdown(draft, dimensions)``.
    """
    if dimensions is None:
        dimensions = resolve_dimensions(draft, policy=policy)
    if dimensions != previous.dimensions:
        logger.debug("Dimensions changed; recomputing full drawdown")
        return compute_drawdown(draft, dimensions)

    threading = read_threading(draft, dimensions)
    tieup = read_tieup(draft, dimensions)
    treadling = read_treadling(draft, dimensions)

    if isinstance(edit, ThreadingEdit):
        cells = {cell for cell in previous.cells if cell[1] != edit.thread}
        cells.update(_column_cells(edit.thread, treadling, tieup, threading))
        return Drawdown(dimensions=dimensions, cells=frozenset(cells))

    if isinstance(edit, TreadlingEdit):
        picks = {edit.pick}
    elif isinstance(edit, TieupEdit):
        picks = {pick for pick, treadle in treadling.items() if treadle == edit.treadle}
    else:
        raise TypeError(f"Unsupported edit: {edit!r}")

    cells = {cell for cell in previous.cells if cell[0] not in picks}
    for pick in picks:
        cells.update(_row_cells(pick, treadling, tieup, threading))
    return Drawdown(dimensions=dimensions, cells=frozenset(cells))


__all__ = ["Drawdown", "compute_drawdown", "update_drawdown"]
