"""Edits to the threading, tieup and treadling of a draft.

Two kinds of entry point are offered:

* ``set_threading``, ``set_treadling``, ``set_tieup`` and ``apply_edit`` take
  domain numbers, 1-indexed exactly as stored in the WIF sections.
* ``toggle_cell`` takes a 0-indexed visual ``(row, column)`` on a grid, in
  render order, and converts it through :mod:`warpdrive_weaver.mapper`.

Callers must not convert coordinates themselves before calling
``toggle_cell``, and must not pass visual coordinates to the ``set_*``
functions.

Every function returns a new ``Draft``; the input draft and its sections are
left untouched, and sections that were not edited are shared with the result.
An edit that changes nothing returns the input draft itself.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

from .dimensions import (
    DimensionPolicy,
    DraftDimensions,
    as_count,
    parse_key,
    resolve_dimensions,
)
from .errors import OutOfRangeError, ReadOnlyGridError
from .mapper import GridCell, GridKind, to_domain
from .models.draft import THREADING, TIEUP, TREADLING, Draft
from .models.edits import DraftEdit, ThreadingEdit, TieupEdit, TreadlingEdit
from .patterns import read_threading, read_tieup, read_treadling

logger = logging.getLogger(__name__)


def _check(name: str, value: Any, upper: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= upper:
        raise OutOfRangeError(name, value, upper)
    return value


def _dimensions(
    draft: Draft, dimensions: DraftDimensions | None, policy: DimensionPolicy
) -> DraftDimensions:
    if dimensions is not None:
        return dimensions
    return resolve_dimensions(draft, policy=policy)


def _matching_keys(section: Mapping[str, Any], number: int) -> list[str]:
    """Every key of ``section`` that reads as ``number``, e.g. both "1" and "01"."""
    return [key for key in section if parse_key(key) == number]


def _set_partial(draft: Draft, section_name: str, key: int, value: int | None) -> Draft:
    section = draft.section(section_name)
    name = str(key)
    matches = _matching_keys(section, key)
    if value is None:
        if not matches:
            return draft
        updated = {k: v for k, v in section.items() if k not in matches}
    else:
        current = section.get(name)
        if matches == [name] and current == value and not isinstance(current, bool):
            return draft
        updated = {k: v for k, v in section.items() if k == name or k not in matches}
        updated[name] = value
    return draft.with_section(section_name, updated)


def set_threading(
    draft: Draft,
    thread: int,
    shaft: int | None,
    *,
    dimensions: DraftDimensions | None = None,
    policy: DimensionPolicy = DimensionPolicy.infer,
) -> Draft:
    """Pass ``thread`` through ``shaft``, replacing any earlier shaft; None unthreads it."""
    dims = _dimensions(draft, dimensions, policy)
    _check("thread", thread, dims.warp_threads)
    if shaft is not None:
        _check("shaft", shaft, dims.shafts)
    result = _set_partial(draft, THREADING, thread, shaft)
    logger.debug(
        f"Set threading for thread {thread} to shaft {shaft}",
        extra={"warp_thread": thread, "shaft": shaft, "changed": result is not draft},
    )
    return result


def set_treadling(
    draft: Draft,
    pick: int,
    treadle: int | None,
    *,
    dimensions: DraftDimensions | None = None,
    policy: DimensionPolicy = DimensionPolicy.infer,
) -> Draft:
    """Weave ``pick`` with ``treadle``, replacing any earlier treadle; None clears it."""
    dims = _dimensions(draft, dimensions, policy)
    _check("pick", pick, dims.weft_threads)
    if treadle is not None:
        _check("treadle", treadle, dims.treadles)
    result = _set_partial(draft, TREADLING, pick, treadle)
    logger.debug(
        f"Set treadling for pick {pick} to treadle {treadle}",
        extra={"pick": pick, "treadle": treadle, "changed": result is not draft},
    )
    return result


def set_tieup(
    draft: Draft,
    treadle: int,
    shaft: int,
    selected: bool,
    *,
    dimensions: DraftDimensions | None = None,
    policy: DimensionPolicy = DimensionPolicy.infer,
) -> Draft:
    """Tie ``shaft`` to ``treadle`` when ``selected``, otherwise untie it."""
    dims = _dimensions(draft, dimensions, policy)
    _check("treadle", treadle, dims.treadles)
    _check("shaft", shaft, dims.shafts)

    section = draft.section(TIEUP)
    name = str(treadle)
    matches = _matching_keys(section, treadle)
    shafts: set[int] = set()
    for key in matches:
        current = section[key]
        values = current if isinstance(current, list) else [current]
        shafts.update(n for n in (as_count(value) for value in values) if n is not None)

    if (shaft in shafts) == selected and matches in ([], [name]):
        result = draft
    else:
        shafts = shafts | {shaft} if selected else shafts - {shaft}
        updated = {k: v for k, v in section.items() if k == name or k not in matches}
        updated[name] = sorted(shafts)
        result = draft.with_section(TIEUP, updated)

    action = "Tied" if selected else "Untied"
    logger.debug(
        f"{action} shaft {shaft} on treadle {treadle}",
        extra={"treadle": treadle, "shaft": shaft, "changed": result is not draft},
    )
    return result


def apply_edit(
    draft: Draft,
    edit: DraftEdit,
    *,
    dimensions: DraftDimensions | None = None,
    policy: DimensionPolicy = DimensionPolicy.infer,
) -> Draft:
    if isinstance(edit, ThreadingEdit):
        return set_threading(draft, edit.thread, edit.shaft, dimensions=dimensions, policy=policy)
    if isinstance(edit, TreadlingEdit):
        return set_treadling(draft, edit.pick, edit.treadle, dimensions=dimensions, policy=policy)
    if isinstance(edit, TieupEdit):
        return set_tieup(
            draft, edit.treadle, edit.shaft, edit.selected, dimensions=dimensions, policy=policy
        )
    raise TypeError(f"Unsupported edit: {edit!r}")


def edit_for_cell(
    draft: Draft,
    kind: GridKind,
    row: int,
    column: int,
    dimensions: DraftDimensions,
) -> DraftEdit | None:
    """The edit a click on visual cell ``(row, column)`` of ``kind`` stands for.

    Clicking a filled threading or treadling cell clears it and clicking an
    empty one fills it; clicking a tieup cell flips it. Returns None for a
    cell outside the grid.
    """
    if kind is GridKind.drawdown:
        raise ReadOnlyGridError("the drawdown is derived from the other grids and cannot be edited")
    domain = to_domain(kind, GridCell(row, column), dimensions)
    if domain is None:
        return None

    if kind is GridKind.threading:
        shaft, thread = domain
        filled = read_threading(draft, dimensions).get(thread) == shaft
        return ThreadingEdit(thread=thread, shaft=None if filled else shaft)
    if kind is GridKind.tieup:
        shaft, treadle = domain
        tied = shaft in read_tieup(draft, dimensions).get(treadle, frozenset())
        return TieupEdit(treadle=treadle, shaft=shaft, selected=not tied)
    pick, treadle = domain
    filled = read_treadling(draft, dimensions).get(pick) == treadle
    return TreadlingEdit(pick=pick, treadle=None if filled else treadle)


def toggle_cell(
    draft: Draft,
    kind: GridKind,
    row: int,
    column: int,
    *,
    dimensions: DraftDimensions | None = None,
    policy: DimensionPolicy = DimensionPolicy.infer,
) -> tuple[Draft, DraftEdit | None]:
    """Apply a click on visual cell ``(row, column)``; returns the new draft and the edit made."""
    dims = _dimensions(draft, dimensions, policy)
    edit = edit_for_cell(draft, kind, row, column, dims)
    if edit is None:
        logger.debug(
            f"Ignoring click outside the {kind.value} grid",
            extra={"grid": kind.value, "row": row, "column": column},
        )
        return draft, None
    return apply_edit(draft, edit, dimensions=dims), edit


__all__ = [
    "set_threading",
    "set_treadling",
    "set_tieup",
    "apply_edit",
    "edit_for_cell",
    "toggle_cell",
]
