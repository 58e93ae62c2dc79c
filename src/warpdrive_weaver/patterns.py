from __future__ import annotations

from typing import Any, Mapping

from .dimensions import DraftDimensions, as_count, parse_key
from .models.draft import THREADING, TIEUP, TREADLING, Draft


def _in_range(number: int | None, upper: int) -> bool:
    return number is not None and number <= upper


def _read_partial_function(
    section: Mapping[str, Any], key_upper: int, value_upper: int
) -> dict[int, int]:
    result: dict[int, int] = {}
    for key, value in section.items():
        number = parse_key(key)
        target = as_count(value)
        if _in_range(number, key_upper) and _in_range(target, value_upper):
            result[number] = target
    return result


def read_threading(draft: Draft, dimensions: DraftDimensions) -> dict[int, int]:
    """Thread number -> shaft number, limited to the draft's extents."""
    return _read_partial_function(
        draft.section(THREADING), dimensions.warp_threads, dimensions.shafts
    )


def read_treadling(draft: Draft, dimensions: DraftDimensions) -> dict[int, int]:
    """Pick number -> treadle number, limited to the draft's extents."""
    return _read_partial_function(
        draft.section(TREADLING), dimensions.weft_threads, dimensions.treadles
    )


def read_tieup(draft: Draft, dimensions: DraftDimensions) -> dict[int, frozenset[int]]:
    """Treadle number -> shafts it lifts. Treadles tied to nothing are omitted."""
    result: dict[int, frozenset[int]] = {}
    for key, value in draft.section(TIEUP).items():
        treadle = parse_key(key)
        if not _in_range(treadle, dimensions.treadles):
            continue
        values = value if isinstance(value, list) else [value]
        shafts = frozenset(
            shaft
            for shaft in (as_count(item) for item in values)
            if _in_range(shaft, dimensions.shafts)
        )
        if shafts:
            result[treadle] = shafts
    return result


__all__ = ["read_threading", "read_treadling", "read_tieup"]
