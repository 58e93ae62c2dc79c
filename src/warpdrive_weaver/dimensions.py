from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from .models.draft import THREADING, TIEUP, TREADLING, WARP, WEAVING, WEFT, Draft

logger = logging.getLogger(__name__)


class DimensionPolicy(str, Enum):
    """How counts missing from the ``weaving``/``warp``/``weft`` sections are filled in."""

    declared = "declared"
    infer = "infer"
    pattern = "pattern"


@dataclass(frozen=True)
class DimensionDefaults:
    warp_threads: int = 20
    weft_threads: int = 20
    shafts: int = 4
    treadles: int = 4


DEFAULT_DIMENSIONS = DimensionDefaults()


class DraftDimensions(BaseModel):
    model_config = ConfigDict(frozen=True)

    shafts: int = Field(ge=1)
    treadles: int = Field(ge=1)
    warp_threads: int = Field(ge=1)
    weft_threads: int = Field(ge=1)


def as_count(value: Any) -> int | None:
    """Return ``value`` as a positive integer, or None if it is not one.

    WIF producers write counts as ints; floats with no fractional part are
    tolerated, booleans are not.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float) and value.is_integer() and value > 0:
        return int(value)
    return None


def parse_key(key: Any) -> int | None:
    """Parse a pattern-section key (a decimal string) into a positive int."""
    if isinstance(key, int) and not isinstance(key, bool):
        return key if key > 0 else None
    if isinstance(key, str) and key.isdecimal():
        number = int(key)
        return number if number > 0 else None
    return None


def _max_key(section: Mapping[str, Any]) -> int | None:
    numbers = [n for n in (parse_key(k) for k in section) if n is not None]
    return max(numbers) if numbers else None


def _max_value(values: Iterable[Any]) -> int | None:
    numbers: list[int] = []
    for value in values:
        items = value if isinstance(value, list) else [value]
        numbers.extend(n for n in (as_count(item) for item in items) if n is not None)
    return max(numbers) if numbers else None


def _largest(*candidates: int | None) -> int | None:
    numbers = [c for c in candidates if c is not None]
    return max(numbers) if numbers else None


def _first(*candidates: int | None, default: int) -> int:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return default


def resolve_dimensions(
    draft: Draft,
    *,
    policy: DimensionPolicy = DimensionPolicy.infer,
    defaults: DimensionDefaults = DEFAULT_DIMENSIONS,
) -> DraftDimensions:
    """Work out the grid extents of ``draft``.

    Declared counts win under ``declared`` and ``infer``. For a missing count
    ``infer`` takes the default, or the largest number used in the pattern
    data when that is bigger. ``pattern`` lets the largest threading/treadling key override declared
    warp/weft counts, which is how older files without reliable counts were
    read.
    """
    weaving = draft.section(WEAVING)
    threading = draft.section(THREADING)
    tieup = draft.section(TIEUP)
    treadling = draft.section(TREADLING)

    declared_shafts = as_count(weaving.get("shafts"))
    declared_treadles = as_count(weaving.get("treadles"))
    declared_warp = as_count(draft.section(WARP).get("threads"))
    declared_weft = as_count(draft.section(WEFT).get("threads"))

    if policy is DimensionPolicy.declared:
        dimensions = DraftDimensions(
            shafts=_first(declared_shafts, default=defaults.shafts),
            treadles=_first(declared_treadles, default=defaults.treadles),
            warp_threads=_first(declared_warp, default=defaults.warp_threads),
            weft_threads=_first(declared_weft, default=defaults.weft_threads),
        )
    else:
        # never smaller than the defaults, so a grid cannot shrink under an edit
        shafts = _largest(
            defaults.shafts, _max_value(threading.values()), _max_value(tieup.values())
        )
        treadles = _largest(
            defaults.treadles, _max_value(treadling.values()), _max_key(tieup)
        )

        if policy is DimensionPolicy.pattern:
            warp = _first(_max_key(threading), declared_warp, default=defaults.warp_threads)
            weft = _first(_max_key(treadling), declared_weft, default=defaults.weft_threads)
        else:
            warp = _first(
                declared_warp, default=_largest(defaults.warp_threads, _max_key(threading))
            )
            weft = _first(
                declared_weft, default=_largest(defaults.weft_threads, _max_key(treadling))
            )

        dimensions = DraftDimensions(
            shafts=_first(declared_shafts, default=shafts),
            treadles=_first(declared_treadles, default=treadles),
            warp_threads=warp,
            weft_threads=weft,
        )

    logger.debug(
        "Resolved draft dimensions",
        extra={"policy": policy.value, **dimensions.model_dump()},
    )
    return dimensions


__all__ = [
    "DimensionPolicy",
    "DimensionDefaults",
    "DraftDimensions",
    "DEFAULT_DIMENSIONS",
    "resolve_dimensions",
    "as_count",
    "parse_key",
]
