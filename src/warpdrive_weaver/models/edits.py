from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class ThreadingEdit(BaseModel):
    """Assign a warp thread to a shaft, or unassign it when ``shaft`` is None."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["threading"] = "threading"
    thread: int
    shaft: int | None = None


class TreadlingEdit(BaseModel):
    """Assign a weft pick to a treadle, or unassign it when ``treadle`` is None."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["treadling"] = "treadling"
    pick: int
    treadle: int | None = None


class TieupEdit(BaseModel):
    """Tie a shaft to a treadle (``selected``) or untie it."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["tieup"] = "tieup"
    treadle: int
    shaft: int
    selected: bool


DraftEdit = Union[ThreadingEdit, TreadlingEdit, TieupEdit]


class EditEnvelope(BaseModel):
    edit: DraftEdit = Field(discriminator="kind")


__all__ = ["ThreadingEdit", "TreadlingEdit", "TieupEdit", "DraftEdit", "EditEnvelope"]
