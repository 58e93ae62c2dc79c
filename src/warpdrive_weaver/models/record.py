from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from .draft import Draft


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DraftRecord(BaseModel):
    id: str
    draft: Draft
    revision: int = 1
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


__all__ = ["DraftRecord"]
