from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Dict

from .models.draft import Draft
from .models.record import DraftRecord


class DraftStore:
    """Drafts open in the service, keyed by id.

    Records are replaced whole on every update, so a reader always sees a
    complete draft.
    """

    def __init__(self) -> None:
        self._drafts: Dict[str, DraftRecord] = {}
        self._lock = threading.Lock()

    def create(self, draft: Draft) -> DraftRecord:
        with self._lock:
            draft_id = self._generate_id()
            record = DraftRecord(id=draft_id, draft=draft)
            self._drafts[draft_id] = record
            return record

    def get(self, draft_id: str) -> DraftRecord | None:
        with self._lock:
            return self._drafts.get(draft_id)

    def replace(self, draft_id: str, draft: Draft) -> DraftRecord:
        with self._lock:
            record = self._drafts[draft_id]
            if draft is record.draft:
                return record
            record = record.model_copy(
                update={
                    "draft": draft,
                    "revision": record.revision + 1,
                    "updated_at": datetime.now(timezone.utc),
                }
            )
            self._drafts[draft_id] = record
            return record

    def _generate_id(self) -> str:
        ts = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
        suffix = uuid.uuid4().hex[:6]
        return f"draft_{ts}_{suffix}"


__all__ = ["DraftStore"]
