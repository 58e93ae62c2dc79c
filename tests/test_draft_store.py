import pytest

from warpdrive_weaver.draft_store import DraftStore
from warpdrive_weaver.editor import set_threading
from warpdrive_weaver.ingest import create_default


def test_create_and_get(twill_draft):
    store = DraftStore()
    record = store.create(twill_draft)

    assert record.id.startswith("draft_")
    assert record.revision == 1
    assert store.get(record.id).draft is twill_draft
    assert store.get("missing") is None


def test_replace_bumps_revision_only_on_change(twill_draft):
    store = DraftStore()
    record = store.create(twill_draft)

    unchanged = store.replace(record.id, twill_draft)
    assert unchanged.revision == 1

    edited = set_threading(twill_draft, 1, 4)
    updated = store.replace(record.id, edited)
    assert updated.revision == 2
    assert updated.draft is edited
    assert updated.updated_at >= record.updated_at
    assert store.get(record.id) == updated


def test_replace_unknown_draft():
    store = DraftStore()
    with pytest.raises(KeyError):
        store.replace("missing", create_default())
