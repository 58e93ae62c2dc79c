import json
from pathlib import Path

import pytest

from warpdrive_weaver.ingest import ingest

FIXTURES = Path(__file__).resolve().parent.parent / "data" / "drafts"


def load_payload(name: str) -> dict:
    return json.loads((FIXTURES / f"{name}.json").read_text(encoding="utf-8"))


@pytest.fixture
def twill_payload() -> dict:
    return load_payload("twill")


@pytest.fixture
def twill_draft(twill_payload):
    return ingest(twill_payload)
