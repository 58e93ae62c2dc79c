import json

import pytest
from fastapi.testclient import TestClient

from services.api.main import app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def draft_id(client, twill_payload) -> str:
    response = client.post("/v1/drafts", json=twill_payload)
    assert response.status_code == 201
    return response.json()["draft_id"]


def test_healthcheck(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_create_and_fetch_draft(client, draft_id, twill_payload):
    body = client.get(f"/v1/drafts/{draft_id}").json()

    assert body["revision"] == 1
    assert body["sections"] == twill_payload["sections"]
    assert body["dimensions"] == {"shafts": 4, "treadles": 4, "warp_threads": 8, "weft_threads": 8}


def test_malformed_payload_is_rejected(client):
    response = client.post("/v1/drafts", json={"sections": {}})
    assert response.status_code == 422
    assert "wif.version" in response.json()["detail"]


def test_unknown_draft(client):
    assert client.get("/v1/drafts/nope").status_code == 404


def test_new_draft_is_empty(client):
    draft_id = client.post("/v1/drafts:new").json()["draft_id"]
    body = client.get(f"/v1/drafts/{draft_id}").json()

    assert body["sections"]["contents"]["threading"] is False
    assert client.get(f"/v1/drafts/{draft_id}/drawdown").json()["cells"] == []


def test_threading_update_changes_drawdown(client, draft_id):
    response = client.put(f"/v1/drafts/{draft_id}/threading/3", json={"shaft": None})
    body = response.json()
    assert response.status_code == 200
    assert body["changed"] is True
    assert body["revision"] == 2
    assert body["edit"] == {"kind": "threading", "thread": 3, "shaft": None}

    cells = client.get(f"/v1/drafts/{draft_id}/drawdown").json()["cells"]
    assert all(thread != 3 for _, thread in cells)
    assert [2, 2] in cells


def test_no_op_update_keeps_revision(client, draft_id):
    body = client.put(f"/v1/drafts/{draft_id}/treadling/1", json={"treadle": 1}).json()
    assert body["changed"] is False
    assert body["revision"] == 1


def test_tieup_update(client, draft_id):
    body = client.put(f"/v1/drafts/{draft_id}/tieup/1/3", json={"selected": True}).json()
    assert body["changed"] is True

    sections = client.get(f"/v1/drafts/{draft_id}").json()["sections"]
    assert sections["tieup"]["1"] == [1, 2, 3]


def test_generic_edit_endpoint(client, draft_id):
    response = client.post(
        f"/v1/drafts/{draft_id}/edits",
        json={"edit": {"kind": "treadling", "pick": 2, "treadle": 4}},
    )
    assert response.json()["changed"] is True
    sections = client.get(f"/v1/drafts/{draft_id}").json()["sections"]
    assert sections["treadling"]["2"] == 4


def test_out_of_range_edit_is_rejected(client, draft_id):
    response = client.put(f"/v1/drafts/{draft_id}/threading/9", json={"shaft": 1})
    assert response.status_code == 422
    assert client.get(f"/v1/drafts/{draft_id}").json()["revision"] == 1


def test_toggle_uses_visual_coordinates(client, draft_id):
    # top-left threading cell is thread 8 on shaft 4, already threaded
    body = client.post(f"/v1/drafts/{draft_id}/grids/threading:toggle", json={"row": 0, "column": 0}).json()
    assert body["edit"] == {"kind": "threading", "thread": 8, "shaft": None}

    grid = client.get(f"/v1/drafts/{draft_id}/grids/threading").json()
    assert grid["rows"] == 4
    assert grid["columns"] == 8
    assert grid["cells"][0][0] is False


def test_toggle_outside_the_grid(client, draft_id):
    body = client.post(f"/v1/drafts/{draft_id}/grids/tieup:toggle", json={"row": 9, "column": 0}).json()
    assert body["changed"] is False
    assert body["edit"] is None


def test_toggle_drawdown_is_rejected(client, draft_id):
    response = client.post(f"/v1/drafts/{draft_id}/grids/drawdown:toggle", json={"row": 0, "column": 0})
    assert response.status_code == 422


def test_export_round_trips(client, draft_id, twill_payload):
    response = client.get(f"/v1/drafts/{draft_id}/export")
    assert response.status_code == 200
    assert json.loads(response.text) == twill_payload
