"""Tests for the HTTP layer (main.py, router.py)."""
import csv
import io
import time

import pytest
from fastapi.testclient import TestClient

from csv_filter_viewer.main import create_app
from csv_filter_viewer.viewer import ViewerState

TEXT = 'id,name,city\n1,Ada,London\n2,Alan,Wilmslow\n3,Grace,"New York, NY"\n'


@pytest.fixture
def state():
    viewer = ViewerState(source="memory")
    viewer.load(TEXT)
    return viewer


@pytest.fixture
def client(state):
    app = create_app(state=state, debounce_seconds=60)
    with TestClient(app) as test_client:
        yield test_client


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["source"] == "memory"


def test_columns(client):
    assert client.get("/columns").json() == ["id", "name", "city"]


def test_table_unfiltered(client):
    body = client.get("/table").json()
    assert body["headers"] == ["id", "name", "city"]
    assert len(body["rows"]) == 3
    assert body["rows"][2]["city"] == "New York, NY"
    assert body["summary"]["total_rows"] == 3
    assert body["summary"]["match_percent"] == 100.0
    assert body["filtering"] is False


def test_table_query_filters_by_name_and_index(client):
    body = client.get("/table", params={"filter.city": "new", "filter.1": "GR"}).json()
    assert [r["id"] for r in body["rows"]] == ["3"]
    assert body["filters"]["city"] == "new"
    assert body["filters"]["name"] == "GR"
    assert body["summary"]["active_filters"] == 2
    # Query filters never change the stored map
    assert client.get("/filters").json()["active_filters"] == 0


def test_table_limit(client):
    body = client.get("/table", params={"limit": 1}).json()
    assert len(body["rows"]) == 1
    assert body["summary"]["matched_rows"] == 3
    assert body["summary"]["displayed_rows"] == 1


def test_table_negative_limit_rejected(client):
    assert client.get("/table", params={"limit": -1}).status_code == 422


def test_table_unknown_column(client):
    response = client.get("/table", params={"filter.planet": "x"})
    assert response.status_code == 404


def test_put_filter_is_debounced(client, state):
    response = client.put("/filters/name", json={"value": "ada"})
    assert response.status_code == 200
    assert response.json()["filtering"] is True
    assert state.filters["name"] == "ada"
    assert len(state.filtered) == 3

    applied = client.post("/filters/apply").json()
    assert applied["filtering"] is False
    assert [r["name"] for r in state.filtered] == ["Ada"]


def test_put_filter_immediate_by_index(client, state):
    response = client.put("/filters/2", params={"immediate": True}, json={"value": "wilm"})
    assert response.status_code == 200
    assert response.json()["filters"]["city"] == "wilm"
    body = client.get("/table").json()
    assert [r["name"] for r in body["rows"]] == ["Alan"]


def test_put_filter_unknown_column(client):
    assert client.put("/filters/planet", json={"value": "x"}).status_code == 404
    assert client.put("/filters/9", json={"value": "x"}).status_code == 404


def test_reset_filters(client, state):
    client.put("/filters/name", params={"immediate": True}, json={"value": "ada"})
    client.put("/filters/city", params={"immediate": True}, json={"value": "lon"})
    body = client.delete("/filters/name").json()
    assert body["filters"]["name"] == ""
    assert body["active_filters"] == 1
    body = client.delete("/filters").json()
    assert body["active_filters"] == 0
    assert len(state.filtered) == 3


def test_export_filtered_csv(client):
    client.put("/filters/city", params={"immediate": True}, json={"value": "york"})
    response = client.get("/export.csv")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows == [["id", "name", "city"], ["3", "Grace", "New York, NY"]]


def test_reload_from_file(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("a\n1\n2\n", encoding="utf-8")
    app = create_app(source=str(path))
    with TestClient(app) as test_client:
        assert test_client.get("/columns").json() == ["a"]
        path.write_text("a,b\n1,2\n", encoding="utf-8")
        body = test_client.post("/reload").json()
        assert body == {"source": str(path), "rows": 1, "columns": 2}


def test_unavailable_source_returns_503(tmp_path):
    path = tmp_path / "missing.csv"
    app = create_app(source=str(path))
    with TestClient(app) as test_client:
        response = test_client.get("/table")
        assert response.status_code == 503
        assert "file not found" in response.json()["detail"]
        assert test_client.post("/reload").status_code == 503

        path.write_text("a\nx\n", encoding="utf-8")
        assert test_client.post("/reload").status_code == 200
        assert test_client.get("/table").json()["rows"] == [{"a": "x"}]


def test_non_ascii_digit_column_is_unknown(client):
    """Digit-like characters that are not decimal digits are not indices."""
    assert client.get("/table", params={"filter.²": "x"}).status_code == 404
    assert client.put("/filters/²", json={"value": "x"}).status_code == 404


def test_debounced_filter_applied_after_delay(state):
    app = create_app(state=state, debounce_seconds=0.05)
    with TestClient(app) as test_client:
        response = test_client.put("/filters/city", json={"value": "london"})
        assert response.json()["filtering"] is True

        deadline = time.monotonic() + 2
        while test_client.get("/filters").json()["filtering"] and time.monotonic() < deadline:
            time.sleep(0.02)

        body = test_client.get("/table").json()
        assert body["filtering"] is False
        assert [r["name"] for r in body["rows"]] == ["Ada"]
        assert [r["name"] for r in state.filtered] == ["Ada"]


def test_apply_flushes_pending_recompute(client, state):
    client.put("/filters/name", json={"value": "grace"})
    debouncer = client.app.state.debouncer
    assert debouncer.pending
    body = client.post("/filters/apply").json()
    assert not debouncer.pending
    assert body["filters"]["name"] == "grace"
    assert [r["name"] for r in state.filtered] == ["Grace"]


def test_apply_without_pending_recomputes(client, state):
    state.filters["city"] = "wilm"
    assert not client.app.state.debouncer.pending
    client.post("/filters/apply")
    assert [r["name"] for r in state.filtered] == ["Alan"]
