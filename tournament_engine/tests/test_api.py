"""
API integration tests.
Uses TestClient to avoid starting a server.
Requires: pip install httpx (for TestClient)
"""
from __future__ import annotations

import json
from pathlib import Path

import pytest

try:
    from fastapi.testclient import TestClient
    HAS_HTTPX = True
except (ImportError, RuntimeError):
    HAS_HTTPX = False

# Ensure project root on path
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

pytestmark = pytest.mark.skipif(not HAS_HTTPX, reason="httpx required for TestClient")

import tournament_engine.api as api_module
from tournament_engine.api import app, get_repository, reset_service
from tournament_engine.tests.conftest import ADMIN_PASSWORD, VIEWER_PASSWORD


@pytest.fixture(autouse=True)
def loaded(data_dir):
    """Fresh tournament data for each test."""
    reset_service(data_dir)
    yield data_dir


@pytest.fixture
def client():
    return TestClient(app)


def _login(client, username: str, password: str) -> dict[str, str]:
    resp = client.post("/login", json={"username": username, "password": password})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def admin(client) -> dict[str, str]:
    return _login(client, "admin", ADMIN_PASSWORD)


@pytest.fixture
def viewer(client) -> dict[str, str]:
    return _login(client, "viewer", VIEWER_PASSWORD)


def test_login_rejects_bad_password(client):
    resp = client.post("/login", json={"username": "admin", "password": "wrong"})
    assert resp.status_code == 401


def test_list_groups(client):
    resp = client.get("/groups")
    assert resp.status_code == 200
    data = resp.json()
    assert data["default_group_id"] == "A"
    assert [g["id"] for g in data["groups"]] == ["A", "B"]


def test_get_group(client):
    resp = client.get("/groups/A")
    assert resp.status_code == 200
    data = resp.json()
    assert data["current_round"] == 3
    assert data["completed"] is False
    assert len(data["teams"]) == 4
    assert client.get("/groups/Z").status_code == 404


def test_standings(client):
    resp = client.get("/groups/A/standings")
    assert resp.status_code == 200
    rows = resp.json()["standings"]
    assert [(r["position"], r["team_id"], r["points"]) for r in rows] == [(1, "c", 4), (2, "a", 3), (3, "b", 3), (4, "d", 1)]
    assert rows[0]["history"] == ["D", "W"]


def test_standings_before_round(client):
    rows = client.get("/groups/A/standings?exclude_round=2").json()["standings"]
    assert rows[0]["team_id"] == "a"
    assert sum(r["played"] for r in rows) == 4


def test_next_round(client):
    data = client.get("/groups/A/next-round").json()
    assert data["next_round"]["number"] == 3
    assert [m["id"] for m in data["next_round"]["matches"]] == ["m5", "m6"]


def test_scenarios(client):
    resp = client.get("/groups/A/scenarios/b?gap=3")
    assert resp.status_code == 200
    data = resp.json()
    assert data["points_gap_limit"] == 3
    assert [s["outcome"] for s in data["scenarios"]] == ["win", "draw", "loss"]
    assert all(s["kind"] == "outcome" for s in data["scenarios"])
    assert client.get("/groups/A/scenarios/x").status_code == 404
    assert client.get("/groups/A/scenarios/b?gap=-1").status_code == 422


def test_predictions_and_forecast(client):
    preds = client.get("/groups/A/predictions?round=2").json()
    assert preds["round_number"] == 2
    assert preds["accuracy"]["total"] == 2
    assert client.get("/groups/A/predictions?round=9").status_code == 404
    forecast = client.get("/groups/A/forecast").json()
    assert forecast["has_data"] is True
    assert len(forecast["projections"]) == 4


def test_scorers(client):
    scorers = client.get("/groups/A/scorers").json()["scorers"]
    assert scorers[0]["player_name"] == "Playmaker D"


def test_add_result_requires_admin(client, viewer):
    body = {"match_id": "m5", "home_score": 2, "away_score": 0}
    assert client.post("/results", json=body).status_code == 401
    assert client.post("/results", json=body, headers=viewer).status_code == 403


def test_add_result_updates_standings(client, admin):
    resp = client.post("/results", json={"match_id": "m5", "home_score": 2, "away_score": 0}, headers=admin)
    assert resp.status_code == 200
    assert resp.json()["result"]["round_number"] == 3
    rows = client.get("/groups/A/standings").json()["standings"]
    assert rows[0]["team_id"] == "a"
    assert rows[0]["points"] == 6


def test_add_result_errors(client, admin):
    assert client.post("/results", json={"match_id": "m1", "home_score": 1, "away_score": 0}, headers=admin).status_code == 409
    assert client.post("/results", json={"match_id": "zz", "home_score": 1, "away_score": 0}, headers=admin).status_code == 404
    assert client.post("/results", json={"match_id": "m5", "home_score": -1, "away_score": 0}, headers=admin).status_code == 422


def test_edit_result(client, admin):
    resp = client.put("/results/m3", json={"home_score": 2, "away_score": 2}, headers=admin)
    assert resp.status_code == 200
    assert resp.json()["result"]["home_score"] == 2
    assert client.put("/results/m6", json={"home_score": 0, "away_score": 0}, headers=admin).status_code == 404


def test_export_results(client, admin, loaded):
    client.post("/results", json={"match_id": "n1", "home_score": 1, "away_score": 1}, headers=admin)
    records = client.get("/results/export").json()
    assert [r["matchId"] for r in records][-1] == "n1"
    assert client.post("/results/export").status_code == 401
    resp = client.post("/results/export", headers=admin)
    assert resp.status_code == 200
    written = json.loads((loaded / "results.json").read_text(encoding="utf-8"))
    assert written == records


def test_insights_stub(client, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    resp = client.post("/insights/scenarios", json={"group_id": "A", "team_id": "b"})
    assert resp.status_code == 200
    assert resp.json()["generated_by"] == "stub"
    assert client.post("/insights/scenarios", json={"group_id": "Z", "team_id": "b"}).status_code == 404


def test_repository_loads_on_first_use(data_dir, monkeypatch):
    monkeypatch.setattr(api_module, "_service", None)
    monkeypatch.setattr(api_module, "_repo", None)
    monkeypatch.setenv("TOURNAMENT_DATA_DIR", str(data_dir))
    repo = get_repository()
    assert repo.get("m1") is not None
    assert api_module._repo is repo
    assert api_module._service is not None
