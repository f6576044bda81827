"""
Tests for loading tournament files and the result repository.
"""
from __future__ import annotations

import json
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from tournament_engine.models import GoalType
from tournament_engine.persistence import (
    DataFileError,
    DuplicateResultError,
    InvalidScoreError,
    ResultNotFoundError,
    ResultRepository,
    UnknownMatchError,
    load_tournament,
)
from tournament_engine.persistence.store import parse_result, result_to_record


# ---------- Loading ----------


def test_load_tournament(data_dir):
    data = load_tournament(data_dir)
    assert [g.id for g in data.groups] == ["A", "B"]
    assert [t.id for t in data.teams_in("A")] == ["a", "b", "c", "d"]
    assert [r.number for r in data.fixtures_for("A")] == [1, 2, 3]
    assert len(data.results_for("A")) == 4
    assert data.results_for("B") == []
    assert data.default_group_id == "A"
    striker = data.team("a").players[0]
    assert (striker.name, striker.is_starter, striker.number, striker.position) == ("Striker A", True, 9, "FW")
    assert data.team("a").full_name == "Team A"


def test_goals_are_attached_to_results(data_dir):
    data = load_tournament(data_dir)
    m4 = next(r for r in data.results if r.match_id == "m4")
    kinds = sorted((s.player_id, s.goal_type) for s in m4.scorers)
    assert kinds == [("b7", GoalType.PENALTY), ("d10", GoalType.OWN_GOAL), ("d10", GoalType.REGULAR)]


def test_missing_optional_files_are_empty(tmp_path):
    data = load_tournament(tmp_path)
    assert data.groups == []
    assert data.users == []
    assert data.defaults == {}
    assert data.default_group_id is None


def test_malformed_records_are_skipped(data_dir, caplog):
    (data_dir / "results.json").write_text(json.dumps([
        {"matchId": "m1", "homeTeam": "a", "awayTeam": "b", "homeScore": 2, "awayScore": 0, "gameweek": 1, "groupId": "A"},
        {"matchId": "m2", "homeTeam": "c", "awayTeam": "d", "gameweek": 1, "groupId": "A"},
        {"matchId": "m3", "homeTeam": "a", "awayTeam": "c", "homeScore": "x", "awayScore": 1, "gameweek": 2, "groupId": "A"},
        "not a record",
        {"matchId": "m99", "homeTeam": "a", "awayTeam": "b", "homeScore": 1, "awayScore": 0, "gameweek": 1, "groupId": "A"},
    ]), encoding="utf-8")
    data = load_tournament(data_dir)
    assert [r.match_id for r in data.results] == ["m1"]
    assert "Skipping result" in caplog.text


def test_invalid_json_raises(data_dir):
    (data_dir / "teams.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(DataFileError):
        load_tournament(data_dir)


def test_unknown_default_group_falls_back_to_first(data_dir):
    (data_dir / "defaults.json").write_text(json.dumps({"defaultGroup": "Z"}), encoding="utf-8")
    assert load_tournament(data_dir).default_group_id == "A"


def test_result_record_layout_is_stable():
    record = {"matchId": "m1", "homeTeam": "a", "awayTeam": "b", "homeScore": 2, "awayScore": 1, "gameweek": 1, "groupId": "A", "played": True}
    assert result_to_record(parse_result(record)) == record


# ---------- ResultRepository ----------


@pytest.fixture
def repo(data_dir) -> ResultRepository:
    return ResultRepository(load_tournament(data_dir))


def test_add_result_takes_teams_from_fixture(repo):
    result = repo.add("m5", 1, 2)
    assert (result.home_team_id, result.away_team_id) == ("a", "d")
    assert (result.round_number, result.group_id, result.played) == (3, "A", True)
    assert repo.get("m5") is result
    assert [r.match_id for r in repo.list_for_group("A")][-1] == "m5"


def test_add_rejects_unknown_duplicate_and_negative(repo):
    with pytest.raises(UnknownMatchError):
        repo.add("nope", 1, 0)
    with pytest.raises(DuplicateResultError):
        repo.add("m1", 1, 0)
    with pytest.raises(InvalidScoreError):
        repo.add("m6", -1, 0)
    assert repo.get("m6") is None


def test_edit_scores_only(repo):
    result = repo.edit_scores("m1", 0, 0)
    assert (result.home_score, result.away_score) == (0, 0)
    assert (result.home_team_id, result.round_number) == ("a", 1)
    with pytest.raises(ResultNotFoundError):
        repo.edit_scores("m6", 1, 1)


def test_export_round_trips_through_load(data_dir):
    repo = ResultRepository(load_tournament(data_dir))
    repo.add("n1", 2, 2)
    repo.edit_scores("m1", 1, 1)
    path = repo.export(data_dir)
    assert path == data_dir / "results.json"
    records = json.loads(path.read_text(encoding="utf-8"))
    assert [r["matchId"] for r in records] == ["m1", "m2", "m3", "m4", "n1"]
    assert records[-1]["groupId"] == "B"
    reloaded = load_tournament(data_dir)
    m1 = next(r for r in reloaded.results if r.match_id == "m1")
    assert (m1.home_score, m1.away_score) == (1, 1)
    assert len(reloaded.results_for("B")) == 1
