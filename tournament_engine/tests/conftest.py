"""
Shared fixture: a small tournament written as JSON files into tmp_path.

Group A (a, b, c, d) has played two of its three rounds; group B (x, y) has
played nothing. After round 2 the table is c 4, a 3, b 3, d 1.
"""
from __future__ import annotations

import json
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from tournament_engine.auth import hash_password

ADMIN_PASSWORD = "admin-pass"
VIEWER_PASSWORD = "viewer-pass"


def _write(path: Path, data) -> None:
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _team(team_id: str, group_id: str, players: list[dict] | None = None) -> dict:
    return {"id": team_id, "name": team_id.upper(), "fullName": f"Team {team_id.upper()}", "groupId": group_id, "players": players or []}


def _match(match_id: str, home: str, away: str) -> dict:
    return {"id": match_id, "homeTeam": home, "awayTeam": away, "date": "2024-05-01", "time": "18:00"}


def _result(match_id: str, home: str, away: str, hs: int, as_: int, gameweek: int) -> dict:
    return {"matchId": match_id, "homeTeam": home, "awayTeam": away, "homeScore": hs, "awayScore": as_, "gameweek": gameweek, "groupId": "A", "played": True}


def write_tournament(directory: Path) -> Path:
    _write(directory / "groups.json", {"groups": [
        {"id": "A", "name": "Group A"},
        {"id": "B", "name": "Group B", "description": "Two-team group"},
    ]})
    _write(directory / "teams.json", {"teams": [
        _team("a", "A", [{"id": "a9", "name": "Striker A", "isStarter": True, "number": 9, "position": "FW"}]),
        _team("b", "A", [{"id": "b7", "name": "Winger B", "isStarter": True, "number": 7}]),
        _team("c", "A"),
        _team("d", "A", [{"id": "d10", "name": "Playmaker D"}]),
        _team("x", "B"),
        _team("y", "B"),
    ]})
    _write(directory / "fixtures.json", {"fixtures": [
        {"groupId": "A", "gameweek": 1, "matches": [_match("m1", "a", "b"), _match("m2", "c", "d")]},
        {"groupId": "A", "gameweek": 2, "matches": [_match("m3", "a", "c"), _match("m4", "b", "d")]},
        {"groupId": "A", "gameweek": 3, "matches": [_match("m5", "a", "d"), _match("m6", "b", "c")]},
        {"groupId": "B", "gameweek": 1, "matches": [_match("n1", "x", "y")]},
    ]})
    _write(directory / "results.json", {"results": [
        _result("m1", "a", "b", 2, 0, 1),
        _result("m2", "c", "d", 1, 1, 1),
        _result("m3", "a", "c", 0, 1, 2),
        _result("m4", "b", "d", 3, 2, 2),
    ]})
    _write(directory / "goals.json", {"goals": [
        {"matchId": "m1", "playerId": "a9", "teamId": "a", "totalGoals": 2, "playerName": "Striker A"},
        {"matchId": "m4", "playerId": "b7", "teamId": "b", "totalGoals": 2, "goalType": "penalti"},
        {"matchId": "m4", "playerId": "d10", "teamId": "d", "totalGoals": 2},
        {"matchId": "m4", "playerId": "d10", "teamId": "b", "totalGoals": 1, "goalType": "own_goal"},
    ]})
    _write(directory / "defaults.json", {"defaultGroup": "A", "simulation": {"pointsGapLimit": 3, "homeAdvantage": 0.3}})
    _write(directory / "users.json", {"users": [
        {"username": "admin", "passwordHash": hash_password(ADMIN_PASSWORD), "role": "admin"},
        {"username": "viewer", "passwordHash": hash_password(VIEWER_PASSWORD), "role": "viewer"},
    ]})
    return directory


@pytest.fixture
def data_dir(tmp_path) -> Path:
    return write_tournament(tmp_path)
