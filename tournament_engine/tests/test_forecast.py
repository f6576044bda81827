"""
Tests for the season projection and qualification probability.
"""
from __future__ import annotations

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from tournament_engine.config import EngineConfig
from tournament_engine.models import StandingRow
from tournament_engine.prediction.profiles import default_profile
from tournament_engine.services.forecast import project_season, qualification_probability


def _row(team_id: str, points: int, gf: int = 0, ga: int = 0) -> StandingRow:
    return StandingRow(team_id=team_id, name=team_id.upper(), played=4, points=points, goals_for=gf, goals_against=ga)


def _profile(team_id: str, ppm: float, form: float, rating: float = 5.0):
    p = default_profile(team_id)
    p.points_per_match = ppm
    p.recent_form = form
    p.performance_rating = rating
    return p


@pytest.fixture
def table() -> list[StandingRow]:
    return [_row("a", 10, 8, 2), _row("b", 7, 6, 4), _row("c", 4, 3, 5), _row("d", 0, 1, 7)]


@pytest.fixture
def profiles():
    return {
        "a": _profile("a", 2.5, 1.0, 9.0),
        "b": _profile("b", 1.8, 0.5, 6.0),
        "c": _profile("c", 1.0, 0.5, 4.0),
        "d": _profile("d", 0.0, 0.0, 1.0),
    }


def test_projected_points(table, profiles):
    out = {p.team_id: p for p in project_season(table, profiles, {"a": 2, "b": 2, "c": 2, "d": 2})}
    assert out["a"].expected_points == pytest.approx(15.0)
    assert out["a"].projected_points == 15
    assert out["b"].projected_points == 9  # 7 + 2 * 1.8 * 0.5 = 8.8
    assert out["d"].projected_points == 0
    assert out["a"].max_points == 16


def test_projection_order_and_empty_table(table, profiles):
    out = project_season(table, profiles, {"a": 2, "b": 2, "c": 2, "d": 2})
    assert [p.team_id for p in out] == ["a", "b", "c", "d"]
    assert project_season([], profiles, {}) == []


def test_elimination_and_leader_floor(table, profiles):
    out = {p.team_id: p for p in project_season(table, profiles, {"a": 2, "b": 2, "c": 2, "d": 2})}
    # d can reach 6 < 10
    assert out["d"].eliminated
    assert out["d"].qualification_probability == 0
    assert not out["b"].eliminated
    assert 1 <= out["b"].qualification_probability <= 95
    assert out["a"].qualification_probability >= 25


def test_leader_floor_applies_to_weak_leader():
    row = _row("a", 3)
    weak = _profile("a", 0.5, 0.0, 0.0)
    prob, eliminated = qualification_probability(row, 1, weak, leader_points=3, remaining=3, config=EngineConfig())
    assert not eliminated
    assert prob == 25


def test_probability_is_clamped_to_configured_bounds():
    row = _row("a", 9)
    strong = _profile("a", 3.0, 1.0, 10.0)
    prob, _ = qualification_probability(row, 1, strong, leader_points=9, remaining=3, config=EngineConfig())
    assert prob == 95
    tiny = _profile("b", 0.1, 0.0, 0.1)
    prob, eliminated = qualification_probability(_row("b", 3), 6, tiny, leader_points=9, remaining=3, config=EngineConfig())
    assert not eliminated
    assert prob == 1


def test_gap_scaling_reduces_probability():
    p = _profile("b", 2.0, 0.8, 7.0)
    close, _ = qualification_probability(_row("b", 8), 2, p, leader_points=9, remaining=4, config=EngineConfig())
    far, _ = qualification_probability(_row("b", 2), 2, p, leader_points=9, remaining=4, config=EngineConfig())
    assert far < close


def test_missing_profile_and_remaining_count_use_defaults(table):
    out = {p.team_id: p for p in project_season(table, {}, {})}
    assert out["a"].remaining_matches == 0
    assert out["a"].projected_points == 10
    assert out["c"].eliminated


@pytest.mark.parametrize("low,high", [(0.0, 0.3), (0.3, 0.7), (0.7, 1.0)])
def test_projection_monotonic_in_recent_form(table, low, high):
    base = {t: _profile(t, 1.5, 0.5) for t in "abcd"}
    remaining = {t: 3 for t in "abcd"}
    base["c"] = _profile("c", 1.5, low)
    before = next(p for p in project_season(table, base, remaining) if p.team_id == "c")
    base["c"] = _profile("c", 1.5, high)
    after = next(p for p in project_season(table, base, remaining) if p.team_id == "c")
    assert after.projected_points >= before.projected_points
    assert after.expected_points > before.expected_points
