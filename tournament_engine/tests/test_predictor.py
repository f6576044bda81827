"""
Tests for team profiles and the match outcome predictor.
"""
from __future__ import annotations

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from tournament_engine.models import MatchResult, MomentumDirection, MomentumStrength, Outcome, StandingRow
from tournament_engine.prediction.predictor import (
    MatchPredictor,
    has_clear_pick,
    ResultLabel,
    is_prediction_correct,
    pick_label,
    predict_match,
    prediction_accuracy,
    probability_band,
    round_half_up,
)
from tournament_engine.prediction.profiles import (
    build_profile,
    build_profiles,
    consistency,
    default_profile,
    form_label,
    momentum,
    profile_for,
    recent_form,
)

W, D, L = Outcome.WIN, Outcome.DRAW, Outcome.LOSS


def _row(team_id: str, history: list[Outcome], gf: int = 0, ga: int = 0) -> StandingRow:
    wins = history.count(W)
    draws = history.count(D)
    return StandingRow(
        team_id=team_id,
        name=team_id.upper(),
        played=len(history),
        wins=wins,
        draws=draws,
        losses=history.count(L),
        goals_for=gf,
        goals_against=ga,
        points=3 * wins + draws,
        history=list(history),
    )


def _profile(team_id: str, rating: float, form: float, attack: float = 1.0, defence: float = 1.0):
    p = default_profile(team_id)
    p.performance_rating = rating
    p.recent_form = form
    p.attacking_strength = attack
    p.defensive_strength = defence
    return p


# ---------- Profiles ----------


def test_recent_form_uses_last_three():
    assert recent_form(_row("a", [L, L, W, D, W])) == pytest.approx((1 + 0.5 + 1) / 3)
    assert recent_form(_row("a", [])) == 0.5


def test_form_labels():
    assert form_label(0.9) == "Excellent"
    assert form_label(0.6) == "Good"
    assert form_label(0.4) == "Average"
    assert form_label(0.2) == "Poor"
    assert form_label(0.1) == "Very Poor"


def test_consistency():
    assert consistency(_row("a", [W])) == 0.5
    assert consistency(_row("a", [W, W, D, L])) == 0.5
    assert consistency(_row("a", [W, W, W, D])) == 0.75


def test_momentum_bands():
    assert momentum(_row("a", [W])).direction is MomentumDirection.STABLE
    rising = momentum(_row("a", [L, L, L, W, W, W]))
    assert (rising.direction, rising.strength) == (MomentumDirection.RISING, MomentumStrength.STRONG)
    falling = momentum(_row("a", [W, W, W, W, W, D]))
    assert (falling.direction, falling.strength) == (MomentumDirection.DECLINING, MomentumStrength.STRONG)
    slight = momentum(_row("a", [W, D, D, W, W, L]))
    assert (slight.direction, slight.strength) == (MomentumDirection.RISING, MomentumStrength.SLIGHT)
    flat = momentum(_row("a", [W, D]))
    assert flat.direction is MomentumDirection.STABLE


def test_build_profile_rates_and_clamps():
    leader = _row("a", [W, W, W], gf=9, ga=1)
    other = _row("b", [L, L, L], gf=1, ga=9)
    standings = [leader, other]
    p = build_profile(leader, standings)
    assert p.position == 1
    assert p.attacking_strength == 3.0
    assert p.defensive_strength == pytest.approx(0.3)
    assert p.points_per_match == 3.0
    assert p.win_percentage == 100
    assert p.form_label == "Excellent"
    # 3 (position) + 2 (efficiency) + 1.8 (goal difference) + 2 (form) + 1 (win rate), clamped
    assert p.performance_rating == 9.8
    low = build_profile(other, standings)
    assert 0.0 <= low.performance_rating <= 10.0
    assert low.win_percentage == 0


def test_profile_for_falls_back_to_neutral_default():
    profiles = build_profiles([_row("a", [W])])
    assert profile_for("a", profiles).team_id == "a"
    neutral = profile_for("ghost", profiles)
    assert neutral.recent_form == 0.5
    assert neutral.performance_rating == 5.0
    assert neutral.position is None


# ---------- Predictor ----------


@pytest.mark.parametrize(
    "diff,expected",
    [
        (2.5, (65, 25, 10)),
        (1.5, (55, 30, 15)),
        (0.5, (45, 35, 20)),
        (0.0, (35, 35, 30)),
        (-1.5, (25, 30, 45)),
        (-2.0, (15, 25, 60)),
    ],
)
def test_probability_bands(diff, expected):
    assert probability_band(diff) == expected
    assert sum(probability_band(diff)) == 100


def test_label_first_match_wins():
    assert pick_label(45, 35, 20) == ResultLabel.HOME
    assert pick_label(35, 35, 30) == ResultLabel.DRAW
    assert pick_label(25, 30, 45) == ResultLabel.AWAY


def test_home_advantage_only_for_home_side():
    home = _profile("h", rating=5.0, form=0.5)
    away = _profile("a", rating=5.0, form=0.5)
    assert MatchPredictor(0.3).strengths(home, away) == (pytest.approx(6.3), pytest.approx(6.0))
    neutral = MatchPredictor(0.0).predict(home, away)
    assert neutral.result_label == ResultLabel.DRAW
    favoured = MatchPredictor(1.2).predict(home, away)
    assert favoured.result_label == ResultLabel.HOME
    assert favoured.confidence == favoured.home_win_pct == 55


def test_predicted_score_and_rationale():
    strong = _profile("h", rating=8.0, form=1.0, attack=2.2, defence=0.5)
    weak = _profile("a", rating=3.0, form=0.0, attack=0.4, defence=2.0)
    p = predict_match(strong, weak)
    assert p.result_label == ResultLabel.HOME
    assert (p.home_win_pct, p.draw_pct, p.away_win_pct) == (65, 25, 10)
    assert p.predicted_score == (3, 0)
    assert p.rationale
    assert 1 <= len(p.reasons) <= 3

    reverse = predict_match(weak, strong)
    assert reverse.result_label == ResultLabel.AWAY
    assert reverse.predicted_score == (0, 3)


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(1.49) == 1


def test_prediction_grading():
    home = _profile("h", rating=8.0, form=1.0)
    away = _profile("a", rating=3.0, form=0.0)
    p = predict_match(home, away)

    def result(hs: int, as_: int, played: bool = True) -> MatchResult:
        return MatchResult("m1", "h", "a", 1, "G", hs, as_, played)

    assert is_prediction_correct(p, result(2, 0)) is True
    assert is_prediction_correct(p, result(1, 1)) is False
    assert is_prediction_correct(p, result(0, 0, played=False)) is None
    acc = prediction_accuracy([(p, result(2, 0)), (p, result(0, 1)), (p, result(0, 0, played=False))])
    assert acc == {"correct": 1, "total": 2, "percentage": 50}


def test_level_band_names_no_outcome_and_grades_as_wrong():
    even = MatchPredictor(0.0).predict(_profile("h", rating=5.0, form=0.5), _profile("a", rating=5.0, form=0.5))
    assert (even.home_win_pct, even.draw_pct, even.away_win_pct) == (35, 35, 30)
    assert even.result_label == ResultLabel.DRAW
    assert not has_clear_pick(even)

    drawn = MatchResult("m1", "h", "a", 1, "G", 1, 1, True)
    assert is_prediction_correct(even, drawn) is False
    assert is_prediction_correct(even, MatchResult("m1", "h", "a", 1, "G", 0, 0, False)) is None
    assert prediction_accuracy([(even, drawn)]) == {"correct": 0, "total": 1, "percentage": 0}
