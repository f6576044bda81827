"""
Team performance profiles: heuristic strength signals derived from a standing row.
Used by the match predictor, the scenario qualifier and the season forecast.
"""
from __future__ import annotations

from typing import Mapping, Sequence

from tournament_engine.models import (
    Momentum,
    MomentumDirection,
    MomentumStrength,
    Outcome,
    StandingRow,
    TeamPerformanceProfile,
)

_OUTCOME_SCORE = {Outcome.WIN: 1.0, Outcome.DRAW: 0.5, Outcome.LOSS: 0.0}
_OUTCOME_POINTS = {Outcome.WIN: 3, Outcome.DRAW: 1, Outcome.LOSS: 0}

NEUTRAL_FORM = 0.5
NEUTRAL_CONSISTENCY = 0.5
NEUTRAL_RATING = 5.0


def recent_form(row: StandingRow, window: int = 3) -> float:
    """Mean of the last `window` results (W=1, D=0.5, L=0). 0.5 with no history."""
    recent = row.history[-window:]
    if not recent:
        return NEUTRAL_FORM
    return sum(_OUTCOME_SCORE[o] for o in recent) / len(recent)


def form_label(score: float) -> str:
    if score >= 0.8:
        return "Excellent"
    if score >= 0.6:
        return "Good"
    if score >= 0.4:
        return "Average"
    if score >= 0.2:
        return "Poor"
    return "Very Poor"


def consistency(row: StandingRow) -> float:
    """Share of the most frequent result type. 0.5 with fewer than two results."""
    if len(row.history) < 2:
        return NEUTRAL_CONSISTENCY
    dominant = max(row.history.count(o) for o in Outcome)
    return dominant / len(row.history)


def _per_match(value: int, played: int) -> float:
    return round(value / played, 1) if played > 0 else 0.0


def performance_rating(
    row: StandingRow,
    position: int,
    group_size: int,
    form: float,
) -> float:
    """0..10 composite of table position, points efficiency, goal difference, form and win rate."""
    n = max(group_size, 1)
    position_score = (n - position + 1) / n * 3
    efficiency = row.points / (row.played * 3) * 2 if row.played > 0 else 0.0
    gd_score = min(2.0, max(0.0, (row.goal_difference + 10) / 10))
    form_score = form * 2
    win_rate = row.wins / row.played if row.played > 0 else 0.0
    total = position_score + efficiency + gd_score + form_score + win_rate
    return round(min(10.0, max(0.0, total)), 1)


def momentum(row: StandingRow, window: int = 3) -> Momentum:
    """
    Average points of the last `window` results against the `window` before them.
    With no earlier window the recent one is compared with itself (Stable).
    """
    if len(row.history) < 2:
        return Momentum()
    recent = row.history[-window:]
    earlier = row.history[-2 * window:-window] or recent

    def avg(items: Sequence[Outcome]) -> float:
        return sum(_OUTCOME_POINTS[o] for o in items) / len(items)

    delta = avg(recent) - avg(earlier)
    if delta > 0.5:
        return Momentum(MomentumDirection.RISING, MomentumStrength.STRONG)
    if delta > 0:
        return Momentum(MomentumDirection.RISING, MomentumStrength.SLIGHT)
    if delta < -0.5:
        return Momentum(MomentumDirection.DECLINING, MomentumStrength.STRONG)
    if delta < 0:
        return Momentum(MomentumDirection.DECLINING, MomentumStrength.SLIGHT)
    return Momentum()


def build_profile(
    row: StandingRow,
    standings: Sequence[StandingRow],
    window: int = 3,
) -> TeamPerformanceProfile:
    position = next((i + 1 for i, r in enumerate(standings) if r.team_id == row.team_id), len(standings) or 1)
    form = recent_form(row, window)
    return TeamPerformanceProfile(
        team_id=row.team_id,
        name=row.name,
        position=position,
        recent_form=form,
        form_label=form_label(form),
        consistency=consistency(row),
        attacking_strength=_per_match(row.goals_for, row.played),
        defensive_strength=_per_match(row.goals_against, row.played),
        points_per_match=_per_match(row.points, row.played),
        win_percentage=round(row.wins / row.played * 100) if row.played > 0 else 0,
        performance_rating=performance_rating(row, position, len(standings), form),
        momentum=momentum(row, window),
        played=row.played,
        points=row.points,
    )


def build_profiles(
    standings: Sequence[StandingRow],
    window: int = 3,
) -> dict[str, TeamPerformanceProfile]:
    return {row.team_id: build_profile(row, standings, window) for row in standings}


def default_profile(team_id: str, name: str | None = None) -> TeamPerformanceProfile:
    """Neutral profile for a team that cannot be profiled (not in the table)."""
    return TeamPerformanceProfile(
        team_id=team_id,
        name=name or team_id,
        position=None,
        recent_form=NEUTRAL_FORM,
        form_label=form_label(NEUTRAL_FORM),
        consistency=NEUTRAL_CONSISTENCY,
        attacking_strength=0.0,
        defensive_strength=0.0,
        points_per_match=0.0,
        win_percentage=0,
        performance_rating=NEUTRAL_RATING,
    )


def profile_for(
    team_id: str,
    profiles: Mapping[str, TeamPerformanceProfile],
) -> TeamPerformanceProfile:
    return profiles.get(team_id) or default_profile(team_id)
