"""
Season-end projection and qualification (title) probability.

Projected points extrapolate points per match over the remaining matches,
damped by recent form. Future head-to-head is unknown, so the projected order
uses points, goal difference and goals for only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from tournament_engine.config import EngineConfig
from tournament_engine.models import StandingRow, TeamPerformanceProfile
from tournament_engine.prediction.predictor import round_half_up
from tournament_engine.prediction.profiles import profile_for


@dataclass
class SeasonProjection:
    team_id: str
    name: str
    current_position: int
    current_points: int
    remaining_matches: int
    expected_points: float
    projected_points: int
    max_points: int
    goal_difference: int
    goals_for: int
    qualification_probability: int
    eliminated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "name": self.name,
            "current_position": self.current_position,
            "current_points": self.current_points,
            "remaining_matches": self.remaining_matches,
            "expected_points": round(self.expected_points, 2),
            "projected_points": self.projected_points,
            "max_points": self.max_points,
            "goal_difference": self.goal_difference,
            "goals_for": self.goals_for,
            "qualification_probability": self.qualification_probability,
            "eliminated": self.eliminated,
        }


@dataclass
class SeasonForecast:
    """Projection of one group; has_data is False for an empty group."""
    group_id: str
    projections: list[SeasonProjection] = field(default_factory=list)
    remaining_rounds: int = 0

    @property
    def has_data(self) -> bool:
        return bool(self.projections)

    def to_dict(self) -> dict[str, Any]:
        return {
            "group_id": self.group_id,
            "has_data": self.has_data,
            "remaining_rounds": self.remaining_rounds,
            "projections": [p.to_dict() for p in self.projections],
        }


def qualification_probability(
    row: StandingRow,
    position: int,
    profile: TeamPerformanceProfile,
    leader_points: int,
    remaining: int,
    config: EngineConfig,
) -> tuple[int, bool]:
    """
    (probability %, eliminated). Zero when the team cannot reach the leader's
    current points; otherwise clamped to the configured bounds.
    """
    horizon = config.qualification_rank_horizon
    base = max(0.0, (horizon - (position - 1)) / horizon * 100)
    prob = base * (profile.recent_form + profile.performance_rating / 10) / 2

    max_points = row.points + remaining * 3
    if max_points < leader_points:
        return 0, True

    gap = leader_points - row.points
    if gap > 0:
        prob *= max(0.1, 1 - gap / (remaining * 3))
    if position == 1:
        prob = max(prob, config.leader_probability_floor)
    value = round_half_up(prob)
    return min(config.probability_max, max(config.probability_min, value)), False


def _projected_sort_key(p: SeasonProjection) -> tuple:
    return (-p.projected_points, -p.goal_difference, -p.goals_for, p.name, p.team_id)


def project_season(
    standings: Sequence[StandingRow],
    profiles: Mapping[str, TeamPerformanceProfile],
    remaining_match_counts: Mapping[str, int],
    config: EngineConfig | None = None,
) -> list[SeasonProjection]:
    """
    Ordered projection for one group. Teams without a profile use the neutral
    default; teams missing from remaining_match_counts have nothing left to play.
    """
    config = config or EngineConfig()
    if not standings:
        return []
    leader_points = standings[0].points
    out: list[SeasonProjection] = []
    for position, row in enumerate(standings, start=1):
        profile = profile_for(row.team_id, profiles)
        remaining = max(0, int(remaining_match_counts.get(row.team_id, 0)))
        expected = row.points + remaining * profile.points_per_match * profile.recent_form
        prob, eliminated = qualification_probability(row, position, profile, leader_points, remaining, config)
        out.append(SeasonProjection(
            team_id=row.team_id,
            name=row.name,
            current_position=position,
            current_points=row.points,
            remaining_matches=remaining,
            expected_points=expected,
            projected_points=round_half_up(expected),
            max_points=row.points + remaining * 3,
            goal_difference=row.goal_difference,
            goals_for=row.goals_for,
            qualification_probability=prob,
            eliminated=eliminated,
        ))
    return sorted(out, key=_projected_sort_key)
