"""
Goal-scorer statistics and likely scorers for a predicted match.
Own goals are not credited to the player who scored them.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from tournament_engine.models import GoalType, MatchResult, Team

LIKELY_SCORER_MIN_SHARE = 0.15


@dataclass
class ScorerStats:
    player_id: str
    player_name: str
    team_id: str
    goals: int = 0
    penalties: int = 0
    matches_scored_in: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "team_id": self.team_id,
            "goals": self.goals,
            "penalties": self.penalties,
            "matches_scored_in": self.matches_scored_in,
        }


@dataclass
class LikelyScorer:
    player_id: str
    player_name: str
    team_id: str
    share: float  # of the team's credited goals
    expected_goals: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "team_id": self.team_id,
            "share": round(self.share, 3),
            "expected_goals": round(self.expected_goals, 2),
        }


def _player_names(teams: Iterable[Team]) -> dict[str, str]:
    return {p.id: p.name for t in teams for p in t.players}


def scorer_table(
    results: Iterable[MatchResult],
    teams: Iterable[Team] = (),
) -> list[ScorerStats]:
    """Top scorers, most goals first (then fewest penalties, then name)."""
    names = _player_names(teams)
    stats: dict[tuple[str, str], ScorerStats] = {}
    for result in results:
        if not result.played:
            continue
        seen: set[tuple[str, str]] = set()
        for s in result.scorers:
            if s.goal_type is GoalType.OWN_GOAL:
                continue
            key = (s.team_id, s.player_id)
            entry = stats.get(key)
            if entry is None:
                entry = ScorerStats(
                    player_id=s.player_id,
                    player_name=s.player_name or names.get(s.player_id, s.player_id),
                    team_id=s.team_id,
                )
                stats[key] = entry
            entry.goals += s.goals
            if s.goal_type is GoalType.PENALTY:
                entry.penalties += s.goals
            if key not in seen:
                entry.matches_scored_in += 1
                seen.add(key)
    return sorted(stats.values(), key=lambda e: (-e.goals, e.penalties, e.player_name, e.player_id))


def likely_scorers(
    team_id: str,
    predicted_goals: int,
    table: Iterable[ScorerStats],
    min_share: float = LIKELY_SCORER_MIN_SHARE,
) -> list[LikelyScorer]:
    """
    Players carrying at least min_share of the team's goals, when the team is
    predicted to score at all.
    """
    if predicted_goals <= 0:
        return []
    mine = [e for e in table if e.team_id == team_id]
    total = sum(e.goals for e in mine)
    if total == 0:
        return []
    out = [
        LikelyScorer(
            player_id=e.player_id,
            player_name=e.player_name,
            team_id=team_id,
            share=e.goals / total,
            expected_goals=e.goals / total * predicted_goals,
        )
        for e in mine
        if e.goals / total >= min_share
    ]
    return sorted(out, key=lambda s: (-s.share, s.player_name))

