"""
Data models for the tournament engine.
Domain objects only. Loading, persistence and the API live elsewhere.

Teams, fixtures and results are loaded from static files; standing rows and
performance profiles are derived on every request and never stored.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ---------- Result letters (standings history) ----------
class Outcome(str, Enum):
    WIN = "W"
    DRAW = "D"
    LOSS = "L"


# ---------- Hypothetical outcome for one team ----------
class PersonalOutcome(str, Enum):
    """A team's own result in a what-if scenario."""
    WIN = "win"
    DRAW = "draw"
    LOSS = "loss"

    @property
    def points(self) -> int:
        return {"win": 3, "draw": 1, "loss": 0}[self.value]


# ---------- Goal type ----------
class GoalType(str, Enum):
    REGULAR = "regular"
    PENALTY = "penalty"
    OWN_GOAL = "own_goal"


# ---------- Player ----------
@dataclass(frozen=True)
class Player:
    id: str
    name: str
    is_starter: bool = False
    number: int | None = None
    position: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_starter": self.is_starter,
            "number": self.number,
            "position": self.position,
        }


# ---------- Team ----------
@dataclass(frozen=True)
class Team:
    """A participant in exactly one group. Roster may be empty."""
    id: str
    name: str
    group_id: str
    full_name: str | None = None
    players: tuple[Player, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "group_id": self.group_id,
            "players": [p.to_dict() for p in self.players],
        }
        if self.full_name is not None:
            d["full_name"] = self.full_name
        return d


# ---------- Group ----------
@dataclass(frozen=True)
class Group:
    id: str
    name: str
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.description is not None:
            d["description"] = self.description
        return d


# ---------- Fixtures ----------
@dataclass(frozen=True)
class ScheduledMatch:
    id: str
    home_team_id: str
    away_team_id: str
    date: str | None = None
    time: str | None = None

    def involves(self, team_id: str) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)

    def opponent_of(self, team_id: str) -> str | None:
        if team_id == self.home_team_id:
            return self.away_team_id
        if team_id == self.away_team_id:
            return self.home_team_id
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "date": self.date,
            "time": self.time,
        }


@dataclass(frozen=True)
class FixtureRound:
    """One round (gameweek) of a group. Numbers are unique and increasing within a group."""
    group_id: str
    number: int
    matches: tuple[ScheduledMatch, ...] = ()

    def match_for(self, team_id: str) -> ScheduledMatch | None:
        for m in self.matches:
            if m.involves(team_id):
                return m
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "group_id": self.group_id,
            "number": self.number,
            "matches": [m.to_dict() for m in self.matches],
        }


# ---------- Results ----------
@dataclass(frozen=True)
class Scorer:
    player_id: str
    team_id: str
    goals: int = 1
    goal_type: GoalType = GoalType.REGULAR
    player_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "team_id": self.team_id,
            "goals": self.goals,
            "goal_type": self.goal_type.value,
            "player_name": self.player_name,
        }


@dataclass
class MatchResult:
    """
    A recorded outcome of a scheduled match.
    Only the score fields change after creation (explicit edit).
    """
    match_id: str
    home_team_id: str
    away_team_id: str
    round_number: int
    group_id: str
    home_score: int
    away_score: int
    played: bool = True
    scorers: list[Scorer] = field(default_factory=list)

    @property
    def outcome(self) -> str:
        """'home', 'draw' or 'away'."""
        if self.home_score > self.away_score:
            return "home"
        if self.home_score < self.away_score:
            return "away"
        return "draw"

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_id": self.match_id,
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "round_number": self.round_number,
            "group_id": self.group_id,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "played": self.played,
            "scorers": [s.to_dict() for s in self.scorers],
        }


# ---------- Standings ----------
@dataclass
class StandingRow:
    """
    One team's line in a group table. Derived from results, never persisted.
    Goal difference is always computed, never stored.
    """
    team_id: str
    name: str
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0
    history: list[Outcome] = field(default_factory=list)
    head_to_head_wins: dict[str, int] = field(default_factory=dict)
    history_rounds: list[int] = field(default_factory=list)  # round of each history entry

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    @property
    def total_head_to_head_wins(self) -> int:
        return sum(self.head_to_head_wins.values())

    def copy(self) -> StandingRow:
        return StandingRow(
            team_id=self.team_id,
            name=self.name,
            played=self.played,
            wins=self.wins,
            draws=self.draws,
            losses=self.losses,
            goals_for=self.goals_for,
            goals_against=self.goals_against,
            points=self.points,
            history=list(self.history),
            head_to_head_wins=dict(self.head_to_head_wins),
            history_rounds=list(self.history_rounds),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "name": self.name,
            "played": self.played,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "goals_for": self.goals_for,
            "goals_against": self.goals_against,
            "goal_difference": self.goal_difference,
            "points": self.points,
            "history": [o.value for o in self.history],
            "head_to_head_wins": dict(self.head_to_head_wins),
        }


# ---------- Performance profile ----------
class MomentumDirection(str, Enum):
    RISING = "Rising"
    STABLE = "Stable"
    DECLINING = "Declining"


class MomentumStrength(str, Enum):
    STRONG = "Strong"
    SLIGHT = "Slight"
    NEUTRAL = "Neutral"


@dataclass(frozen=True)
class Momentum:
    direction: MomentumDirection = MomentumDirection.STABLE
    strength: MomentumStrength = MomentumStrength.NEUTRAL

    def to_dict(self) -> dict[str, Any]:
        return {"direction": self.direction.value, "strength": self.strength.value}


@dataclass
class TeamPerformanceProfile:
    """Heuristic strength summary of one team, derived from its standing row."""
    team_id: str
    name: str
    position: int | None
    recent_form: float  # 0..1
    form_label: str
    consistency: float  # 0..1
    attacking_strength: float  # goals scored per match
    defensive_strength: float  # goals conceded per match
    points_per_match: float
    win_percentage: int
    performance_rating: float  # 0..10
    momentum: Momentum = field(default_factory=Momentum)
    played: int = 0
    points: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "name": self.name,
            "position": self.position,
            "recent_form": self.recent_form,
            "form_label": self.form_label,
            "consistency": self.consistency,
            "attacking_strength": self.attacking_strength,
            "defensive_strength": self.defensive_strength,
            "points_per_match": self.points_per_match,
            "win_percentage": self.win_percentage,
            "performance_rating": self.performance_rating,
            "momentum": self.momentum.to_dict(),
            "played": self.played,
            "points": self.points,
        }
