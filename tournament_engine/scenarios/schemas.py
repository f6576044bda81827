"""
Shared types for the what-if scenario engine.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from tournament_engine.models import PersonalOutcome


class ScenarioKind(str, Enum):
    OUTCOME = "outcome"  # one per personal result of the selected team
    REST_ROUND = "rest_round"  # selected team has no match this round
    NO_MATCHES = "no_matches"  # nothing left to play
    NO_DATA = "no_data"  # team or table missing
    TOO_MANY_COMBINATIONS = "too_many_combinations"


class ScenarioBucket(str, Enum):
    """Where the selected team ends up for one combination. Order is most to least notable."""
    TIE_BREAK_LOSS = "tie_break_loss"
    REACHES_FIRST = "reaches_first"
    MAINTAINS_FIRST = "maintains_first"
    MAINTAINS_POSITION = "maintains_position"
    IMPROVES = "improves"
    DROPS = "drops"


class Probability(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"

    @property
    def level(self) -> int:
        return {"high": 3, "medium": 2, "low": 1, "none": 0}[self.value]

    @classmethod
    def from_level(cls, level: int) -> Probability:
        return {3: cls.HIGH, 2: cls.MEDIUM, 1: cls.LOW}.get(level, cls.NONE)


class ResultType(str, Enum):
    GOOD = "good"
    NEUTRAL = "neutral"
    BAD = "bad"


@dataclass(frozen=True)
class RelevantTeam:
    """A team within the points gap of the selected team."""
    team_id: str
    name: str
    position: int
    points: int
    gap: int  # points minus the selected team's points
    plays_next_round: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "name": self.name,
            "position": self.position,
            "points": self.points,
            "gap": self.gap,
            "plays_next_round": self.plays_next_round,
        }


Combination = tuple[PersonalOutcome, ...]

# Enumeration order of one team's result
OUTCOME_ORDER: tuple[PersonalOutcome, ...] = (PersonalOutcome.WIN, PersonalOutcome.DRAW, PersonalOutcome.LOSS)


# ---------- Enumeration result (tagged) ----------
@dataclass(frozen=True)
class Complete:
    """Every combination for team_ids, in itertools.product order."""
    team_ids: tuple[str, ...]
    total: int

    def __iter__(self) -> Iterator[Combination]:
        return itertools.product(OUTCOME_ORDER, repeat=len(self.team_ids))


@dataclass(frozen=True)
class Capped:
    """A deterministic sample; total_estimate is the full product size."""
    team_ids: tuple[str, ...]
    sample: tuple[Combination, ...]
    total_estimate: int

    def __iter__(self) -> Iterator[Combination]:
        return iter(self.sample)


@dataclass(frozen=True)
class Refused:
    """Too many combinations and sampling disabled."""
    team_ids: tuple[str, ...]
    total_estimate: int


# ---------- Scenario ----------
@dataclass
class Scenario:
    """
    Summary of one personal outcome (or one degenerate case) for the selected team.
    Bucket counts partition combination_count exactly.
    """
    kind: ScenarioKind
    team_id: str
    team_name: str
    title: str
    description: str
    probability: Probability = Probability.NONE
    result_type: ResultType = ResultType.NEUTRAL
    outcome: PersonalOutcome | None = None
    opponent_id: str | None = None
    opponent_name: str | None = None
    venue: str | None = None  # "home" | "away"
    current_position: int | None = None
    current_points: int | None = None
    new_points: int | None = None
    bucket_counts: dict[ScenarioBucket, int] = field(default_factory=dict)
    combination_count: int = 0
    total_estimate: int = 0
    capped: bool = False
    dominant_bucket: ScenarioBucket | None = None
    requirements: list[str] = field(default_factory=list)
    deciding_results: dict[ScenarioBucket, list[str]] = field(default_factory=dict)
    tie_break_notes: list[str] = field(default_factory=list)
    watch_teams: list[str] = field(default_factory=list)

    @property
    def bucket_percentages(self) -> dict[ScenarioBucket, float]:
        if self.combination_count == 0:
            return {b: 0.0 for b in self.bucket_counts}
        return {b: round(c / self.combination_count * 100, 1) for b, c in self.bucket_counts.items()}

    def to_dict(self) -> dict[str, Any]:
        pct = self.bucket_percentages
        return {
            "kind": self.kind.value,
            "team_id": self.team_id,
            "team_name": self.team_name,
            "title": self.title,
            "description": self.description,
            "probability": self.probability.value,
            "result_type": self.result_type.value,
            "outcome": self.outcome.value if self.outcome else None,
            "opponent_id": self.opponent_id,
            "opponent_name": self.opponent_name,
            "venue": self.venue,
            "current_position": self.current_position,
            "current_points": self.current_points,
            "new_points": self.new_points,
            "buckets": {
                b.value: {"count": c, "percentage": pct.get(b, 0.0)}
                for b, c in self.bucket_counts.items()
            },
            "combination_count": self.combination_count,
            "total_estimate": self.total_estimate,
            "capped": self.capped,
            "dominant_bucket": self.dominant_bucket.value if self.dominant_bucket else None,
            "requirements": list(self.requirements),
            "deciding_results": {b.value: list(v) for b, v in self.deciding_results.items()},
            "tie_break_notes": list(self.tie_break_notes),
            "watch_teams": list(self.watch_teams),
        }
