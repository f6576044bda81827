"""
Schemas for the scenario insight feature.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class InsightContext:
    """Everything the narrative may cite. Built from engine output only."""
    group_id: str
    team: dict[str, Any]
    standings: list[dict[str, Any]] = field(default_factory=list)
    next_round: dict[str, Any] | None = None
    scenarios: list[dict[str, Any]] = field(default_factory=list)
    remaining_matches: int = 0


@dataclass
class ScenarioInsights:
    """Advisory narrative for a team's next round. Never used for any calculation."""
    summary: str
    to_reach_first: str = ""
    to_maintain_first: str | None = None
    to_avoid_drop: str = ""
    strategic_insights: list[str] = field(default_factory=list)
    generated_by: str = "stub"  # "llm" | "stub"

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "to_reach_first": self.to_reach_first,
            "to_maintain_first": self.to_maintain_first,
            "to_avoid_drop": self.to_avoid_drop,
            "strategic_insights": list(self.strategic_insights),
            "generated_by": self.generated_by,
        }
