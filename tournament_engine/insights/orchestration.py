"""
Scenario insight pipeline (read-only):
  1. Compute standings, next round and scenarios with the analysis service.
  2. Assemble them into an InsightContext and a prompt.
  3. Call the LLM (or the stub) and return ScenarioInsights.
"""
from __future__ import annotations

from tournament_engine.insights.llm import call_llm
from tournament_engine.insights.prompt import build_prompt
from tournament_engine.insights.schemas import InsightContext, ScenarioInsights
from tournament_engine.services.analysis_service import AnalysisService, TeamNotFoundError
from tournament_engine.services.fixtures import remaining_match_counts


def gather_context(service: AnalysisService, group_id: str, team_id: str) -> InsightContext:
    standings = service.standings(group_id)
    rows = [r.to_dict() for r in standings]
    selected = next((dict(row, position=i) for i, row in enumerate(rows, start=1) if row["team_id"] == team_id), None)
    if selected is None:
        raise TeamNotFoundError(f"Team {team_id} is not in group {group_id}")
    next_round = service.next_round(group_id)
    data = service.data
    remaining = remaining_match_counts(
        data.teams_in(group_id), data.fixtures_for(group_id), data.results_for(group_id),
    )
    scenarios = service.scenarios(group_id, team_id)
    return InsightContext(
        group_id=group_id,
        team=selected,
        standings=rows,
        next_round=next_round.to_dict() if next_round else None,
        scenarios=[
            {k: s.to_dict()[k] for k in ("kind", "title", "description", "probability", "requirements", "tie_break_notes")}
            for s in scenarios
        ],
        remaining_matches=remaining.get(team_id, 0),
    )


def explain_scenarios(service: AnalysisService, group_id: str, team_id: str) -> ScenarioInsights:
    ctx = gather_context(service, group_id, team_id)
    fields, from_llm = call_llm(build_prompt(ctx))
    return ScenarioInsights(
        summary=fields["summary"],
        to_reach_first=fields["to_reach_first"],
        to_maintain_first=fields["to_maintain_first"],
        to_avoid_drop=fields["to_avoid_drop"],
        strategic_insights=fields["strategic_insights"],
        generated_by="llm" if from_llm else "stub",
    )
