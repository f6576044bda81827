"""
Prompt template for scenario insights.

The model sees only the standings, the fixtures of the next round and the
scenario summaries computed by the engine, and must not add facts of its own.
"""
from __future__ import annotations

import json

from tournament_engine.insights.schemas import InsightContext

SYSTEM_INSTRUCTION = """You are a football championship analyst. You explain what a team needs in the next round using only the data provided. You do not change any standings or probabilities.

Rules:
- Base every claim on the provided standings, fixtures and scenario summaries.
- Mention tie-breakers (goal difference, goals scored, head-to-head wins) only when the data shows a tie.
- If the data is insufficient, say so.
- Be brief and concrete."""

TOP_ROWS = 6


def _signed(n: int) -> str:
    return f"+{n}" if n > 0 else str(n)


def _format_context(ctx: InsightContext) -> str:
    parts: list[str] = []
    if ctx.standings:
        lines = [
            f"{i}. {row['name']} - {row['points']} pts (GD {_signed(row['goal_difference'])})"
            for i, row in enumerate(ctx.standings[:TOP_ROWS], start=1)
        ]
        parts.append("## Current standings\n" + "\n".join(lines))

    team = ctx.team
    parts.append(
        "## Selected team\n"
        f"{team['name']}: position {team.get('position')}, {team['points']} pts, "
        f"GD {_signed(team['goal_difference'])}, form {'-'.join(team.get('history', [])) or 'none'}, "
        f"{ctx.remaining_matches} matches left"
    )

    if ctx.next_round:
        fixtures = [
            f"{m['home_team_id']} vs {m['away_team_id']}" + (" (selected team)" if team["team_id"] in (m["home_team_id"], m["away_team_id"]) else "")
            for m in ctx.next_round.get("matches", [])
        ]
        parts.append(f"## Round {ctx.next_round['number']} fixtures\n" + "\n".join(fixtures))
    else:
        parts.append("## Next round\nNo fixtures left.")

    if ctx.scenarios:
        parts.append("## Scenario summaries (computed)\n" + json.dumps(ctx.scenarios, indent=2))
    return "\n\n".join(parts)


def build_prompt(ctx: InsightContext) -> list[dict[str, str]]:
    """System + user messages for the insight call."""
    user_content = f"""Use only the following data.

{_format_context(ctx)}

---

Explain what {ctx.team['name']} needs to reach 1st place, to stay 1st (only if currently 1st), and to avoid dropping. Add up to three strategic insights and a 2-3 sentence summary."""
    return [
        {"role": "system", "content": SYSTEM_INSTRUCTION},
        {"role": "user", "content": user_content},
    ]
