"""
What-if scenario engine for the next round.

For a selected team and each of its possible results (win, draw, loss), every
combination of results of the other relevant teams that play in the round is
applied to a copy of the table, re-ranked with the standings tie-break chain
and classified by where the selected team ends up.

Simulated goal deltas are an estimate, not a goal simulation: a win adds two
goals scored, a draw adds one goal scored and one conceded, a loss changes
nothing. Every other relevant team with a match is enumerated independently,
the selected team's opponent included, so a combination may pair results that
cannot happen together (both sides of one match winning). A team outside the
points gap is never simulated.
"""
from __future__ import annotations

import logging
from typing import Callable, Mapping, Sequence

from tournament_engine.config import EngineConfig
from tournament_engine.models import FixtureRound, Outcome, PersonalOutcome, StandingRow
from tournament_engine.prediction.predictor import MatchPrediction, MatchPredictor
from tournament_engine.prediction.profiles import build_profiles, profile_for
from tournament_engine.scenarios.enumeration import enumerate_combinations
from tournament_engine.scenarios.schemas import (
    Capped,
    Combination,
    Probability,
    Refused,
    RelevantTeam,
    ResultType,
    Scenario,
    ScenarioBucket,
    ScenarioKind,
)
from tournament_engine.services.standings import record_outcome, sort_standings, standings_sort_key

logger = logging.getLogger(__name__)

CANCEL_POLL_INTERVAL = 1024
MAX_DECIDING_RESULTS = 5

# (points, goals for, goals against) added for each simulated result
_DELTAS: dict[PersonalOutcome, tuple[int, int, int]] = {
    PersonalOutcome.WIN: (3, 2, 0),
    PersonalOutcome.DRAW: (1, 1, 1),
    PersonalOutcome.LOSS: (0, 0, 0),
}
_HISTORY = {PersonalOutcome.WIN: Outcome.WIN, PersonalOutcome.DRAW: Outcome.DRAW, PersonalOutcome.LOSS: Outcome.LOSS}
_VERBS = {PersonalOutcome.WIN: "wins", PersonalOutcome.DRAW: "draws", PersonalOutcome.LOSS: "loses"}
_FAVOURABLE = (ScenarioBucket.REACHES_FIRST, ScenarioBucket.MAINTAINS_FIRST, ScenarioBucket.TIE_BREAK_LOSS)


class ScenarioCancelled(Exception):
    """The caller asked to stop an analysis in progress."""


# ---------- Building blocks ----------


def relevant_teams(
    team_id: str,
    standings: Sequence[StandingRow],
    next_round: FixtureRound | None,
    points_gap_limit: int,
) -> list[RelevantTeam]:
    """Teams within points_gap_limit points of team_id (inclusive), in table order."""
    selected = next((r for r in standings if r.team_id == team_id), None)
    if selected is None:
        return []
    playing: set[str] = set()
    if next_round is not None:
        for m in next_round.matches:
            playing.update((m.home_team_id, m.away_team_id))
    out: list[RelevantTeam] = []
    for pos, row in enumerate(standings, start=1):
        gap = row.points - selected.points
        if row.team_id == team_id or abs(gap) <= points_gap_limit:
            out.append(RelevantTeam(
                team_id=row.team_id,
                name=row.name,
                position=pos,
                points=row.points,
                gap=gap,
                plays_next_round=row.team_id in playing,
            ))
    return out


def simulate_round(
    standings: Sequence[StandingRow],
    assignments: Mapping[str, PersonalOutcome],
) -> list[StandingRow]:
    """Copy of the table with the hypothetical results applied, re-sorted. Unknown ids are ignored."""
    rows: list[StandingRow] = []
    for row in standings:
        new = row.copy()
        outcome = assignments.get(row.team_id)
        if outcome is not None:
            pts, gf, ga = _DELTAS[outcome]
            new.points += pts
            new.goals_for += gf
            new.goals_against += ga
            new.played += 1
            if outcome is PersonalOutcome.WIN:
                new.wins += 1
            elif outcome is PersonalOutcome.DRAW:
                new.draws += 1
            else:
                new.losses += 1
            record_outcome(new, _HISTORY[outcome])
        rows.append(new)
    return sort_standings(rows)


def classify(
    team_id: str,
    old_position: int,
    new_standings: Sequence[StandingRow],
) -> tuple[ScenarioBucket, int]:
    """Bucket and new 1-based position of team_id in a re-sorted table."""
    new_position = next(i for i, r in enumerate(new_standings, start=1) if r.team_id == team_id)
    team_points = new_standings[new_position - 1].points
    return _bucket(old_position, new_position, team_points, new_standings[0].points), new_position


def _bucket(old_position: int, new_position: int, team_points: int, leader_points: int) -> ScenarioBucket:
    if team_points == leader_points and new_position > 1:
        return ScenarioBucket.TIE_BREAK_LOSS
    if new_position == 1:
        return ScenarioBucket.MAINTAINS_FIRST if old_position == 1 else ScenarioBucket.REACHES_FIRST
    if new_position == old_position:
        return ScenarioBucket.MAINTAINS_POSITION
    if new_position < old_position:
        return ScenarioBucket.IMPROVES
    return ScenarioBucket.DROPS


def _signed(n: int) -> str:
    return f"+{n}" if n > 0 else str(n)


def explain_tie_break(team_id: str, new_standings: Sequence[StandingRow]) -> list[str]:
    """One line per team level on points ranked above team_id, naming the deciding criterion."""
    idx = next(i for i, r in enumerate(new_standings) if r.team_id == team_id)
    row = new_standings[idx]
    notes: list[str] = []
    for other in new_standings[:idx]:
        if other.points != row.points:
            continue
        if other.goal_difference != row.goal_difference:
            criterion = f"goal difference ({_signed(row.goal_difference)} vs {_signed(other.goal_difference)})"
        elif other.goals_for != row.goals_for:
            criterion = f"goals scored ({row.goals_for} vs {other.goals_for})"
        elif other.total_head_to_head_wins != row.total_head_to_head_wins:
            criterion = f"head-to-head wins ({row.total_head_to_head_wins} vs {other.total_head_to_head_wins})"
        else:
            criterion = "name order (level on every other criterion)"
        notes.append(f"{row.name} finishes behind {other.name} on {criterion}")
    return notes


def describe_combination(
    team_ids: Sequence[str],
    combination: Combination,
    names: Mapping[str, str],
) -> str:
    if not team_ids:
        return "No other relevant matches"
    return ", ".join(f"{names.get(t, t)} {_VERBS[o]}" for t, o in zip(team_ids, combination))


# ---------- Probability qualifier ----------


def enumeration_probability(
    outcome: PersonalOutcome,
    counts: Mapping[ScenarioBucket, int],
    total: int,
) -> Probability:
    if total == 0 or counts.get(ScenarioBucket.DROPS, 0) == total:
        return Probability.NONE
    if counts.get(ScenarioBucket.REACHES_FIRST, 0) > 0:
        return {
            PersonalOutcome.WIN: Probability.HIGH,
            PersonalOutcome.DRAW: Probability.MEDIUM,
            PersonalOutcome.LOSS: Probability.LOW,
        }[outcome]
    if counts.get(ScenarioBucket.MAINTAINS_FIRST, 0) > 0:
        return Probability.HIGH
    if counts.get(ScenarioBucket.MAINTAINS_POSITION, 0) == total:
        return Probability.MEDIUM
    return Probability.MEDIUM if outcome is PersonalOutcome.LOSS else Probability.LOW


def heuristic_probability(percentage: int) -> Probability:
    if percentage >= 50:
        return Probability.HIGH
    if percentage >= 30:
        return Probability.MEDIUM
    return Probability.LOW


def fold_probability(enumerated: Probability, heuristic: Probability) -> Probability:
    """Floor of the mean level; an impossible result stays impossible."""
    if enumerated is Probability.NONE:
        return Probability.NONE
    return Probability.from_level((enumerated.level + heuristic.level) // 2)


def outcome_percentage(prediction: MatchPrediction, outcome: PersonalOutcome, at_home: bool) -> int:
    if outcome is PersonalOutcome.DRAW:
        return prediction.draw_pct
    won = outcome is PersonalOutcome.WIN
    return prediction.home_win_pct if won == at_home else prediction.away_win_pct


# ---------- Engine ----------


def analyze_scenarios(
    team_id: str,
    standings: Sequence[StandingRow],
    next_round: FixtureRound | None,
    points_gap_limit: int | None = None,
    config: EngineConfig | None = None,
    cancel_check: Callable[[], bool] | None = None,
) -> list[Scenario]:
    """
    Scenarios for team_id in next_round.

    Returns a single NO_DATA, NO_MATCHES, REST_ROUND or TOO_MANY_COMBINATIONS
    scenario for the degenerate cases, otherwise one OUTCOME scenario per
    personal result (win, draw, loss). Raises ScenarioCancelled only when
    cancel_check returns True.
    """
    config = config or EngineConfig()
    gap_limit = config.points_gap_limit if points_gap_limit is None else points_gap_limit
    names = {r.team_id: r.name for r in standings}
    team_name = names.get(team_id, team_id)

    old_position = next((i for i, r in enumerate(standings, start=1) if r.team_id == team_id), None)
    if old_position is None:
        return [Scenario(
            kind=ScenarioKind.NO_DATA,
            team_id=team_id,
            team_name=team_name,
            title="No data",
            description=f"{team_name} has no standings data for this group.",
        )]
    selected = standings[old_position - 1]

    if next_round is None or not next_round.matches:
        return [Scenario(
            kind=ScenarioKind.NO_MATCHES,
            team_id=team_id,
            team_name=team_name,
            title="No matches left",
            description="Every scheduled match of this group has been played.",
            current_position=old_position,
            current_points=selected.points,
        )]

    relevant = relevant_teams(team_id, standings, next_round, gap_limit)
    match = next_round.match_for(team_id)
    if match is None:
        return [_rest_round_scenario(selected, old_position, relevant, next_round.number)]

    opponent_id = match.opponent_of(team_id)
    at_home = match.home_team_id == team_id
    other_ids = [
        r.team_id for r in relevant
        if r.plays_next_round and r.team_id != team_id
    ]
    combos = enumerate_combinations(
        other_ids,
        ceiling=config.combination_ceiling,
        sample_size=config.combination_sample_size,
        seed=config.combination_sample_seed,
    )
    if isinstance(combos, Refused):
        return [Scenario(
            kind=ScenarioKind.TOO_MANY_COMBINATIONS,
            team_id=team_id,
            team_name=team_name,
            title="Too many combinations",
            description=(
                f"{len(other_ids)} other relevant teams play in round {next_round.number}; "
                f"{combos.total_estimate} combinations exceed the configured limit."
            ),
            current_position=old_position,
            current_points=selected.points,
            total_estimate=combos.total_estimate,
        )]

    profiles = build_profiles(standings, config.form_window)
    prediction = MatchPredictor(config.home_advantage).predict(
        profile_for(match.home_team_id, profiles),
        profile_for(match.away_team_id, profiles),
    )
    capped = isinstance(combos, Capped)
    total_estimate = combos.total_estimate if isinstance(combos, Capped) else combos.total

    base = [(r.team_id, standings_sort_key(r)) for r in standings]
    scenarios: list[Scenario] = []
    polled = 0
    for outcome in (PersonalOutcome.WIN, PersonalOutcome.DRAW, PersonalOutcome.LOSS):
        counts = {b: 0 for b in ScenarioBucket}
        deciding: dict[ScenarioBucket, list[str]] = {}
        tie_notes: list[str] = []
        evaluated = 0
        for combo in combos:
            if cancel_check is not None and polled % CANCEL_POLL_INTERVAL == 0 and cancel_check():
                raise ScenarioCancelled(f"Scenario analysis for {team_id} cancelled")
            polled += 1
            assignments = dict(zip(other_ids, combo))
            assignments[team_id] = outcome
            bucket = _rank_and_classify(base, assignments, team_id, old_position)
            counts[bucket] += 1
            evaluated += 1
            if bucket in _FAVOURABLE:
                found = deciding.setdefault(bucket, [])
                text = describe_combination(other_ids, combo, names)
                if len(found) < MAX_DECIDING_RESULTS and text not in found:
                    found.append(text)
                if bucket is ScenarioBucket.TIE_BREAK_LOSS and len(tie_notes) < MAX_DECIDING_RESULTS:
                    for note in explain_tie_break(team_id, simulate_round(standings, assignments)):
                        if note not in tie_notes:
                            tie_notes.append(note)

        scenarios.append(_outcome_scenario(
            selected=selected,
            old_position=old_position,
            outcome=outcome,
            opponent_id=opponent_id,
            opponent_name=names.get(opponent_id, opponent_id) if opponent_id else None,
            at_home=at_home,
            counts={b: c for b, c in counts.items() if c > 0},
            evaluated=evaluated,
            total_estimate=total_estimate,
            capped=capped,
            deciding=deciding,
            tie_notes=tie_notes[:MAX_DECIDING_RESULTS],
            heuristic=heuristic_probability(outcome_percentage(prediction, outcome, at_home)),
        ))
    return scenarios


def _rank_and_classify(
    base: list[tuple[str, tuple]],
    assignments: Mapping[str, PersonalOutcome],
    team_id: str,
    old_position: int,
) -> ScenarioBucket:
    """Same ordering as simulate_round + classify, on sort keys only."""
    keys: list[tuple] = []
    for tid, key in base:
        outcome = assignments.get(tid)
        if outcome is not None:
            pts, gf, ga = _DELTAS[outcome]
            neg_pts, neg_gd, neg_gf, neg_h2h, name, _ = key
            key = (neg_pts - pts, neg_gd - (gf - ga), neg_gf - gf, neg_h2h, name, tid)
        keys.append(key)
    keys.sort()
    new_position = next(i for i, k in enumerate(keys, start=1) if k[5] == team_id)
    return _bucket(old_position, new_position, -keys[new_position - 1][0], -keys[0][0])


def _rest_round_scenario(
    selected: StandingRow,
    position: int,
    relevant: Sequence[RelevantTeam],
    round_number: int,
) -> Scenario:
    watching = [r for r in relevant if r.plays_next_round and r.team_id != selected.team_id]
    if watching:
        names = ", ".join(r.name for r in watching)
        description = (
            f"{selected.name} does not play in round {round_number}. "
            f"Position {position} depends on: {names}."
        )
        title = "Rest round: watch the others"
    else:
        description = (
            f"{selected.name} does not play in round {round_number} and no team within reach plays either. "
            f"Position {position} is safe this round."
        )
        title = "Rest round: no change expected"
    return Scenario(
        kind=ScenarioKind.REST_ROUND,
        team_id=selected.team_id,
        team_name=selected.name,
        title=title,
        description=description,
        probability=Probability.HIGH,
        current_position=position,
        current_points=selected.points,
        new_points=selected.points,
        watch_teams=[r.team_id for r in watching],
    )


def _dominant(counts: Mapping[ScenarioBucket, int]) -> ScenarioBucket | None:
    if not counts:
        return None
    order = list(ScenarioBucket)
    return max(counts, key=lambda b: (counts[b], -order.index(b)))


def _result_type(counts: Mapping[ScenarioBucket, int], total: int) -> ResultType:
    if counts.get(ScenarioBucket.REACHES_FIRST, 0) or counts.get(ScenarioBucket.MAINTAINS_FIRST, 0):
        return ResultType.GOOD
    if counts.get(ScenarioBucket.MAINTAINS_POSITION, 0) == total:
        return ResultType.NEUTRAL
    drops = counts.get(ScenarioBucket.DROPS, 0)
    holds = counts.get(ScenarioBucket.MAINTAINS_POSITION, 0)
    improves = counts.get(ScenarioBucket.IMPROVES, 0)
    if drops > holds + improves:
        return ResultType.BAD
    if improves > drops:
        return ResultType.GOOD
    return ResultType.NEUTRAL


def _share(n: int, total: int) -> str:
    pct = round(n / total * 100) if total else 0
    return f"{n}/{total} ({pct}%)"


def _outcome_scenario(
    selected: StandingRow,
    old_position: int,
    outcome: PersonalOutcome,
    opponent_id: str | None,
    opponent_name: str | None,
    at_home: bool,
    counts: dict[ScenarioBucket, int],
    evaluated: int,
    total_estimate: int,
    capped: bool,
    deciding: dict[ScenarioBucket, list[str]],
    tie_notes: list[str],
    heuristic: Probability,
) -> Scenario:
    name = selected.name
    opp = opponent_name or "their opponent"
    reach = counts.get(ScenarioBucket.REACHES_FIRST, 0)
    keep_first = counts.get(ScenarioBucket.MAINTAINS_FIRST, 0)
    holds = counts.get(ScenarioBucket.MAINTAINS_POSITION, 0)
    drops = counts.get(ScenarioBucket.DROPS, 0)
    verb = {PersonalOutcome.WIN: "Win", PersonalOutcome.DRAW: "Draw", PersonalOutcome.LOSS: "Loss"}[outcome]

    if reach:
        title = f"{verb} vs {opp}: could reach 1st"
        description = f"{name} could reach 1st place in {_share(reach, evaluated)} of the combinations."
    elif keep_first:
        title = f"{verb} vs {opp}: stays top"
        description = f"{name} keeps 1st place in {_share(keep_first, evaluated)} of the combinations."
    elif holds == evaluated:
        title = f"{verb} vs {opp}: holds position {old_position}"
        description = f"{name} stays in position {old_position} whatever the other results."
    elif drops > holds:
        title = f"{verb} vs {opp}: likely drop"
        description = f"{name} drops below position {old_position} in {_share(drops, evaluated)} of the combinations."
    else:
        title = f"{verb} vs {opp}: mixed outcomes"
        description = f"{name} holds or improves in {_share(evaluated - drops, evaluated)} of the combinations."
    if capped:
        description += f" Based on a sample of {evaluated} out of {total_estimate} combinations."

    requirements = [{
        PersonalOutcome.WIN: f"Beat {opp}",
        PersonalOutcome.DRAW: f"Draw with {opp}",
        PersonalOutcome.LOSS: f"Limit damage against {opp}",
    }[outcome]]
    for bucket in (ScenarioBucket.REACHES_FIRST, ScenarioBucket.MAINTAINS_FIRST):
        if deciding.get(bucket):
            requirements.extend(deciding[bucket][:3])
            break

    return Scenario(
        kind=ScenarioKind.OUTCOME,
        team_id=selected.team_id,
        team_name=name,
        title=title,
        description=description,
        probability=fold_probability(enumeration_probability(outcome, counts, evaluated), heuristic),
        result_type=_result_type(counts, evaluated),
        outcome=outcome,
        opponent_id=opponent_id,
        opponent_name=opponent_name,
        venue="home" if at_home else "away",
        current_position=old_position,
        current_points=selected.points,
        new_points=selected.points + outcome.points,
        bucket_counts=counts,
        combination_count=evaluated,
        total_estimate=total_estimate,
        capped=capped,
        dominant_bucket=_dominant(counts),
        requirements=requirements,
        deciding_results=deciding,
        tie_break_notes=tie_notes,
    )
