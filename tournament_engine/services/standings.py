"""
Group standings from played results.

Tie-break chain: points, goal difference, goals for, total head-to-head wins,
name. Team id is the last resort so two teams sharing a name still order
deterministically. Results that reference teams outside the group are skipped.
"""
from __future__ import annotations

import bisect
import logging
from typing import Iterable, Sequence

from tournament_engine.models import (
    FixtureRound,
    MatchResult,
    Outcome,
    StandingRow,
    Team,
)

logger = logging.getLogger(__name__)

POINTS_WIN = 3
POINTS_DRAW = 1


def standings_sort_key(row: StandingRow) -> tuple:
    return (
        -row.points,
        -row.goal_difference,
        -row.goals_for,
        -row.total_head_to_head_wins,
        row.name,
        row.team_id,
    )


def sort_standings(rows: Iterable[StandingRow]) -> list[StandingRow]:
    return sorted(rows, key=standings_sort_key)


def record_outcome(row: StandingRow, outcome: Outcome, round_number: int | None = None) -> None:
    """
    Insert outcome into the row's history in round order. Without a round
    number it goes after the last recorded round.
    """
    if round_number is None:
        round_number = row.history_rounds[-1] + 1 if row.history_rounds else 1
        row.history_rounds.append(round_number)
        row.history.append(outcome)
        return
    idx = bisect.bisect_right(row.history_rounds, round_number)
    row.history_rounds.insert(idx, round_number)
    row.history.insert(idx, outcome)


def apply_result(rows_by_id: dict[str, StandingRow], result: MatchResult) -> bool:
    """
    Add one played result to the rows in place. Returns False (and changes nothing)
    when either team is not in the table.
    """
    home = rows_by_id.get(result.home_team_id)
    away = rows_by_id.get(result.away_team_id)
    if home is None or away is None:
        logger.debug(
            "Skipping result %s: team %s or %s not in group",
            result.match_id, result.home_team_id, result.away_team_id,
        )
        return False

    home.played += 1
    away.played += 1
    home.goals_for += result.home_score
    home.goals_against += result.away_score
    away.goals_for += result.away_score
    away.goals_against += result.home_score

    if result.home_score > result.away_score:
        _record_win(home, away, result.round_number)
    elif result.home_score < result.away_score:
        _record_win(away, home, result.round_number)
    else:
        home.draws += 1
        away.draws += 1
        home.points += POINTS_DRAW
        away.points += POINTS_DRAW
        record_outcome(home, Outcome.DRAW, result.round_number)
        record_outcome(away, Outcome.DRAW, result.round_number)
    return True


def _record_win(winner: StandingRow, loser: StandingRow, round_number: int) -> None:
    winner.wins += 1
    loser.losses += 1
    winner.points += POINTS_WIN
    record_outcome(winner, Outcome.WIN, round_number)
    record_outcome(loser, Outcome.LOSS, round_number)
    winner.head_to_head_wins[loser.team_id] = winner.head_to_head_wins.get(loser.team_id, 0) + 1


def compute_standings(
    teams: Sequence[Team],
    results: Iterable[MatchResult],
    exclude_round: int | None = None,
) -> list[StandingRow]:
    """
    Build the ordered table for one group.

    Only results with played=True count. When exclude_round is given, that
    round's results are left out (the table as it stood before the round).
    No teams gives an empty table.
    """
    rows_by_id: dict[str, StandingRow] = {t.id: StandingRow(team_id=t.id, name=t.name) for t in teams}
    for result in sorted(results, key=lambda r: r.round_number):
        if not result.played:
            continue
        if exclude_round is not None and result.round_number == exclude_round:
            continue
        apply_result(rows_by_id, result)
    return sort_standings(rows_by_id.values())


def position_of(standings: Sequence[StandingRow], team_id: str) -> int | None:
    """1-based rank of a team in an ordered table, or None."""
    for i, row in enumerate(standings):
        if row.team_id == team_id:
            return i + 1
    return None


def head_to_head_points(team_id: str, other_id: str, results: Iterable[MatchResult]) -> int:
    """Points team_id earned in played meetings with other_id."""
    points = 0
    for r in results:
        if not r.played:
            continue
        if r.home_team_id == team_id and r.away_team_id == other_id:
            mine, theirs = r.home_score, r.away_score
        elif r.away_team_id == team_id and r.home_team_id == other_id:
            mine, theirs = r.away_score, r.home_score
        else:
            continue
        if mine > theirs:
            points += POINTS_WIN
        elif mine == theirs:
            points += POINTS_DRAW
    return points


def is_group_completed(
    teams: Sequence[Team],
    fixtures: Sequence[FixtureRound],
    results: Iterable[MatchResult],
) -> bool:
    """
    A one-team group is always complete. Otherwise every scheduled match needs
    a played result, and there must be at least one scheduled match.
    """
    if len(teams) == 1:
        return True
    scheduled = [m.id for rnd in fixtures for m in rnd.matches]
    if not scheduled:
        return False
    played_ids = {r.match_id for r in results if r.played}
    return all(match_id in played_ids for match_id in scheduled)
