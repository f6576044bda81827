"""
Fixture helpers: next round to be played, remaining matches, current round.
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from tournament_engine.models import FixtureRound, MatchResult, ScheduledMatch, Team

logger = logging.getLogger(__name__)


def _played_ids(results: Iterable[MatchResult]) -> set[str]:
    return {r.match_id for r in results if r.played}


def find_next_round(
    fixtures: Sequence[FixtureRound],
    results: Iterable[MatchResult],
) -> FixtureRound | None:
    """
    First round (by number) that still has unplayed matches, reduced to those
    unplayed matches. None when every match has a result.
    """
    played = _played_ids(results)
    for rnd in sorted(fixtures, key=lambda r: r.number):
        pending = tuple(m for m in rnd.matches if m.id not in played)
        if pending:
            return FixtureRound(group_id=rnd.group_id, number=rnd.number, matches=pending)
    return None


def remaining_matches(
    fixtures: Sequence[FixtureRound],
    results: Iterable[MatchResult],
) -> list[tuple[int, ScheduledMatch]]:
    """(round number, match) for every scheduled match without a played result."""
    played = _played_ids(results)
    return [
        (rnd.number, m)
        for rnd in sorted(fixtures, key=lambda r: r.number)
        for m in rnd.matches
        if m.id not in played
    ]


def remaining_match_counts(
    teams: Sequence[Team],
    fixtures: Sequence[FixtureRound],
    results: Iterable[MatchResult],
) -> dict[str, int]:
    """Unplayed scheduled matches per team; every team gets an entry."""
    counts = {t.id: 0 for t in teams}
    for _, m in remaining_matches(fixtures, results):
        for team_id in (m.home_team_id, m.away_team_id):
            if team_id in counts:
                counts[team_id] += 1
    return counts


def remaining_round_count(
    fixtures: Sequence[FixtureRound],
    results: Iterable[MatchResult],
) -> int:
    return len({number for number, _ in remaining_matches(fixtures, results)})


def current_round(
    fixtures: Sequence[FixtureRound],
    results: Iterable[MatchResult],
) -> int | None:
    """
    Round the group is "in": the latest round with any played result, or the
    following round once that one is complete. Before any result, the first round.
    """
    ordered = sorted(fixtures, key=lambda r: r.number)
    if not ordered:
        return None
    played = _played_ids(results)
    latest_idx: int | None = None
    for i, rnd in enumerate(ordered):
        if any(m.id in played for m in rnd.matches):
            latest_idx = i
    if latest_idx is None:
        return ordered[0].number
    latest = ordered[latest_idx]
    complete = all(m.id in played for m in latest.matches)
    if complete and latest_idx + 1 < len(ordered):
        return ordered[latest_idx + 1].number
    return latest.number


def find_match(
    fixtures: Sequence[FixtureRound],
    match_id: str,
) -> tuple[FixtureRound, ScheduledMatch] | None:
    for rnd in fixtures:
        for m in rnd.matches:
            if m.id == match_id:
                return rnd, m
    return None


def fixture_round(fixtures: Sequence[FixtureRound], number: int) -> FixtureRound | None:
    for rnd in fixtures:
        if rnd.number == number:
            return rnd
    return None


def validate_results(
    results: Iterable[MatchResult],
    fixtures: Sequence[FixtureRound],
) -> list[MatchResult]:
    """
    Keep results that reference a scheduled match of the same group and teams.
    Others are dropped with a warning.
    """
    index = {m.id: (rnd, m) for rnd in fixtures for m in rnd.matches}
    valid: list[MatchResult] = []
    for r in results:
        found = index.get(r.match_id)
        if found is None:
            logger.warning("Dropping result %s: no scheduled match with that id", r.match_id)
            continue
        rnd, m = found
        if rnd.group_id != r.group_id:
            logger.warning("Dropping result %s: group %s does not match fixture group %s", r.match_id, r.group_id, rnd.group_id)
            continue
        if (m.home_team_id, m.away_team_id) != (r.home_team_id, r.away_team_id):
            logger.warning("Dropping result %s: teams do not match the fixture", r.match_id)
            continue
        valid.append(r)
    return valid
