"""
Tournament data loaded from a directory of static JSON files.

Files (camelCase keys): groups.json, teams.json, fixtures.json, results.json,
and the optional goals.json, defaults.json, users.json. A missing optional
file is an empty collection. Malformed records are skipped with a warning.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, TypeVar

from tournament_engine.models import (
    FixtureRound,
    GoalType,
    Group,
    MatchResult,
    Player,
    ScheduledMatch,
    Scorer,
    Team,
)
from tournament_engine.services.fixtures import validate_results

logger = logging.getLogger(__name__)

T = TypeVar("T")

GROUPS_FILE = "groups.json"
TEAMS_FILE = "teams.json"
FIXTURES_FILE = "fixtures.json"
RESULTS_FILE = "results.json"
GOALS_FILE = "goals.json"
DEFAULTS_FILE = "defaults.json"
USERS_FILE = "users.json"

_GOAL_TYPES = {
    "penalty": GoalType.PENALTY,
    "penalti": GoalType.PENALTY,
    "own_goal": GoalType.OWN_GOAL,
    "owngoal": GoalType.OWN_GOAL,
    "autogol": GoalType.OWN_GOAL,
}


class DataFileError(ValueError):
    """A data file exists but is not valid JSON of the expected shape."""


@dataclass
class TournamentData:
    """Everything loaded for one tournament. Results are the only mutable collection."""
    groups: list[Group] = field(default_factory=list)
    teams: list[Team] = field(default_factory=list)
    fixtures: list[FixtureRound] = field(default_factory=list)
    results: list[MatchResult] = field(default_factory=list)
    defaults: dict[str, Any] = field(default_factory=dict)
    users: list[dict[str, Any]] = field(default_factory=list)

    def group(self, group_id: str) -> Group | None:
        return next((g for g in self.groups if g.id == group_id), None)

    def team(self, team_id: str) -> Team | None:
        return next((t for t in self.teams if t.id == team_id), None)

    def teams_in(self, group_id: str) -> list[Team]:
        return [t for t in self.teams if t.group_id == group_id]

    def fixtures_for(self, group_id: str) -> list[FixtureRound]:
        return sorted((r for r in self.fixtures if r.group_id == group_id), key=lambda r: r.number)

    def results_for(self, group_id: str) -> list[MatchResult]:
        return [r for r in self.results if r.group_id == group_id]

    @property
    def default_group_id(self) -> str | None:
        configured = self.defaults.get("defaultGroup")
        if configured and self.group(configured) is not None:
            return configured
        return self.groups[0].id if self.groups else None


# ---------- JSON helpers ----------


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DataFileError(f"{path.name}: invalid JSON ({e.msg} at line {e.lineno})") from e


def _records(data: Any, key: str) -> list[Any]:
    """Accept either a bare list or {key: [...]}."""
    if isinstance(data, dict):
        data = data.get(key, [])
    if not isinstance(data, list):
        raise DataFileError(f"expected a list of {key}")
    return data


def _parse_all(items: list[Any], parse: Callable[[dict[str, Any]], T], what: str) -> list[T]:
    out: list[T] = []
    for i, raw in enumerate(items):
        if not isinstance(raw, dict):
            logger.warning("Skipping %s #%d: not an object", what, i)
            continue
        try:
            out.append(parse(raw))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping %s #%d: %s", what, i, e)
    return out


# ---------- Record parsers ----------


def parse_group(d: dict[str, Any]) -> Group:
    return Group(id=str(d["id"]), name=str(d.get("name") or d["id"]), description=d.get("description"))


def parse_player(d: dict[str, Any]) -> Player:
    number = d.get("number")
    return Player(
        id=str(d["id"]),
        name=str(d["name"]),
        is_starter=bool(d.get("isStarter", False)),
        number=int(number) if number is not None else None,
        position=d.get("position"),
    )


def parse_team(d: dict[str, Any]) -> Team:
    players = tuple(_parse_all(d.get("players") or [], parse_player, f"player of team {d.get('id')}"))
    return Team(
        id=str(d["id"]),
        name=str(d["name"]),
        group_id=str(d["groupId"]),
        full_name=d.get("fullName"),
        players=players,
    )


def parse_scheduled_match(d: dict[str, Any]) -> ScheduledMatch:
    return ScheduledMatch(
        id=str(d["id"]),
        home_team_id=str(d["homeTeam"]),
        away_team_id=str(d["awayTeam"]),
        date=d.get("date"),
        time=d.get("time"),
    )


def parse_fixture_round(d: dict[str, Any]) -> FixtureRound:
    matches = tuple(_parse_all(d.get("matches") or [], parse_scheduled_match, "scheduled match"))
    return FixtureRound(group_id=str(d["groupId"]), number=int(d["gameweek"]), matches=matches)


def parse_result(d: dict[str, Any]) -> MatchResult:
    return MatchResult(
        match_id=str(d["matchId"]),
        home_team_id=str(d["homeTeam"]),
        away_team_id=str(d["awayTeam"]),
        round_number=int(d["gameweek"]),
        group_id=str(d["groupId"]),
        home_score=int(d["homeScore"]),
        away_score=int(d["awayScore"]),
        played=bool(d.get("played", True)),
    )


def parse_goal(d: dict[str, Any]) -> tuple[str, Scorer]:
    goal_type = _GOAL_TYPES.get(str(d.get("goalType") or "").lower(), GoalType.REGULAR)
    return str(d["matchId"]), Scorer(
        player_id=str(d["playerId"]),
        team_id=str(d["teamId"]),
        goals=int(d.get("totalGoals") or 1),
        goal_type=goal_type,
        player_name=d.get("playerName"),
    )


def result_to_record(r: MatchResult) -> dict[str, Any]:
    """Inverse of parse_result, in the results.json layout."""
    return {
        "matchId": r.match_id,
        "homeTeam": r.home_team_id,
        "awayTeam": r.away_team_id,
        "homeScore": r.home_score,
        "awayScore": r.away_score,
        "gameweek": r.round_number,
        "groupId": r.group_id,
        "played": r.played,
    }


# ---------- Loading ----------


def load_tournament(data_dir: str | Path) -> TournamentData:
    """
    Load every file under data_dir. Raises DataFileError for unreadable JSON;
    individual bad records are skipped.
    """
    path = Path(data_dir)
    groups = _parse_all(_records(_read_json(path / GROUPS_FILE, []), "groups"), parse_group, "group")
    teams = _parse_all(_records(_read_json(path / TEAMS_FILE, []), "teams"), parse_team, "team")
    fixtures = _parse_all(_records(_read_json(path / FIXTURES_FILE, []), "fixtures"), parse_fixture_round, "fixture round")
    results = _parse_all(_records(_read_json(path / RESULTS_FILE, []), "results"), parse_result, "result")
    results = validate_results(results, fixtures)
    goals = _parse_all(_records(_read_json(path / GOALS_FILE, []), "goals"), parse_goal, "goal")

    by_match = {r.match_id: r for r in results}
    for match_id, scorer in goals:
        result = by_match.get(match_id)
        if result is None:
            logger.warning("Skipping goal by %s: no result for match %s", scorer.player_id, match_id)
            continue
        result.scorers.append(scorer)

    defaults = _read_json(path / DEFAULTS_FILE, {})
    if not isinstance(defaults, dict):
        raise DataFileError(f"{DEFAULTS_FILE}: expected an object")
    users = [u for u in _records(_read_json(path / USERS_FILE, []), "users") if isinstance(u, dict)]

    data = TournamentData(
        groups=groups,
        teams=teams,
        fixtures=fixtures,
        results=results,
        defaults=defaults,
        users=users,
    )
    logger.info(
        "Loaded %s: %d groups, %d teams, %d rounds, %d results",
        path, len(groups), len(teams), len(fixtures), len(results),
    )
    return data
