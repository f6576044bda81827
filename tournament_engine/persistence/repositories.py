"""
Result repository: the only write path into tournament data.
New results are appended; existing ones only have their scores edited.
Changes are kept in memory and written out with export().
"""
from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from tournament_engine.models import MatchResult
from tournament_engine.persistence.store import RESULTS_FILE, TournamentData, result_to_record
from tournament_engine.services.fixtures import find_match

logger = logging.getLogger(__name__)


# ---------- Exceptions ----------


class UnknownMatchError(ValueError):
    """No scheduled match with this id."""


class DuplicateResultError(ValueError):
    """A result for this match is already recorded; edit it instead."""


class ResultNotFoundError(ValueError):
    """No recorded result for this match."""


class InvalidScoreError(ValueError):
    """Scores must be non-negative integers."""


def _check_scores(home_score: int, away_score: int) -> None:
    if home_score < 0 or away_score < 0:
        raise InvalidScoreError(f"Scores must be non-negative, got {home_score}-{away_score}")


# ---------- ResultRepository ----------


class ResultRepository:
    """Append and edit match results of a loaded tournament."""

    def __init__(self, data: TournamentData) -> None:
        self._data = data
        self._lock = threading.Lock()

    def get(self, match_id: str) -> MatchResult | None:
        return next((r for r in self._data.results if r.match_id == match_id), None)

    def list_for_group(self, group_id: str) -> list[MatchResult]:
        return sorted(self._data.results_for(group_id), key=lambda r: (r.round_number, r.match_id))

    def add(self, match_id: str, home_score: int, away_score: int) -> MatchResult:
        """Record the result of a scheduled match. Teams, round and group come from the fixture."""
        _check_scores(home_score, away_score)
        with self._lock:
            found = find_match(self._data.fixtures, match_id)
            if found is None:
                raise UnknownMatchError(f"Match {match_id} is not scheduled")
            if self.get(match_id) is not None:
                raise DuplicateResultError(f"Match {match_id} already has a result")
            rnd, match = found
            result = MatchResult(
                match_id=match.id,
                home_team_id=match.home_team_id,
                away_team_id=match.away_team_id,
                round_number=rnd.number,
                group_id=rnd.group_id,
                home_score=home_score,
                away_score=away_score,
                played=True,
            )
            self._data.results.append(result)
        logger.info("Added result %s: %d-%d", match_id, home_score, away_score)
        return result

    def edit_scores(self, match_id: str, home_score: int, away_score: int) -> MatchResult:
        _check_scores(home_score, away_score)
        with self._lock:
            result = self.get(match_id)
            if result is None:
                raise ResultNotFoundError(f"Match {match_id} has no result to edit")
            result.home_score = home_score
            result.away_score = away_score
        logger.info("Edited result %s: %d-%d", match_id, home_score, away_score)
        return result

    def export_records(self) -> list[dict]:
        with self._lock:
            ordered = sorted(self._data.results, key=lambda r: (r.group_id, r.round_number, r.match_id))
            return [result_to_record(r) for r in ordered]

    def export(self, directory: str | Path) -> Path:
        """Write results.json into directory and return its path."""
        path = Path(directory) / RESULTS_FILE
        path.write_text(json.dumps(self.export_records(), indent=2) + "\n", encoding="utf-8")
        logger.info("Exported %s", path)
        return path
