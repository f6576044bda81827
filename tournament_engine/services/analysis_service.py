"""
Analysis service: runs the engine over one group of a loaded tournament.

Every call recomputes from the current results, so an added or edited result
is reflected on the next request. Scenario analysis can be run off the event
loop with cancellation.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

from tournament_engine.config import EngineConfig
from tournament_engine.models import FixtureRound, MatchResult, StandingRow, Team
from tournament_engine.persistence.store import TournamentData
from tournament_engine.prediction.predictor import (
    MatchPrediction,
    MatchPredictor,
    is_prediction_correct,
    prediction_accuracy,
)
from tournament_engine.prediction.profiles import build_profiles, profile_for
from tournament_engine.scenarios.engine import analyze_scenarios
from tournament_engine.scenarios.schemas import Scenario
from tournament_engine.services.fixtures import (
    current_round,
    find_next_round,
    fixture_round,
    remaining_match_counts,
    remaining_round_count,
)
from tournament_engine.services.forecast import SeasonForecast, project_season
from tournament_engine.services.scorers import LikelyScorer, ScorerStats, likely_scorers, scorer_table
from tournament_engine.services.standings import compute_standings, is_group_completed

logger = logging.getLogger(__name__)


# ---------- Exceptions ----------


class GroupNotFoundError(ValueError):
    """No group with this id."""


class TeamNotFoundError(ValueError):
    """No team with this id in the group."""


class RoundNotFoundError(ValueError):
    """The group has no fixture round with this number."""


# ---------- Results ----------


@dataclass
class MatchForecast:
    """Prediction for one scheduled match, graded when the result is known."""
    match_id: str
    home_team_id: str
    away_team_id: str
    prediction: MatchPrediction
    result: MatchResult | None = None
    correct: bool | None = None
    home_scorers: list[LikelyScorer] = field(default_factory=list)
    away_scorers: list[LikelyScorer] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_id": self.match_id,
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "prediction": self.prediction.to_dict(),
            "result": self.result.to_dict() if self.result else None,
            "correct": self.correct,
            "home_scorers": [s.to_dict() for s in self.home_scorers],
            "away_scorers": [s.to_dict() for s in self.away_scorers],
        }


@dataclass
class RoundPredictions:
    group_id: str
    round_number: int
    matches: list[MatchForecast] = field(default_factory=list)

    @property
    def accuracy(self) -> dict[str, Any]:
        return prediction_accuracy([
            (m.prediction, m.result) for m in self.matches if m.result is not None
        ])

    def to_dict(self) -> dict[str, Any]:
        return {
            "group_id": self.group_id,
            "round_number": self.round_number,
            "matches": [m.to_dict() for m in self.matches],
            "accuracy": self.accuracy,
        }


# ---------- AnalysisService ----------


class AnalysisService:
    """
    Group-level queries over TournamentData.
    Holds no derived state; results may change between calls.
    """

    def __init__(self, data: TournamentData, config: EngineConfig | None = None) -> None:
        self._data = data
        self.config = (config or EngineConfig()).with_defaults_file(data.defaults)

    @property
    def data(self) -> TournamentData:
        return self._data

    def _teams(self, group_id: str) -> list[Team]:
        if self._data.group(group_id) is None:
            raise GroupNotFoundError(f"Group {group_id} not found")
        return self._data.teams_in(group_id)

    def standings(self, group_id: str, exclude_round: int | None = None) -> list[StandingRow]:
        teams = self._teams(group_id)
        return compute_standings(teams, self._data.results_for(group_id), exclude_round)

    def next_round(self, group_id: str) -> FixtureRound | None:
        self._teams(group_id)
        return find_next_round(self._data.fixtures_for(group_id), self._data.results_for(group_id))

    def group_status(self, group_id: str) -> dict[str, Any]:
        teams = self._teams(group_id)
        fixtures = self._data.fixtures_for(group_id)
        results = self._data.results_for(group_id)
        return {
            "group_id": group_id,
            "completed": is_group_completed(teams, fixtures, results),
            "current_round": current_round(fixtures, results),
            "remaining_rounds": remaining_round_count(fixtures, results),
        }

    # ---------- Scenarios ----------

    def scenarios(
        self,
        group_id: str,
        team_id: str,
        points_gap_limit: int | None = None,
        cancel_check: Callable[[], bool] | None = None,
    ) -> list[Scenario]:
        teams = self._teams(group_id)
        if not any(t.id == team_id for t in teams):
            raise TeamNotFoundError(f"Team {team_id} is not in group {group_id}")
        return analyze_scenarios(
            team_id,
            self.standings(group_id),
            self.next_round(group_id),
            points_gap_limit=points_gap_limit,
            config=self.config,
            cancel_check=cancel_check,
        )

    async def scenarios_async(
        self,
        group_id: str,
        team_id: str,
        points_gap_limit: int | None = None,
    ) -> list[Scenario]:
        """
        Run scenarios() in a worker thread. Cancelling the awaiting task stops
        the enumeration at its next poll; ScenarioCancelled stays in the worker.
        """
        cancelled = threading.Event()
        try:
            return await asyncio.to_thread(
                self.scenarios, group_id, team_id, points_gap_limit, cancelled.is_set,
            )
        except asyncio.CancelledError:
            cancelled.set()
            logger.info("Scenario analysis for %s/%s cancelled", group_id, team_id)
            raise

    # ---------- Predictions ----------

    def predict_round(self, group_id: str, round_number: int | None = None) -> RoundPredictions:
        """
        Predict every match of a round from the table as it stood before it.
        Defaults to the group's current round.
        """
        self._teams(group_id)
        fixtures = self._data.fixtures_for(group_id)
        results = self._data.results_for(group_id)
        number = round_number if round_number is not None else current_round(fixtures, results)
        rnd = fixture_round(fixtures, number) if number is not None else None
        if rnd is None:
            raise RoundNotFoundError(f"Group {group_id} has no round {round_number}")

        before = self.standings(group_id, exclude_round=rnd.number)
        profiles = build_profiles(before, self.config.form_window)
        predictor = MatchPredictor(self.config.home_advantage)
        table = scorer_table(results, self._data.teams_in(group_id))
        by_match = {r.match_id: r for r in results}

        out = RoundPredictions(group_id=group_id, round_number=rnd.number)
        for m in rnd.matches:
            prediction = predictor.predict(
                profile_for(m.home_team_id, profiles),
                profile_for(m.away_team_id, profiles),
            )
            result = by_match.get(m.id)
            out.matches.append(MatchForecast(
                match_id=m.id,
                home_team_id=m.home_team_id,
                away_team_id=m.away_team_id,
                prediction=prediction,
                result=result,
                correct=is_prediction_correct(prediction, result) if result else None,
                home_scorers=likely_scorers(m.home_team_id, prediction.predicted_home_goals, table),
                away_scorers=likely_scorers(m.away_team_id, prediction.predicted_away_goals, table),
            ))
        return out

    # ---------- Forecast ----------

    def forecast(self, group_id: str) -> SeasonForecast:
        teams = self._teams(group_id)
        fixtures = self._data.fixtures_for(group_id)
        results = self._data.results_for(group_id)
        standings = compute_standings(teams, results)
        projections = project_season(
            standings,
            build_profiles(standings, self.config.form_window),
            remaining_match_counts(teams, fixtures, results),
            self.config,
        )
        return SeasonForecast(
            group_id=group_id,
            projections=projections,
            remaining_rounds=remaining_round_count(fixtures, results),
        )

    def scorers(self, group_id: str) -> list[ScorerStats]:
        teams = self._teams(group_id)
        return scorer_table(self._data.results_for(group_id), teams)
