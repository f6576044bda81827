"""
Service layer: standings, fixtures, forecasts and scorer statistics.
analysis_service ties them to loaded tournament data; import it directly.
"""
from .standings import compute_standings, is_group_completed, position_of, standings_sort_key
from .fixtures import current_round, find_next_round, remaining_match_counts
from .forecast import SeasonForecast, SeasonProjection, project_season
from .scorers import likely_scorers, scorer_table

__all__ = [
    "compute_standings",
    "is_group_completed",
    "position_of",
    "standings_sort_key",
    "current_round",
    "find_next_round",
    "remaining_match_counts",
    "SeasonForecast",
    "SeasonProjection",
    "project_season",
    "likely_scorers",
    "scorer_table",
]
