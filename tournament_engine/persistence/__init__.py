"""
Persistence layer: JSON tournament files in, results.json out.
No business logic, only read/write interfaces.
"""
from .store import DataFileError, TournamentData, load_tournament
from .repositories import (
    DuplicateResultError,
    InvalidScoreError,
    ResultNotFoundError,
    ResultRepository,
    UnknownMatchError,
)

__all__ = [
    "DataFileError",
    "TournamentData",
    "load_tournament",
    "DuplicateResultError",
    "InvalidScoreError",
    "ResultNotFoundError",
    "ResultRepository",
    "UnknownMatchError",
]
