"""
Match outcome prediction from heuristic team profiles.
"""
from .predictor import (
    MatchPrediction,
    MatchPredictor,
    ResultLabel,
    is_prediction_correct,
    predict_match,
    prediction_accuracy,
)
from .profiles import (
    build_profile,
    build_profiles,
    default_profile,
    profile_for,
)

__all__ = [
    "MatchPrediction",
    "MatchPredictor",
    "ResultLabel",
    "is_prediction_correct",
    "predict_match",
    "prediction_accuracy",
    "build_profile",
    "build_profiles",
    "default_profile",
    "profile_for",
]
