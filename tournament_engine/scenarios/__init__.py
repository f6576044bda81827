"""
Next-round what-if analysis: enumerate the results of teams within reach and
classify where the selected team finishes.
"""
from .schemas import (
    Capped,
    Complete,
    Probability,
    Refused,
    RelevantTeam,
    ResultType,
    Scenario,
    ScenarioBucket,
    ScenarioKind,
)
from .enumeration import decode_index, enumerate_combinations
from .engine import (
    ScenarioCancelled,
    analyze_scenarios,
    classify,
    describe_combination,
    explain_tie_break,
    relevant_teams,
    simulate_round,
)

__all__ = [
    "Capped",
    "Complete",
    "Probability",
    "Refused",
    "RelevantTeam",
    "ResultType",
    "Scenario",
    "ScenarioBucket",
    "ScenarioKind",
    "decode_index",
    "enumerate_combinations",
    "ScenarioCancelled",
    "analyze_scenarios",
    "classify",
    "describe_combination",
    "explain_tie_break",
    "relevant_teams",
    "simulate_round",
]
