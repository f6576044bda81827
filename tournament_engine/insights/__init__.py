"""
Read-only LLM narrative for next-round scenarios.
Grounded in engine output; never feeds back into standings or probabilities.
"""
from .orchestration import explain_scenarios
from .schemas import ScenarioInsights

__all__ = ["explain_scenarios", "ScenarioInsights"]
