"""
Results worker package — batch calculation and publication of cycle results.
"""

from recognition_engine.results_worker.publisher import ResultsPublisher, ThemeOutcome
from recognition_engine.results_worker.runner import (
    CycleCalculationResult,
    RunnerConfig,
    calculate_cycle_results,
)

__all__ = [
    "ResultsPublisher",
    "ThemeOutcome",
    "CycleCalculationResult",
    "RunnerConfig",
    "calculate_cycle_results",
]
