"""Derived views over the odds and stats history."""

from .insight import AIInsight, GoalInsightRequester, MatchContext
from .main_line import MainLineOdds, reconcile_main_line
from .pressure import (
    HighlightBand,
    PressureScore,
    ScoreWeights,
    TensionConfig,
    TensionState,
    api_score,
    describe_tension,
    highlight_bands,
    momentum_alert,
    pressure_frame,
    pressure_series,
    tension_level,
)

__all__ = [
    "AIInsight",
    "GoalInsightRequester",
    "MatchContext",
    "MainLineOdds",
    "reconcile_main_line",
    "HighlightBand",
    "PressureScore",
    "ScoreWeights",
    "TensionConfig",
    "TensionState",
    "api_score",
    "describe_tension",
    "highlight_bands",
    "momentum_alert",
    "pressure_frame",
    "pressure_series",
    "tension_level",
]
