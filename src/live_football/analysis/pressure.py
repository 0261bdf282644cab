"""Attacking pressure ("API score"), gap, tension level and highlight bands.

The API score is a fixed weighted sum of shot, corner and dangerous attack
counts. It is a display heuristic, not a model; the arithmetic is kept exact
so that the same history always renders the same series.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Sequence

import pandas as pd

from ..data.stats_parser import ProcessedStats

MOMENTUM_ALERT_LEVEL = 60.0
TENSE_LEVEL = 70.0
DULL_LEVEL = 30.0


@dataclass(frozen=True)
class ScoreWeights:
    """Weights of the API score."""

    on_target: float = 3.0
    off_target: float = 1.0
    corners: float = 0.7
    dangerous_attacks: float = 0.1

    @classmethod
    def from_settings(cls, settings) -> "ScoreWeights":
        return cls(
            on_target=settings.score_weight_on_target,
            off_target=settings.score_weight_off_target,
            corners=settings.score_weight_corners,
            dangerous_attacks=settings.score_weight_dangerous_attacks,
        )


@dataclass(frozen=True)
class TensionConfig:
    """Parameters of the saturating tension transform."""

    window: int = 5
    scale: float = 2.0
    floor: float = 10.0
    ceiling: float = 100.0
    default: float = 20.0

    @classmethod
    def from_settings(cls, settings) -> "TensionConfig":
        return cls(
            window=settings.tension_window,
            scale=settings.tension_scale,
            floor=settings.tension_floor,
            ceiling=settings.tension_ceiling,
            default=settings.tension_default,
        )


DEFAULT_WEIGHTS = ScoreWeights()
DEFAULT_TENSION = TensionConfig()


@dataclass(frozen=True)
class PressureScore:
    """API score of both sides at one minute."""

    minute: int
    home_score: float
    away_score: float

    @property
    def gap(self) -> float:
        return self.home_score - self.away_score


class TensionState(Enum):
    TENSE = "tense"
    STABLE = "stable"
    DULL = "dull"


@dataclass(frozen=True)
class HighlightBand:
    """A run of consecutive scored minutes where one side dominated."""

    start_minute: int
    end_minute: int
    side: str  # "home" or "away"


def api_score(
    on_target: int,
    off_target: int,
    corners: int,
    dangerous_attacks: int,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> float:
    """Weighted attacking pressure of one side."""
    return (
        (on_target * weights.on_target)
        + (off_target * weights.off_target)
        + (corners * weights.corners)
        + (dangerous_attacks * weights.dangerous_attacks)
    )


def score_minute(
    minute: int,
    stats: ProcessedStats,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> PressureScore:
    """Score both sides from one ProcessedStats."""
    home = api_score(
        stats.on_target[0], stats.off_target[0], stats.corners[0], stats.dangerous_attacks[0], weights
    )
    away = api_score(
        stats.on_target[1], stats.off_target[1], stats.corners[1], stats.dangerous_attacks[1], weights
    )
    return PressureScore(minute=minute, home_score=home, away_score=away)


def pressure_series(
    stats_history: Mapping[int, ProcessedStats],
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> List[PressureScore]:
    """Score every recorded minute, ordered by minute."""
    return [score_minute(minute, stats_history[minute], weights) for minute in sorted(stats_history)]


def tension_from_gaps(gaps: Sequence[float], config: TensionConfig = DEFAULT_TENSION) -> float:
    """Clamp the scaled sum of absolute gaps into [floor, ceiling]."""
    activity = 0.0
    for gap in gaps:
        activity += abs(gap)
    return min(config.ceiling, max(config.floor, activity * config.scale))


def tension_level(series: Sequence[PressureScore], config: TensionConfig = DEFAULT_TENSION) -> float:
    """Tension over the trailing window; the default until the window is full."""
    if len(series) < config.window:
        return config.default
    return tension_from_gaps([score.gap for score in series[-config.window:]], config)


def describe_tension(level: float) -> TensionState:
    if level > TENSE_LEVEL:
        return TensionState.TENSE
    if level < DULL_LEVEL:
        return TensionState.DULL
    return TensionState.STABLE


def momentum_alert(level: float) -> bool:
    """True when the tension level should be flagged to the user."""
    return level > MOMENTUM_ALERT_LEVEL


def highlight_bands(series: Sequence[PressureScore], gap_threshold: float) -> List[HighlightBand]:
    """Group consecutive minutes where |gap| >= threshold for the same side."""
    bands: List[HighlightBand] = []
    start: Optional[PressureScore] = None
    end: Optional[PressureScore] = None
    side: Optional[str] = None

    for score in series:
        current = None
        if abs(score.gap) >= gap_threshold and score.gap != 0:
            current = "home" if score.gap > 0 else "away"

        if current is not None and current == side:
            end = score
            continue

        if side is not None:
            bands.append(HighlightBand(start.minute, end.minute, side))
        start, end, side = (score, score, current) if current else (None, None, None)

    if side is not None:
        bands.append(HighlightBand(start.minute, end.minute, side))
    return bands


def pressure_frame(
    stats_history: Mapping[int, ProcessedStats],
    weights: ScoreWeights = DEFAULT_WEIGHTS,
    config: TensionConfig = DEFAULT_TENSION,
) -> pd.DataFrame:
    """Per-minute table of scores, gap and the tension reached at that minute."""
    series = pressure_series(stats_history, weights)
    frame = pd.DataFrame(
        {
            "home_api": [s.home_score for s in series],
            "away_api": [s.away_score for s in series],
            "gap": [s.gap for s in series],
        },
        index=pd.Index([s.minute for s in series], name="minute"),
        dtype="float64",
    )
    frame["tension"] = (
        frame["gap"]
        .rolling(config.window, min_periods=config.window)
        .apply(lambda gaps: tension_from_gaps(gaps, config), raw=True)
        .fillna(config.default)
    )
    return frame
