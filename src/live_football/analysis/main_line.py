"""Main line reconciliation.

Books quote several handicaps for the same market at once and the feed
interleaves them, so the last quote is not necessarily the headline line.
The canonical rule counts handicaps over a trailing window and treats the
most frequent one as the main line.

Usage:
    from live_football.analysis.main_line import reconcile_main_line

    main = reconcile_main_line(history)
    if main:
        print(main.handicap, main.quote.over)
"""

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from ..config import ReconciliationStrategy
from ..data.models import OddsQuotePoint

DEFAULT_WINDOW_POINTS = 15
DEFAULT_WINDOW_MINUTES = 7


@dataclass(frozen=True)
class MainLineOdds:
    """The handicap currently treated as the tradable line and its latest quote."""

    handicap: str
    quote: OddsQuotePoint

    @property
    def minute(self) -> int:
        return self.quote.minute


def _last_point(history: Sequence[OddsQuotePoint]) -> MainLineOdds:
    last = history[-1]
    return MainLineOdds(handicap=last.handicap, quote=last)


def _pick_by_frequency(window: Sequence[OddsQuotePoint]) -> str:
    """Most frequent handicap in the window; ties go to the most recently seen."""
    counts = Counter(point.handicap for point in window)
    last_seen: Dict[str, int] = {}
    for index, point in enumerate(window):
        last_seen[point.handicap] = index
    return max(counts, key=lambda handicap: (counts[handicap], last_seen[handicap]))


def _latest_with_handicap(history: Sequence[OddsQuotePoint], handicap: str) -> OddsQuotePoint:
    for point in reversed(history):
        if point.handicap == handicap:
            return point
    raise ValueError(f"handicap {handicap!r} not present in history")


def _by_frequency(history: Sequence[OddsQuotePoint], window: Sequence[OddsQuotePoint]) -> MainLineOdds:
    handicap = _pick_by_frequency(window)
    return MainLineOdds(handicap=handicap, quote=_latest_with_handicap(history, handicap))


def reconcile_main_line(
    history: Sequence[OddsQuotePoint],
    strategy: ReconciliationStrategy = ReconciliationStrategy.FREQUENCY_POINTS,
    window_points: int = DEFAULT_WINDOW_POINTS,
    window_minutes: int = DEFAULT_WINDOW_MINUTES,
) -> Optional[MainLineOdds]:
    """Determine the main line of a chronologically ordered quote history.

    Args:
        history: Quotes ordered by minute, oldest first
        strategy: Which heuristic to apply
        window_points: Trailing quote count for FREQUENCY_POINTS
        window_minutes: Trailing minute span for FREQUENCY_MINUTES

    Returns:
        MainLineOdds, or None when the history is empty.
        A history shorter than the window yields its last point, so the
        frequency vote only applies once len(history) >= window_points:
        quotes 0.5, 0.5, 0.75 at minutes 10, 12, 14 give 0.5 at minute 12
        with window_points=3 but 0.75 at minute 14 with the default window.
    """
    if not history:
        return None

    strategy = ReconciliationStrategy(strategy)

    if strategy == ReconciliationStrategy.LATEST:
        return _last_point(history)

    if strategy == ReconciliationStrategy.MAX_MINUTE:
        best = history[0]
        for point in history[1:]:
            if point.minute > best.minute:
                best = point
        return MainLineOdds(handicap=best.handicap, quote=best)

    if strategy == ReconciliationStrategy.FREQUENCY_MINUTES:
        cutoff = history[-1].minute - window_minutes
        window = [point for point in history if point.minute > cutoff]
        if len(window) == len(history):
            return _last_point(history)
        return _by_frequency(history, window)

    # Too little history to tell noise from the headline line
    if len(history) < window_points:
        return _last_point(history)
    return _by_frequency(history, history[-window_points:])
