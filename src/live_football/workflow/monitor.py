"""Polling loop for one live match and the dashboard view derived from it."""

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..analysis.insight import AIInsight, MatchContext
from ..analysis.main_line import MainLineOdds, reconcile_main_line
from ..analysis.pressure import (
    HighlightBand,
    PressureScore,
    ScoreWeights,
    TensionConfig,
    TensionState,
    describe_tension,
    highlight_bands,
    momentum_alert,
    pressure_series,
    tension_level,
)
from ..config import Settings, get_settings
from ..data.b365_client import LiveOddsClient
from ..data.models import MARKET_HANDICAP, MARKET_NAMES, MARKET_OVER_UNDER, MatchInfo, OddsQuotePoint, OddsSnapshot
from ..data.stats_parser import ProcessedStats, parse_stats
from ..tracking.match_history import MatchCacheStore, MatchHistory
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class DashboardSnapshot:
    """Everything the dashboard shows for one match at one poll."""

    match: MatchInfo
    stats: ProcessedStats
    series: List[PressureScore]
    tension: float
    tension_state: TensionState
    momentum_alert: bool
    highlights: List[HighlightBand]
    main_lines: Dict[str, Optional[MainLineOdds]] = field(default_factory=dict)
    odds_history: Dict[str, List[OddsQuotePoint]] = field(default_factory=dict)

    @property
    def over_line(self) -> Optional[MainLineOdds]:
        return self.main_lines.get(MARKET_OVER_UNDER)

    @property
    def handicap_line(self) -> Optional[MainLineOdds]:
        return self.main_lines.get(MARKET_HANDICAP)

    @property
    def latest_pressure(self) -> Optional[PressureScore]:
        return self.series[-1] if self.series else None


class MatchMonitor:
    """Fetch detail then odds for one match on a fixed interval.

    Stats are recorded under the clock minute they were observed at; odds
    histories are replaced per market on every successful fetch, kept sorted
    by (minute, add_time) and trimmed to the retention window.
    """

    def __init__(
        self,
        match_id: str,
        client: Optional[LiveOddsClient] = None,
        settings: Optional[Settings] = None,
        cache_store: Optional[MatchCacheStore] = None,
        history: Optional[MatchHistory] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.match_id = str(match_id)
        self.settings = settings or get_settings()
        self.client = client or LiveOddsClient(self.settings)
        self.cache_store = cache_store
        self.history = history
        self._sleep = sleep
        self._lock = threading.Lock()

        self.weights = ScoreWeights.from_settings(self.settings)
        self.tension_config = TensionConfig.from_settings(self.settings)

        self.match: Optional[MatchInfo] = None
        self.odds_history: Dict[str, List[OddsQuotePoint]] = {}
        self.stats_history: Dict[int, ProcessedStats] = {}
        self.cycles = 0

        if self.cache_store is not None:
            self.stats_history = self.cache_store.load_stats_history(self.match_id)
            if self.stats_history:
                logger.info(f"Restored {len(self.stats_history)} minutes of stats for match {self.match_id}")

    def refresh(self) -> bool:
        """Run one fetch cycle. Returns False when skipped or the match was not found."""
        if not self._lock.acquire(blocking=False):
            logger.info("Refresh already in progress, skipping")
            return False

        try:
            match = self.client.fetch_match_detail(self.match_id)
            if match is not None:
                self.match = match
                # No clock, no minute to file the stats under
                if match.timer and match.timer.tm:
                    self.stats_history[match.minute] = parse_stats(match.stats)
                self._record_view(match)

            odds = self.client.fetch_match_odds(self.match_id)
            if odds is not None:
                self.merge_odds(odds)

            self.cycles += 1
            if match is not None:
                self._save_cache()
            return match is not None
        finally:
            self._lock.release()

    def _record_view(self, match: MatchInfo) -> None:
        if self.history is None:
            return
        try:
            self.history.record_view(match)
        except SQLAlchemyError as e:
            logger.error(f"Failed to record view of match {self.match_id}: {e}")

    def _save_cache(self, analysis: Optional[dict] = None) -> None:
        if self.cache_store is None:
            return
        series = pressure_series(self.stats_history, self.weights)
        try:
            self.cache_store.save(
                self.match_id,
                self.stats_history,
                highlight_bands(series, self.settings.highlight_gap_threshold),
                analysis=analysis,
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to save cache for match {self.match_id}: {e}")

    def merge_odds(self, snapshot: OddsSnapshot) -> None:
        """Replace the history of every market the snapshot carries quotes for."""
        for market_id, quotes in snapshot.markets.items():
            if not quotes:
                continue
            ordered = sorted(quotes, key=lambda q: (q.minute, q.add_time))
            self.odds_history[market_id] = self._retain(ordered)

    def _retain(self, points: List[OddsQuotePoint]) -> List[OddsQuotePoint]:
        cutoff = points[-1].minute - self.settings.history_retention_minutes
        return [p for p in points if p.minute >= cutoff]

    def main_lines(self) -> Dict[str, Optional[MainLineOdds]]:
        """Main line of every known market under the configured strategy."""
        return {
            market_id: reconcile_main_line(
                self.odds_history.get(market_id, []),
                strategy=self.settings.reconciliation_strategy,
                window_points=self.settings.reconciliation_window_points,
                window_minutes=self.settings.reconciliation_window_minutes,
            )
            for market_id in MARKET_NAMES
        }

    def snapshot(self) -> Optional[DashboardSnapshot]:
        if self.match is None:
            return None

        series = pressure_series(self.stats_history, self.weights)
        level = tension_level(series, self.tension_config)
        return DashboardSnapshot(
            match=self.match,
            stats=self.stats_history.get(self.match.minute, parse_stats(self.match.stats)),
            series=series,
            tension=level,
            tension_state=describe_tension(level),
            momentum_alert=momentum_alert(level),
            highlights=highlight_bands(series, self.settings.highlight_gap_threshold),
            main_lines=self.main_lines(),
            odds_history={k: list(v) for k, v in self.odds_history.items()},
        )

    def build_context(self) -> Optional[MatchContext]:
        """Prompt context for an insight request from the latest snapshot."""
        snap = self.snapshot()
        if snap is None:
            return None

        home_goals, away_goals = snap.match.score
        latest = snap.latest_pressure
        return MatchContext(
            match_id=self.match_id,
            minute=snap.match.minute,
            home_name=snap.match.home_name,
            away_name=snap.match.away_name,
            home_goals=home_goals,
            away_goals=away_goals,
            stats=snap.stats,
            home_api=latest.home_score if latest else 0.0,
            away_api=latest.away_score if latest else 0.0,
            over_line=snap.over_line,
            handicap_line=snap.handicap_line,
            tension=snap.tension,
        )

    def record_insight(self, insight: AIInsight) -> None:
        """Keep the latest insight with the match cache."""
        self._save_cache(analysis=insight.model_dump())

    def run(
        self,
        iterations: Optional[int] = None,
        on_snapshot: Optional[Callable[[DashboardSnapshot], None]] = None,
    ) -> None:
        """Poll every ``poll_interval_seconds``; forever when iterations is None."""
        count = 0
        while iterations is None or count < iterations:
            self.refresh()
            snap = self.snapshot()
            if snap is not None and on_snapshot is not None:
                on_snapshot(snap)

            count += 1
            if iterations is not None and count >= iterations:
                break
            self._sleep(self.settings.poll_interval_seconds)
