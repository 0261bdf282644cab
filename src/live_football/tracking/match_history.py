"""Viewed-match history and the per-match cache of derived data."""

import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..analysis.pressure import HighlightBand
from ..data.models import MatchInfo
from ..data.stats_parser import ProcessedStats
from ..database import MatchCache, ViewedMatch, get_session

logger = logging.getLogger(__name__)


class MatchHistory:
    """Matches the user opened, most recent first."""

    def record_view(self, match: MatchInfo, viewed_at: Optional[datetime] = None) -> ViewedMatch:
        """Insert or refresh the entry for a match with its latest snapshot."""
        viewed_at = viewed_at or datetime.now()
        with get_session() as session:
            entry = session.get(ViewedMatch, match.id)
            if entry is None:
                entry = ViewedMatch(match_id=match.id, payload=match.to_dict(), viewed_at=viewed_at)
                session.add(entry)
            else:
                entry.payload = match.to_dict()
                entry.viewed_at = viewed_at
        return entry

    def list(self) -> List[MatchInfo]:
        with get_session() as session:
            entries = session.query(ViewedMatch).order_by(ViewedMatch.viewed_at.desc()).all()
            return [MatchInfo.from_api(entry.payload) for entry in entries]

    def clear(self) -> int:
        """Forget every viewed match. Returns the number removed."""
        with get_session() as session:
            removed = session.query(ViewedMatch).delete()
        logger.info(f"Cleared {removed} viewed matches")
        return removed


class MatchCacheStore:
    """Stats history, highlight bands and last insight per match."""

    def save(
        self,
        match_id: str,
        stats_history: Mapping[int, ProcessedStats],
        highlights: Sequence[HighlightBand] = (),
        analysis: Optional[Dict[str, Any]] = None,
    ) -> None:
        stats_payload = {str(minute): stats.to_dict() for minute, stats in stats_history.items()}
        highlight_payload = [asdict(band) for band in highlights]
        with get_session() as session:
            cache = session.get(MatchCache, str(match_id))
            if cache is None:
                cache = MatchCache(match_id=str(match_id))
                session.add(cache)
            cache.stats_history = stats_payload
            cache.highlights = highlight_payload
            if analysis is not None:
                cache.analysis = analysis
            cache.updated_at = datetime.now()

    def load_stats_history(self, match_id: str) -> Dict[int, ProcessedStats]:
        with get_session() as session:
            cache = session.get(MatchCache, str(match_id))
            if cache is None or not cache.stats_history:
                return {}
            return {
                int(minute): ProcessedStats.from_dict(stats)
                for minute, stats in cache.stats_history.items()
            }

    def load_highlights(self, match_id: str) -> List[HighlightBand]:
        with get_session() as session:
            cache = session.get(MatchCache, str(match_id))
            if cache is None:
                return []
            return [HighlightBand(**band) for band in cache.highlights or []]

    def load_analysis(self, match_id: str) -> Optional[Dict[str, Any]]:
        with get_session() as session:
            cache = session.get(MatchCache, str(match_id))
            return cache.analysis if cache else None
