"""Match and odds data: API client, payload models and the stats parser."""

from .b365_client import LiveOddsClient, is_demo_token
from .models import MatchInfo, OddsQuotePoint, OddsSnapshot, Timer
from .stats_parser import ProcessedStats, parse_stats

__all__ = [
    "LiveOddsClient",
    "is_demo_token",
    "MatchInfo",
    "OddsQuotePoint",
    "OddsSnapshot",
    "Timer",
    "ProcessedStats",
    "parse_stats",
]
