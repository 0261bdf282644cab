"""Bet ticket ledger and viewed-match history."""

from .ledger import (
    BetType,
    LedgerSummary,
    Period,
    TicketLedger,
    TicketStatus,
    period_start,
    resolve_handicap,
    settle_profit,
    summarize,
    ticket_profit,
)
from .match_history import MatchCacheStore, MatchHistory

__all__ = [
    "BetType",
    "LedgerSummary",
    "Period",
    "TicketLedger",
    "TicketStatus",
    "period_start",
    "resolve_handicap",
    "settle_profit",
    "summarize",
    "ticket_profit",
    "MatchCacheStore",
    "MatchHistory",
]
