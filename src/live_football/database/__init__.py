"""Database models and operations."""

from .migrations import CURRENT_VERSION, import_legacy_tickets
from .models import Base, BetTicket, MatchCache, SchemaVersion, ViewedMatch
from .session import get_session, init_db, reset_engine

__all__ = [
    "CURRENT_VERSION",
    "import_legacy_tickets",
    "Base",
    "BetTicket",
    "MatchCache",
    "SchemaVersion",
    "ViewedMatch",
    "get_session",
    "init_db",
    "reset_engine",
]
