"""Database models for the live football dashboard."""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, Float, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

Base = declarative_base()


class SchemaVersion(Base):
    """Single-row table recording which migrations have run."""

    __tablename__ = "schema_version"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    migrated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)


class BetTicket(Base):
    """A user-recorded wager."""

    __tablename__ = "bet_tickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    match_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    match_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    bet_type: Mapped[str] = mapped_column(String(20), nullable=False)  # BetType value
    handicap: Mapped[str] = mapped_column(String(20), nullable=False)
    odds: Mapped[float] = mapped_column(Float, nullable=False)  # decimal
    stake: Mapped[float] = mapped_column(Float, nullable=False)
    minute: Mapped[int] = mapped_column(Integer, default=0)
    score_at_bet: Mapped[Optional[str]] = mapped_column(String(20))
    status: Mapped[str] = mapped_column(String(12), nullable=False, default="pending", index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, index=True)
    settled_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "match_id": self.match_id,
            "match_name": self.match_name,
            "bet_type": self.bet_type,
            "handicap": self.handicap,
            "odds": self.odds,
            "stake": self.stake,
            "minute": self.minute,
            "score_at_bet": self.score_at_bet,
            "status": self.status,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "settled_at": self.settled_at.isoformat() if self.settled_at else None,
        }


class ViewedMatch(Base):
    """A match the user opened, with the last snapshot seen."""

    __tablename__ = "viewed_matches"

    match_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    payload: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    viewed_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, index=True)


class MatchCache(Base):
    """Per-match derived data kept between sessions."""

    __tablename__ = "match_caches"

    match_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    stats_history: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)  # minute -> stats
    highlights: Mapped[list] = mapped_column(JSON, default=list)
    analysis: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)  # last AI insight
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)
