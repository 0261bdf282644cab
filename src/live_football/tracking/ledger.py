"""Bet ticket ledger: recording, settlement arithmetic and period reports."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from ..data.models import (
    MARKET_H1_HANDICAP,
    MARKET_H1_OVER_UNDER,
    MARKET_HANDICAP,
    MARKET_OVER_UNDER,
    MatchInfo,
)
from ..database import BetTicket, get_session, import_legacy_tickets
from ..utils.odds import invert_handicap, win_profit

logger = logging.getLogger(__name__)


class BetType(str, Enum):
    """The eight ticket types offered by the entry form."""

    OVER = "Tài"
    UNDER = "Xỉu"
    HOME = "Đội nhà"
    AWAY = "Đội khách"
    OVER_H1 = "Tài H1"
    UNDER_H1 = "Xỉu H1"
    HOME_H1 = "Đội nhà H1"
    AWAY_H1 = "Đội khách H1"

    @property
    def is_first_half(self) -> bool:
        return self.value.endswith("H1")

    @property
    def is_over_under(self) -> bool:
        return self in (BetType.OVER, BetType.UNDER, BetType.OVER_H1, BetType.UNDER_H1)

    @property
    def is_away(self) -> bool:
        return self in (BetType.AWAY, BetType.AWAY_H1)

    @property
    def market(self) -> str:
        """Odds market the handicap of this bet type is read from."""
        if self.is_over_under:
            return MARKET_H1_OVER_UNDER if self.is_first_half else MARKET_OVER_UNDER
        return MARKET_H1_HANDICAP if self.is_first_half else MARKET_HANDICAP


class TicketStatus(str, Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    PUSH = "push"
    WON_HALF = "won_half"
    LOST_HALF = "lost_half"

    @property
    def is_terminal(self) -> bool:
        return self != TicketStatus.PENDING


class Period(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


def settle_profit(status: TicketStatus, stake: float, odds: float) -> float:
    """Net profit of a ticket in the given status.

    won -> stake * (odds - 1); lost -> -stake; push and pending -> 0;
    half outcomes are half of the full ones.
    """
    status = TicketStatus(status)
    if status == TicketStatus.WON:
        return win_profit(stake, odds)
    if status == TicketStatus.LOST:
        return -stake
    if status == TicketStatus.WON_HALF:
        return win_profit(stake, odds) / 2
    if status == TicketStatus.LOST_HALF:
        return -stake / 2
    return 0.0


def ticket_profit(ticket: BetTicket) -> float:
    return settle_profit(TicketStatus(ticket.status), ticket.stake, ticket.odds)


def period_start(period: Period, now: Optional[datetime] = None) -> datetime:
    """Start of the current day, week (Monday) or month."""
    now = now or datetime.now()
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    period = Period(period)
    if period == Period.DAY:
        return start_of_day
    if period == Period.WEEK:
        return start_of_day - timedelta(days=start_of_day.weekday())
    return start_of_day.replace(day=1)


def resolve_handicap(bet_type: BetType, main_lines: Mapping[str, Optional[object]]) -> Optional[str]:
    """Current handicap for a bet type, read from the main line of its market.

    ``main_lines`` maps market id to a MainLineOdds (or None). Away bets
    see the handicap market from the other side.
    """
    bet_type = BetType(bet_type)
    main_line = main_lines.get(bet_type.market)
    if main_line is None:
        return None
    handicap = main_line.handicap
    if bet_type.is_away:
        return invert_handicap(handicap)
    return handicap


@dataclass
class LedgerSummary:
    """Totals over a set of tickets."""

    total_bets: int = 0
    pending: int = 0
    wins: int = 0
    losses: int = 0
    pushes: int = 0
    half_wins: int = 0
    half_losses: int = 0
    total_stake: float = 0.0
    pending_stake: float = 0.0
    settled_stake: float = 0.0
    profit_loss: float = 0.0

    @property
    def win_rate(self) -> float:
        """Win rate as percentage of decided tickets, half outcomes included."""
        won = self.wins + self.half_wins
        decided = won + self.losses + self.half_losses
        return (won / decided * 100) if decided > 0 else 0.0

    @property
    def roi(self) -> float:
        """Return on settled stake as percentage."""
        return (self.profit_loss / self.settled_stake * 100) if self.settled_stake > 0 else 0.0


_COUNTERS = {
    TicketStatus.PENDING: "pending",
    TicketStatus.WON: "wins",
    TicketStatus.LOST: "losses",
    TicketStatus.PUSH: "pushes",
    TicketStatus.WON_HALF: "half_wins",
    TicketStatus.LOST_HALF: "half_losses",
}


def summarize(tickets: Iterable[BetTicket]) -> LedgerSummary:
    summary = LedgerSummary()
    for ticket in tickets:
        status = TicketStatus(ticket.status)
        summary.total_bets += 1
        summary.total_stake += ticket.stake
        counter = _COUNTERS[status]
        setattr(summary, counter, getattr(summary, counter) + 1)
        if status == TicketStatus.PENDING:
            summary.pending_stake += ticket.stake
        else:
            summary.settled_stake += ticket.stake
            summary.profit_loss += ticket_profit(ticket)
    return summary


class TicketLedger:
    """CRUD over the bet_tickets table."""

    def add_ticket(
        self,
        match_id: str,
        bet_type: BetType,
        handicap: Optional[str],
        odds: float,
        stake: float,
        match_name: str = "",
        minute: int = 0,
        score_at_bet: Optional[str] = None,
        notes: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> BetTicket:
        """Record a new pending ticket.

        Raises:
            ValueError: stake or odds not positive, or no handicap
        """
        if stake is None or odds is None or stake <= 0 or odds <= 0:
            raise ValueError("Stake and odds must be positive numbers")
        if not handicap:
            raise ValueError(f"No current handicap for bet type {BetType(bet_type).value}")

        ticket = BetTicket(
            match_id=str(match_id),
            match_name=match_name,
            bet_type=BetType(bet_type).value,
            handicap=handicap,
            odds=float(odds),
            stake=float(stake),
            minute=minute,
            score_at_bet=score_at_bet,
            status=TicketStatus.PENDING.value,
            notes=notes or None,
            created_at=created_at or datetime.now(),
        )
        with get_session() as session:
            session.add(ticket)
            session.flush()

        logger.info(f"Recorded ticket {ticket.id}: {ticket.bet_type} {ticket.handicap} @ {ticket.odds} x {ticket.stake}")
        return ticket

    def add_ticket_for_match(
        self,
        match: MatchInfo,
        bet_type: BetType,
        odds: float,
        stake: float,
        main_lines: Mapping[str, Optional[object]],
        notes: Optional[str] = None,
    ) -> BetTicket:
        """Record a ticket at the current main line of a live match."""
        return self.add_ticket(
            match_id=match.id,
            bet_type=bet_type,
            handicap=resolve_handicap(bet_type, main_lines),
            odds=odds,
            stake=stake,
            match_name=match.name,
            minute=match.minute,
            score_at_bet=match.ss,
            notes=notes,
        )

    def get_ticket(self, ticket_id: int) -> Optional[BetTicket]:
        with get_session() as session:
            return session.get(BetTicket, ticket_id)

    def update_status(self, ticket_id: int, status: TicketStatus) -> BetTicket:
        """Settle a pending ticket.

        Raises:
            ValueError: unknown ticket, ticket already settled, or target status pending
        """
        status = TicketStatus(status)
        if not status.is_terminal:
            raise ValueError("A ticket can only be settled to a terminal status")

        with get_session() as session:
            ticket = session.get(BetTicket, ticket_id)
            if ticket is None:
                raise ValueError(f"Ticket not found: {ticket_id}")
            if TicketStatus(ticket.status).is_terminal:
                raise ValueError(f"Ticket {ticket_id} is already settled as {ticket.status}")
            ticket.status = status.value
            ticket.settled_at = datetime.now()

        logger.info(f"Settled ticket {ticket_id} as {status.value} ({ticket_profit(ticket):+.2f})")
        return ticket

    def delete_ticket(self, ticket_id: int) -> bool:
        with get_session() as session:
            ticket = session.get(BetTicket, ticket_id)
            if ticket is None:
                return False
            session.delete(ticket)
        logger.info(f"Deleted ticket {ticket_id}")
        return True

    def tickets_for_match(self, match_id: str) -> List[BetTicket]:
        """Tickets of one match in the order they were placed."""
        with get_session() as session:
            return (
                session.query(BetTicket)
                .filter(BetTicket.match_id == str(match_id))
                .order_by(BetTicket.created_at, BetTicket.id)
                .all()
            )

    def all_tickets(self) -> List[BetTicket]:
        """Every ticket, most recent first."""
        with get_session() as session:
            return (
                session.query(BetTicket)
                .order_by(BetTicket.created_at.desc(), BetTicket.id.desc())
                .all()
            )

    def tickets_for_period(self, period: Period, now: Optional[datetime] = None) -> List[BetTicket]:
        """Tickets created since the start of the current day, week or month."""
        start = period_start(period, now)
        with get_session() as session:
            return (
                session.query(BetTicket)
                .filter(BetTicket.created_at >= start)
                .order_by(BetTicket.created_at.desc(), BetTicket.id.desc())
                .all()
            )

    def import_legacy(self, path: Path) -> int:
        """Import a JSON ticket array exported from the browser ledger.

        Raises:
            ValueError: file does not hold a JSON array
        """
        with open(path, encoding="utf-8") as f:
            records = json.load(f)
        if not isinstance(records, list):
            raise ValueError(f"Expected a JSON array of tickets in {path}")

        with get_session() as session:
            return import_legacy_tickets(session, records)
