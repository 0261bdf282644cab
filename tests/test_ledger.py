"""Tests for the ticket ledger."""

import json
from datetime import datetime

import pytest

from live_football.analysis.main_line import MainLineOdds
from live_football.data.models import (
    MARKET_H1_OVER_UNDER,
    MARKET_HANDICAP,
    MARKET_OVER_UNDER,
    MatchInfo,
    OddsQuotePoint,
)
from live_football.tracking.ledger import (
    BetType,
    Period,
    TicketLedger,
    TicketStatus,
    period_start,
    resolve_handicap,
    settle_profit,
    summarize,
)


@pytest.fixture
def ledger():
    return TicketLedger()


def add(ledger, stake=100.0, odds=1.95, created_at=None, match_id="9876543", bet_type=BetType.OVER):
    return ledger.add_ticket(
        match_id, bet_type, "2.5", odds, stake, match_name="Arsenal vs Chelsea", created_at=created_at
    )


def main_line(handicap):
    return MainLineOdds(handicap, OddsQuotePoint(minute=30, handicap=handicap))


class TestSettlement:

    @pytest.mark.parametrize("status,expected", [
        (TicketStatus.WON, 95.0),
        (TicketStatus.LOST, -100.0),
        (TicketStatus.WON_HALF, 47.5),
        (TicketStatus.LOST_HALF, -50.0),
        (TicketStatus.PUSH, 0.0),
        (TicketStatus.PENDING, 0.0),
    ])
    def test_profit(self, status, expected):
        assert settle_profit(status, 100.0, 1.95) == pytest.approx(expected)

    def test_win_at_even_odds(self):
        assert settle_profit(TicketStatus.WON, 50.0, 2.0) == pytest.approx(50.0)

    def test_half_win_at_even_odds(self):
        assert settle_profit(TicketStatus.WON_HALF, 100.0, 2.0) == pytest.approx(50.0)

    def test_summary(self, ledger):
        won = add(ledger)
        lost = add(ledger)
        half = add(ledger, stake=100.0, odds=2.0)
        add(ledger, stake=40.0)
        ledger.update_status(won.id, TicketStatus.WON)
        ledger.update_status(lost.id, TicketStatus.LOST)
        ledger.update_status(half.id, TicketStatus.WON_HALF)

        summary = summarize(ledger.all_tickets())

        assert summary.total_bets == 4
        assert summary.pending == 1
        assert summary.wins == 1
        assert summary.losses == 1
        assert summary.half_wins == 1
        assert summary.total_stake == pytest.approx(340.0)
        assert summary.pending_stake == pytest.approx(40.0)
        assert summary.settled_stake == pytest.approx(300.0)
        assert summary.profit_loss == pytest.approx(95.0 - 100.0 + 50.0)
        assert summary.roi == pytest.approx(45.0 / 300.0 * 100)


class TestTicketLedger:

    def test_add_ticket(self, ledger):
        ticket = add(ledger)

        assert ticket.id is not None
        assert ticket.status == TicketStatus.PENDING.value
        assert ticket.bet_type == "Tài"
        assert ledger.get_ticket(ticket.id).stake == 100.0

    @pytest.mark.parametrize("stake,odds", [(0, 1.9), (-10, 1.9), (100, 0), (100, -1.5)])
    def test_add_rejects_non_positive_values(self, ledger, stake, odds):
        with pytest.raises(ValueError):
            add(ledger, stake=stake, odds=odds)
        assert ledger.all_tickets() == []

    def test_add_requires_handicap(self, ledger):
        with pytest.raises(ValueError):
            ledger.add_ticket("1", BetType.HOME, None, 1.9, 100)

    def test_status_moves_only_from_pending(self, ledger):
        ticket = add(ledger)

        settled = ledger.update_status(ticket.id, TicketStatus.WON)
        assert settled.status == "won"
        assert settled.settled_at is not None

        with pytest.raises(ValueError):
            ledger.update_status(ticket.id, TicketStatus.LOST)
        assert ledger.get_ticket(ticket.id).status == "won"

    def test_cannot_settle_to_pending(self, ledger):
        ticket = add(ledger)

        with pytest.raises(ValueError):
            ledger.update_status(ticket.id, TicketStatus.PENDING)

    def test_unknown_ticket(self, ledger):
        with pytest.raises(ValueError):
            ledger.update_status(999, TicketStatus.WON)
        assert ledger.delete_ticket(999) is False

    def test_delete(self, ledger):
        ticket = add(ledger)

        assert ledger.delete_ticket(ticket.id) is True
        assert ledger.get_ticket(ticket.id) is None

    def test_tickets_for_match(self, ledger):
        first = add(ledger, created_at=datetime(2026, 10, 19, 20, 0))
        add(ledger, match_id="other")
        second = add(ledger, created_at=datetime(2026, 10, 19, 20, 30))

        assert [t.id for t in ledger.tickets_for_match("9876543")] == [first.id, second.id]

    def test_all_tickets_newest_first(self, ledger):
        old = add(ledger, created_at=datetime(2026, 10, 1, 12, 0))
        new = add(ledger, created_at=datetime(2026, 10, 18, 12, 0))

        assert [t.id for t in ledger.all_tickets()] == [new.id, old.id]


class TestPeriods:

    NOW = datetime(2026, 10, 22, 15, 30)  # Thursday

    def test_period_start(self):
        assert period_start(Period.DAY, self.NOW) == datetime(2026, 10, 22)
        assert period_start(Period.WEEK, self.NOW) == datetime(2026, 10, 19)
        assert period_start(Period.MONTH, self.NOW) == datetime(2026, 10, 1)

    def test_week_starts_monday_even_on_sunday(self):
        assert period_start(Period.WEEK, datetime(2026, 10, 25, 23, 0)) == datetime(2026, 10, 19)

    def test_tickets_for_period(self, ledger):
        today = add(ledger, created_at=datetime(2026, 10, 22, 9, 0))
        monday = add(ledger, created_at=datetime(2026, 10, 19, 0, 0))
        last_sunday = add(ledger, created_at=datetime(2026, 10, 18, 23, 59))
        add(ledger, created_at=datetime(2026, 9, 30, 12, 0))

        day = ledger.tickets_for_period(Period.DAY, self.NOW)
        week = ledger.tickets_for_period(Period.WEEK, self.NOW)
        month = ledger.tickets_for_period(Period.MONTH, self.NOW)

        assert [t.id for t in day] == [today.id]
        assert [t.id for t in week] == [today.id, monday.id]
        assert [t.id for t in month] == [today.id, monday.id, last_sunday.id]


class TestResolveHandicap:

    def test_over_under_uses_goal_line(self):
        lines = {MARKET_OVER_UNDER: main_line("2.5"), MARKET_HANDICAP: main_line("-0.25")}

        assert resolve_handicap(BetType.OVER, lines) == "2.5"
        assert resolve_handicap(BetType.UNDER, lines) == "2.5"

    def test_away_side_inverted(self):
        lines = {MARKET_HANDICAP: main_line("-0.25")}

        assert resolve_handicap(BetType.HOME, lines) == "-0.25"
        assert resolve_handicap(BetType.AWAY, lines) == "+0.25"

    def test_away_split_line_reads_first_component(self):
        lines = {MARKET_HANDICAP: main_line("0.5,1.0")}

        assert resolve_handicap(BetType.AWAY, lines) == "-0.50"

    def test_level_line_not_inverted(self):
        assert resolve_handicap(BetType.AWAY, {MARKET_HANDICAP: main_line("0")}) == "0"

    def test_first_half_market(self):
        lines = {MARKET_OVER_UNDER: main_line("2.5"), MARKET_H1_OVER_UNDER: main_line("1.0")}

        assert resolve_handicap(BetType.OVER_H1, lines) == "1.0"

    def test_missing_market(self):
        assert resolve_handicap(BetType.HOME_H1, {}) is None

    def test_add_ticket_for_match(self, ledger, sample_event):
        match = MatchInfo.from_api(sample_event)
        lines = {MARKET_HANDICAP: main_line("-0.5")}

        ticket = ledger.add_ticket_for_match(match, BetType.AWAY, 1.9, 100, lines, notes="value")

        assert ticket.handicap == "+0.50"
        assert ticket.minute == 34
        assert ticket.score_at_bet == "1-0"
        assert ticket.match_name == "Arsenal vs Chelsea"

    def test_add_ticket_for_match_without_line(self, ledger, sample_event):
        match = MatchInfo.from_api(sample_event)

        with pytest.raises(ValueError):
            ledger.add_ticket_for_match(match, BetType.OVER, 1.9, 100, {})


class TestLegacyImport:

    def test_import_browser_export(self, ledger, tmp_path):
        path = tmp_path / "betTickets.json"
        path.write_text(json.dumps([
            {
                "id": "1760890000000",
                "matchId": "9876543",
                "matchName": "Arsenal vs Chelsea",
                "betType": "Tài",
                "handicap": "2.5",
                "odds": 1.95,
                "stake": 100,
                "minute": 34,
                "scoreAtBet": "1-0",
                "status": "won",
                "createdAt": 1760890000000,
            },
            {"id": "1760890100000", "matchId": "9876543", "betType": "Xỉu", "handicap": "2.5", "odds": 1.9,
             "stake": 50, "status": "pending"},
            {"id": "bad", "matchId": "1", "handicap": "", "odds": 1.9, "stake": 10},
        ]), encoding="utf-8")

        assert ledger.import_legacy(path) == 2

        tickets = ledger.tickets_for_match("9876543")
        assert [t.bet_type for t in tickets] == ["Tài", "Xỉu"]
        assert tickets[0].created_at == datetime.fromtimestamp(1760890000)
        assert summarize(tickets).profit_loss == pytest.approx(95.0)

    def test_import_rejects_non_array(self, ledger, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"betTickets": []}), encoding="utf-8")

        with pytest.raises(ValueError):
            ledger.import_legacy(path)
