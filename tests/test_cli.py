"""Tests for the command line interface."""

import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner
from rich.console import Console

from live_football.analysis.insight import AIInsight
from live_football.cli import main as cli_main
from live_football.cli.main import cli
from live_football.data.models import MatchInfo, OddsSnapshot
from live_football.tracking.ledger import TicketLedger


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Render tables wide enough that cells are not wrapped."""
    monkeypatch.setattr(cli_main, "console", Console(width=200))


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fake_client(sample_event, sample_inplay_response, sample_odds_response):
    client = MagicMock()
    client.fetch_inplay_events.return_value = [MatchInfo.from_api(sample_event)]
    client.fetch_match_detail.return_value = MatchInfo.from_api(sample_event)
    client.fetch_match_odds.return_value = OddsSnapshot.from_api(sample_odds_response)
    return client


def add_ticket(runner, *extra):
    return runner.invoke(cli, [
        "tickets", "add", "9876543",
        "--type", "Tài", "--odds", "1.95", "--stake", "100",
        *extra,
    ])


class TestCli:

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("events", "watch", "insight", "tickets", "history"):
            assert command in result.output

    def test_events(self, runner, fake_client):
        with patch("live_football.cli.main.LiveOddsClient", return_value=fake_client):
            result = runner.invoke(cli, ["events"])

        assert result.exit_code == 0
        assert "Arsenal vs Chelsea" in result.output
        assert "England Premier League" in result.output

    def test_events_empty(self, runner, fake_client):
        fake_client.fetch_inplay_events.return_value = []
        with patch("live_football.cli.main.LiveOddsClient", return_value=fake_client):
            result = runner.invoke(cli, ["events"])

        assert result.exit_code == 0
        assert "No live events" in result.output

    def test_watch_single_refresh(self, runner, fake_client):
        with patch("live_football.workflow.monitor.LiveOddsClient", return_value=fake_client):
            result = runner.invoke(cli, ["watch", "9876543", "-n", "1"])

        assert result.exit_code == 0
        assert "Arsenal vs Chelsea" in result.output
        assert "Main Lines" in result.output
        assert "Goal Line" in result.output

    def test_insight_requires_key(self, runner):
        result = runner.invoke(cli, ["insight", "9876543"])

        assert result.exit_code != 0
        assert "GEMINI_API_KEY" in result.output

    def test_insight(self, runner, fake_client):
        requester = MagicMock()
        requester.enabled = True
        requester.request_insight.return_value = AIInsight(
            goal_probability=72, confidence_level="cao", tactical_insight="Đội nhà ép sân."
        )
        with patch("live_football.workflow.monitor.LiveOddsClient", return_value=fake_client), \
                patch("live_football.cli.main.GoalInsightRequester", return_value=requester):
            result = runner.invoke(cli, ["insight", "9876543"])

        assert result.exit_code == 0
        assert "72%" in result.output
        assert "Đội nhà ép sân." in result.output


class TestTicketCommands:

    def test_add_with_handicap_and_list(self, runner):
        result = add_ticket(runner, "--handicap", "2.5", "--match-name", "Arsenal vs Chelsea")
        assert result.exit_code == 0

        result = runner.invoke(cli, ["tickets", "list"])
        assert result.exit_code == 0
        assert "Arsenal vs Chelsea" in result.output
        assert "2.5" in result.output

    def test_add_uses_current_main_line(self, runner, fake_client):
        with patch("live_football.workflow.monitor.LiveOddsClient", return_value=fake_client):
            result = runner.invoke(cli, [
                "tickets", "add", "9876543", "--type", "Đội khách", "--odds", "1.9", "--stake", "50",
            ])

        assert result.exit_code == 0
        ticket = TicketLedger().all_tickets()[0]
        assert ticket.handicap == "+0.25"
        assert ticket.minute == 34

    def test_add_rejects_invalid_stake(self, runner):
        result = runner.invoke(cli, [
            "tickets", "add", "1", "--type", "Xỉu", "--odds", "1.9", "--stake", "0", "--handicap", "2.5",
        ])

        assert result.exit_code != 0
        assert "Error" in result.output
        assert TicketLedger().all_tickets() == []

    def test_settle(self, runner):
        add_ticket(runner, "--handicap", "2.5")
        ticket_id = TicketLedger().all_tickets()[0].id

        result = runner.invoke(cli, ["tickets", "settle", str(ticket_id), "won"])
        assert result.exit_code == 0
        assert "+95.00" in result.output

        result = runner.invoke(cli, ["tickets", "settle", str(ticket_id), "lost"])
        assert result.exit_code != 0
        assert "already settled" in result.output

    def test_delete(self, runner):
        add_ticket(runner, "--handicap", "2.5")
        ticket_id = TicketLedger().all_tickets()[0].id

        assert runner.invoke(cli, ["tickets", "delete", str(ticket_id)]).exit_code == 0
        assert runner.invoke(cli, ["tickets", "delete", str(ticket_id)]).exit_code != 0

    def test_history_period(self, runner):
        add_ticket(runner, "--handicap", "2.5")

        result = runner.invoke(cli, ["tickets", "history", "--period", "week"])

        assert result.exit_code == 0
        assert "Bets: 1" in result.output

    def test_push_requires_url(self, runner):
        result = runner.invoke(cli, ["tickets", "push"])

        assert result.exit_code != 0
        assert "SHEET_WEBHOOK_URL" in result.output

    def test_push(self, runner, monkeypatch):
        from live_football.config import get_settings

        add_ticket(runner, "--handicap", "2.5")
        monkeypatch.setenv("SHEET_WEBHOOK_URL", "https://script.example.com/exec")
        get_settings.cache_clear()

        with patch("live_football.notifications.sheets.requests.Session") as session_cls:
            result = runner.invoke(cli, ["tickets", "push"])

        assert result.exit_code == 0
        assert "Pushed 1 tickets" in result.output
        payload = session_cls.return_value.post.call_args.kwargs["json"]
        assert len(payload["tickets"]) == 1

    def test_import(self, runner, tmp_path):
        path = tmp_path / "tickets.json"
        path.write_text(json.dumps([
            {"id": "1760890000000", "matchId": "1", "betType": "Tài", "handicap": "2.5", "odds": 1.9, "stake": 10},
        ]), encoding="utf-8")

        result = runner.invoke(cli, ["tickets", "import", str(path)])

        assert result.exit_code == 0
        assert "Imported 1 tickets" in result.output


class TestHistoryCommands:

    def test_list_and_clear(self, runner, fake_client):
        with patch("live_football.workflow.monitor.LiveOddsClient", return_value=fake_client):
            runner.invoke(cli, ["watch", "9876543", "-n", "1"])

        result = runner.invoke(cli, ["history", "list"])
        assert result.exit_code == 0
        assert "Arsenal vs Chelsea" in result.output
        assert "LIVE 34'" in result.output

        result = runner.invoke(cli, ["history", "clear", "--yes"])
        assert result.exit_code == 0
        assert "Removed 1 matches" in result.output

        result = runner.invoke(cli, ["history", "list"])
        assert "No viewed matches" in result.output
