"""Command line dashboard for live football matches and bet tickets."""

import logging
from typing import Iterable, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..analysis import GoalInsightRequester, TensionState
from ..config import get_settings
from ..data import LiveOddsClient
from ..data.models import MARKET_NAMES
from ..database import BetTicket, init_db
from ..notifications import SheetWebhook
from ..tracking import (
    BetType,
    LedgerSummary,
    MatchCacheStore,
    MatchHistory,
    Period,
    TicketLedger,
    TicketStatus,
    summarize,
    ticket_profit,
)
from ..utils import setup_logging
from ..workflow import DashboardSnapshot, MatchMonitor

console = Console()
logger = logging.getLogger(__name__)

TENSION_LABELS = {
    TensionState.TENSE: "[bold red]CĂNG THẲNG[/bold red]",
    TensionState.STABLE: "[yellow]ỔN ĐỊNH[/yellow]",
    TensionState.DULL: "[dim]TẺ NHẠT[/dim]",
}

STATUS_LABELS = {
    TicketStatus.PENDING: "[yellow]Chờ[/yellow]",
    TicketStatus.WON: "[green]Thắng[/green]",
    TicketStatus.LOST: "[red]Thua[/red]",
    TicketStatus.PUSH: "Hòa",
    TicketStatus.WON_HALF: "[green]Thắng nửa[/green]",
    TicketStatus.LOST_HALF: "[red]Thua nửa[/red]",
}


def _fail(message: str) -> None:
    console.print(f"[red]❌ Error: {message}[/red]")
    raise click.Abort()


def _monitor(match_id: str, with_history: bool = True) -> MatchMonitor:
    return MatchMonitor(
        match_id,
        cache_store=MatchCacheStore(),
        history=MatchHistory() if with_history else None,
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def cli(verbose):
    """Live football odds dashboard and bet ledger."""
    setup_logging(level="DEBUG" if verbose else None)
    init_db()


# ---------------------------------------------------------------------------
# Matches
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--token", help="b365api token (defaults to B365_TOKEN)")
def events(token):
    """List live football events."""
    client = LiveOddsClient()
    with console.status("Fetching in-play events..."):
        matches = client.fetch_inplay_events(token)

    if not matches:
        console.print("[yellow]No live events (check the token, or demo mode is active).[/yellow]")
        return

    table = Table(title=f"{len(matches)} Live Events")
    table.add_column("ID", style="dim")
    table.add_column("League", style="magenta")
    table.add_column("Match", style="cyan")
    table.add_column("Score", justify="center", style="bold")
    table.add_column("Min", justify="right")

    for match in matches:
        table.add_row(match.id, match.league_name, match.name, match.ss or "-", f"{match.minute}'")

    console.print(table)


def display_snapshot(snap: DashboardSnapshot) -> None:
    """Render one dashboard refresh."""
    match = snap.match
    alert = " ⚠️" if snap.momentum_alert else ""
    console.print(Panel.fit(
        f"[bold]{match.name}[/bold]  {match.ss or '0-0'}  {match.minute}'\n"
        f"{match.league_name}\n"
        f"Tension: {snap.tension:.0f}/100 {TENSION_LABELS[snap.tension_state]}{alert}",
        title=f"Match {match.id}",
    ))

    stats = Table(title="Stats")
    stats.add_column("", style="dim")
    stats.add_column("Home", justify="right")
    stats.add_column("Away", justify="right")
    for label, pair in (
        ("Attacks", snap.stats.attacks),
        ("Dangerous attacks", snap.stats.dangerous_attacks),
        ("Shots on target", snap.stats.on_target),
        ("Shots off target", snap.stats.off_target),
        ("Corners", snap.stats.corners),
        ("Yellow cards", snap.stats.yellowcards),
        ("Red cards", snap.stats.redcards),
    ):
        stats.add_row(label, str(pair[0]), str(pair[1]))
    latest = snap.latest_pressure
    if latest:
        stats.add_row("API score", f"{latest.home_score:.1f}", f"{latest.away_score:.1f}", style="bold")
    console.print(stats)

    lines = Table(title="Main Lines")
    lines.add_column("Market", style="green")
    lines.add_column("Line", justify="right", style="bold")
    lines.add_column("Prices", justify="right")
    lines.add_column("Min", justify="right")
    for market_id, name in MARKET_NAMES.items():
        main = snap.main_lines.get(market_id)
        if main is None:
            continue
        q = main.quote
        prices = f"{q.over:.3f} / {q.under:.3f}" if q.over or q.under else f"{q.home:.3f} / {q.away:.3f}"
        lines.add_row(name, main.handicap, prices, f"{main.minute}'")
    if lines.row_count:
        console.print(lines)

    for band in snap.highlights[-3:]:
        console.print(f"  🔥 {band.side} pressure {band.start_minute}'-{band.end_minute}'")


@cli.command()
@click.argument("match_id")
@click.option("--iterations", "-n", type=int, help="Stop after N refreshes (default: run until interrupted)")
def watch(match_id, iterations):
    """Poll one match and print the dashboard after every refresh."""
    settings = get_settings()
    monitor = _monitor(match_id)
    console.print(f"[bold blue]Watching match {match_id}[/bold blue] (every {settings.poll_interval_seconds}s)")

    try:
        monitor.run(iterations=iterations, on_snapshot=display_snapshot)
    except KeyboardInterrupt:
        console.print("\nStopped.")

    if monitor.match is None:
        console.print(f"[yellow]Match {match_id} not found in the in-play list.[/yellow]")


@cli.command()
@click.argument("match_id")
def insight(match_id):
    """Ask the AI model for a goal probability insight."""
    requester = GoalInsightRequester()
    if not requester.enabled:
        _fail("GEMINI_API_KEY is not configured")

    monitor = _monitor(match_id)
    with console.status("Refreshing match..."):
        monitor.refresh()
    context = monitor.build_context()
    if context is None:
        _fail(f"Match {match_id} not found")

    with console.status("Asking the model..."):
        result = requester.request_insight(context)
    if result is None:
        _fail("The model did not return a usable insight")

    monitor.record_insight(result)
    body = (
        f"[bold]Xác suất bàn thắng: {result.goal_probability}%[/bold] (tin cậy: {result.confidence_level})\n\n"
        f"{result.tactical_insight}"
    )
    if result.reasoning:
        body += f"\n\n[dim]{result.reasoning}[/dim]"
    if result.historical_pattern:
        body += f"\n\n[italic]{result.historical_pattern}[/italic]"
    console.print(Panel(body, title=f"AI Insight · {context.home_name} vs {context.away_name} {context.minute}'"))


# ---------------------------------------------------------------------------
# Tickets
# ---------------------------------------------------------------------------


@cli.group()
def tickets():
    """Record and settle bet tickets."""


def display_tickets(rows: Iterable[BetTicket], title: str) -> LedgerSummary:
    rows = list(rows)
    table = Table(title=title)
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Time")
    table.add_column("Match", style="cyan")
    table.add_column("Bet", style="magenta")
    table.add_column("Line", justify="right")
    table.add_column("Odds", justify="right")
    table.add_column("Stake", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Status", justify="center")
    table.add_column("P/L", justify="right", style="bold")

    for ticket in rows:
        profit = ticket_profit(ticket)
        table.add_row(
            str(ticket.id),
            ticket.created_at.strftime("%d/%m %H:%M") if ticket.created_at else "-",
            ticket.match_name,
            ticket.bet_type,
            ticket.handicap,
            f"{ticket.odds:.2f}",
            f"{ticket.stake:.2f}",
            f"{ticket.minute}'",
            STATUS_LABELS.get(TicketStatus(ticket.status), ticket.status),
            f"{profit:+.2f}",
        )

    summary = summarize(rows)
    if rows:
        console.print(table)
        console.print(
            f"Bets: {summary.total_bets} | Stake: {summary.total_stake:.2f} "
            f"(pending {summary.pending_stake:.2f}) | P/L: {summary.profit_loss:+.2f} | "
            f"Win rate: {summary.win_rate:.1f}% | ROI: {summary.roi:+.1f}%"
        )
    else:
        console.print("[yellow]No tickets.[/yellow]")
    return summary


@tickets.command("add")
@click.argument("match_id")
@click.option(
    "--type", "bet_type",
    type=click.Choice([b.value for b in BetType]),
    required=True,
    help="Bet type",
)
@click.option("--odds", type=float, required=True, help="Decimal odds")
@click.option("--stake", type=float, required=True, help="Stake amount")
@click.option("--handicap", help="Line taken (defaults to the current main line)")
@click.option("--match-name", default="", help="Match label when --handicap is given")
@click.option("--notes", help="Free text note")
def tickets_add(match_id, bet_type, odds, stake, handicap, match_name, notes):
    """Record a pending ticket."""
    ledger = TicketLedger()
    try:
        if handicap:
            ticket = ledger.add_ticket(
                match_id, BetType(bet_type), handicap, odds, stake, match_name=match_name, notes=notes
            )
        else:
            monitor = _monitor(match_id, with_history=False)
            with console.status("Fetching current lines..."):
                monitor.refresh()
            if monitor.match is None:
                _fail(f"Match {match_id} not found; pass --handicap to record it anyway")
            ticket = ledger.add_ticket_for_match(
                monitor.match, BetType(bet_type), odds, stake, monitor.main_lines(), notes=notes
            )
    except ValueError as e:
        _fail(str(e))

    console.print(
        f"✅ Ticket {ticket.id}: {ticket.bet_type} {ticket.handicap} @ {ticket.odds:.2f} x {ticket.stake:.2f}"
    )


@tickets.command("settle")
@click.argument("ticket_id", type=int)
@click.argument("status", type=click.Choice([s.value for s in TicketStatus if s.is_terminal]))
def tickets_settle(ticket_id, status):
    """Settle a pending ticket."""
    try:
        ticket = TicketLedger().update_status(ticket_id, TicketStatus(status))
    except ValueError as e:
        _fail(str(e))
    console.print(f"✅ Ticket {ticket.id} settled: {STATUS_LABELS[TicketStatus(status)]} {ticket_profit(ticket):+.2f}")


@tickets.command("delete")
@click.argument("ticket_id", type=int)
def tickets_delete(ticket_id):
    """Delete a ticket."""
    if not TicketLedger().delete_ticket(ticket_id):
        _fail(f"Ticket not found: {ticket_id}")
    console.print(f"🗑️  Ticket {ticket_id} deleted")


@tickets.command("list")
@click.option("--match", "match_id", help="Only tickets of this match")
def tickets_list(match_id):
    """List tickets, newest first."""
    ledger = TicketLedger()
    if match_id:
        display_tickets(ledger.tickets_for_match(match_id), f"Tickets · match {match_id}")
    else:
        display_tickets(ledger.all_tickets(), "All Tickets")


@tickets.command("history")
@click.option(
    "--period",
    type=click.Choice([p.value for p in Period]),
    default=Period.DAY.value,
    show_default=True,
)
def tickets_history(period):
    """Tickets and P/L for the current day, week or month."""
    display_tickets(TicketLedger().tickets_for_period(Period(period)), f"Tickets · this {period}")


@tickets.command("push")
@click.option("--period", type=click.Choice([p.value for p in Period]), help="Only tickets of this period")
def tickets_push(period):
    """Send tickets to the configured spreadsheet webhook."""
    webhook = SheetWebhook()
    if not webhook.enabled:
        _fail("SHEET_WEBHOOK_URL is not configured")

    ledger = TicketLedger()
    rows = ledger.tickets_for_period(Period(period)) if period else ledger.all_tickets()
    if webhook.push(rows):
        console.print(f"📤 Pushed {len(rows)} tickets")
    else:
        _fail("Could not reach the sheet webhook")


@tickets.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def tickets_import(path):
    """Import a JSON ticket array exported from the browser ledger."""
    try:
        count = TicketLedger().import_legacy(path)
    except ValueError as e:
        _fail(str(e))
    console.print(f"📥 Imported {count} tickets")


# ---------------------------------------------------------------------------
# Viewed matches
# ---------------------------------------------------------------------------


@cli.group()
def history():
    """Matches you have opened."""


@history.command("list")
def history_list():
    """Viewed matches, most recent first."""
    matches = MatchHistory().list()
    if not matches:
        console.print("[yellow]No viewed matches.[/yellow]")
        return

    table = Table(title="Viewed Matches")
    table.add_column("ID", style="dim")
    table.add_column("League", style="magenta")
    table.add_column("Match", style="cyan")
    table.add_column("Score", justify="center")
    table.add_column("State", justify="center")
    for match in matches:
        state = f"[green]LIVE {match.minute}'[/green]" if match.is_live else "[dim]FT[/dim]"
        table.add_row(match.id, match.league_name, match.name, match.ss or "-", state)
    console.print(table)


@history.command("clear")
@click.confirmation_option(prompt="Clear the viewed-match history?")
def history_clear():
    """Forget all viewed matches."""
    removed = MatchHistory().clear()
    console.print(f"🗑️  Removed {removed} matches")


def main(argv: Optional[list] = None) -> None:
    cli(args=argv)


if __name__ == "__main__":
    main()
