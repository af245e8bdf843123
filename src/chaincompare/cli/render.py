"""Rich rendering of a reassembled session."""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from chaincompare.events import Outcome
from chaincompare.networks import RESULT_ORDER
from chaincompare.reassembler import ClientSession, LogEntry, logs_for, summarize

MAX_PANEL_LINES = 12


def format_fee(fee: float) -> str:
    """Sub-cent fees keep six decimals so they do not collapse to $0.00."""
    if fee < 0.01:
        return f"${fee:.6f}"
    return f"${fee:.2f}"


def format_entry(entry: LogEntry) -> Text:
    line = Text(f"[{entry.received_at:%H:%M:%S}] ", style="dim")
    line.append(entry.message, style="red" if entry.is_error else "")
    return line


def _panel(title: str, entries: Iterable[LogEntry]) -> Panel:
    lines = [format_entry(entry) for entry in entries][-MAX_PANEL_LINES:]
    body: RenderableType = Group(*lines) if lines else Text("waiting...", style="dim")
    return Panel(body, title=title, border_style="cyan")


def results_table(outcomes: Iterable[Outcome]) -> Table:
    table = Table(title="Results")
    table.add_column("Network")
    table.add_column("Fee", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Status")
    table.add_column("Reference", overflow="fold")
    for outcome in outcomes:
        status = Text("ok", style="green") if outcome.succeeded else Text(outcome.failure_reason or "failed", style="red")
        table.add_row(
            outcome.network.display_name,
            format_fee(outcome.fee),
            f"{outcome.elapsed_seconds:.2f}s",
            status,
            outcome.reference or "-",
        )
    return table


def summary_line(outcomes: Iterable[Outcome]) -> Text:
    summary = summarize(outcomes)
    if summary.cheapest is None or summary.fastest is None:
        return Text("No network completed its transfer.", style="yellow")
    line = Text("Cheapest: ", style="bold")
    line.append(f"{summary.cheapest.network.display_name} ({format_fee(summary.cheapest.fee)})", style="green")
    line.append("  Fastest: ", style="bold")
    line.append(f"{summary.fastest.network.display_name} ({summary.fastest.elapsed_seconds:.2f}s)", style="green")
    return line


def render_session(session: ClientSession) -> RenderableType:
    parts: list[RenderableType] = [_panel(network.display_name, logs_for(session, network)) for network in RESULT_ORDER]
    if session.general:
        parts.insert(0, Group(*(format_entry(entry) for entry in session.general)))
    if session.results is not None:
        parts.append(results_table(session.results))
        parts.append(summary_line(session.results))
    elif session.completed:
        status = "Session aborted." if session.aborted else "Stream closed before results arrived."
        parts.append(Text(status, style="bold red"))
    return Group(*parts)
