"""CLI entry point for chaincompare."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

import httpx
import typer
import uvicorn
from loguru import logger
from rich.console import Console
from rich.live import Live

from chaincompare.cli.render import render_session, results_table, summary_line
from chaincompare.config import Settings, get_settings
from chaincompare.consumer import SessionListener, run_local_session, stream_events, watch
from chaincompare.errors import ConfigurationError
from chaincompare.estimate import estimate_all
from chaincompare.logging_utils import LogProfile, configure_logging
from chaincompare.networks import ALL_SELECTOR, RESULT_ORDER, Network
from chaincompare.probes.factory import build_probes
from chaincompare.reassembler import ClientSession
from chaincompare.server import create_app

app = typer.Typer(
    name="chaincompare",
    help="Compare transfer fees and latency across blockchains.",
    add_completion=False,
    rich_markup_mode="rich",
)


def _load_settings(profile: LogProfile | None = "cli") -> Settings:
    try:
        settings = get_settings()
    except ConfigurationError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(2) from exc
    configure_logging(profile=profile or settings.log_profile, level=settings.log_level)
    return settings


def _resolve_networks(selector: str) -> tuple[Network, ...]:
    if selector.strip().lower() == ALL_SELECTOR:
        return RESULT_ORDER
    network = Network.from_selector(selector)
    if network is None:
        typer.secho(f"Unknown network: {selector}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2)
    return (network,)


SessionRunner = Callable[[SessionListener], Coroutine[Any, Any, ClientSession]]


def _live_session(console: Console, runner: SessionRunner) -> ClientSession:
    with Live(render_session(ClientSession()), console=console, refresh_per_second=8) as live:
        return asyncio.run(runner(lambda session: live.update(render_session(session))))


def _exit_for(session: ClientSession) -> None:
    if session.results is None:
        raise typer.Exit(1)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port"),
) -> None:
    """Serve the HTTP API."""
    settings = _load_settings(profile=None)
    uvicorn.run(create_app(settings), host=host or settings.host, port=port or settings.port)


@app.command()
def run(
    network: str = typer.Option(ALL_SELECTOR, "--network", "-n", help="Network to probe, or 'all'"),
) -> None:
    """Run one comparison in-process and render it live."""
    settings = _load_settings()
    networks = _resolve_networks(network)
    console = Console()

    def runner(on_update: SessionListener) -> Coroutine[Any, Any, ClientSession]:
        return run_local_session(build_probes(settings, networks), on_update)

    session = _live_session(console, runner)
    _exit_for(session)


@app.command("watch")
def watch_command(
    url: str = typer.Argument(..., help="Base URL of a running chaincompare server"),
    timeout: float | None = typer.Option(None, "--timeout", help="Read timeout in seconds"),
) -> None:
    """Consume a remote comparison stream and render it live."""
    _load_settings()
    console = Console()

    def runner(on_update: SessionListener) -> Coroutine[Any, Any, ClientSession]:
        return watch(stream_events(url, timeout_seconds=timeout), on_update)

    try:
        session = _live_session(console, runner)
    except httpx.HTTPError as exc:
        logger.error("watch.failed url={} error={}", url, exc)
        typer.secho(f"Stream failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
    _exit_for(session)


@app.command()
def estimate() -> None:
    """Estimate fees and confirmation times without transacting."""
    settings = _load_settings()
    outcomes = asyncio.run(estimate_all(settings))
    console = Console()
    console.print(results_table(outcomes))
    console.print(summary_line(outcomes))
