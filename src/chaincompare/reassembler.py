"""Client-side reassembly of a decoded event stream.

The session is an immutable value; ``reduce_event`` and ``close_session``
return a new one for every change so renderers never observe a partial
update.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Literal

from chaincompare.events import AggregateResultEvent, Event, FailureEvent, Outcome
from chaincompare.networks import RESULT_ORDER, Network

EntryKind = Literal["progress", "failure"]


@dataclass(frozen=True)
class LogEntry:
    message: str
    network: Network | None
    kind: EntryKind
    received_at: datetime

    @property
    def is_error(self) -> bool:
        return self.kind == "failure"


def _empty_logs() -> Mapping[Network, tuple[LogEntry, ...]]:
    return MappingProxyType({network: () for network in RESULT_ORDER})


@dataclass(frozen=True)
class ClientSession:
    """Everything a consumer has learned about one session so far."""

    logs: Mapping[Network, tuple[LogEntry, ...]] = field(default_factory=_empty_logs)
    general: tuple[LogEntry, ...] = ()
    results: tuple[Outcome, ...] | None = None
    completed: bool = False
    aborted: bool = False

    @property
    def event_count(self) -> int:
        return len(self.general) + sum(len(entries) for entries in self.logs.values())


def logs_for(session: ClientSession, network: Network) -> tuple[LogEntry, ...]:
    return session.logs.get(network, ())


def reduce_event(session: ClientSession, event: Event, received_at: datetime | None = None) -> ClientSession:
    """Fold one event into the session."""
    if session.completed:
        return session

    if isinstance(event, AggregateResultEvent):
        return replace(session, results=event.results, completed=True)

    entry = LogEntry(
        message=event.text,
        network=event.network,
        kind=event.kind,
        received_at=received_at or datetime.now(),
    )
    if event.network is None:
        aborted = session.aborted or isinstance(event, FailureEvent)
        return replace(session, general=(*session.general, entry), aborted=aborted)

    logs = dict(session.logs)
    logs[event.network] = (*logs.get(event.network, ()), entry)
    return replace(session, logs=MappingProxyType(logs))


def reduce_events(session: ClientSession, events: Iterable[Event]) -> ClientSession:
    for event in events:
        session = reduce_event(session, event)
    return session


def close_session(session: ClientSession) -> ClientSession:
    """Mark the session complete because the transport closed."""
    if session.completed:
        return session
    return replace(session, completed=True)


@dataclass(frozen=True)
class Summary:
    cheapest: Outcome | None
    fastest: Outcome | None


def summarize(outcomes: Iterable[Outcome]) -> Summary:
    """Pick the cheapest and fastest of the successful outcomes."""
    succeeded = [outcome for outcome in outcomes if outcome.succeeded]
    if not succeeded:
        return Summary(cheapest=None, fastest=None)
    return Summary(
        cheapest=min(succeeded, key=lambda outcome: outcome.fee),
        fastest=min(succeeded, key=lambda outcome: outcome.elapsed_seconds),
    )
