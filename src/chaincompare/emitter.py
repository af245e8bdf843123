"""Progress sinks used by probes to publish events."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

from loguru import logger

from chaincompare.events import Event, FailureEvent


class EventSink(Protocol):
    """Fire-and-forget contract between a probe and whoever relays its events."""

    def emit(self, event: Event) -> None: ...


class ChannelEmitter:
    """Push events onto a queue owned by the stream multiplexer."""

    def __init__(self, queue: asyncio.Queue[Any]) -> None:
        self._queue = queue
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, event: Event) -> None:
        if self._closed:
            return
        self._queue.put_nowait(event)

    def close(self) -> None:
        self._closed = True


class LoggingSink:
    """Write events to the log instead of relaying them."""

    def emit(self, event: Event) -> None:
        network = getattr(event, "network", None)
        label = network.value if network is not None else "-"
        if isinstance(event, FailureEvent):
            logger.warning("probe.failure network={} message={}", label, event.text)
            return
        logger.debug("probe.event kind={} network={} message={}", event.kind, label, getattr(event, "text", ""))


class CollectingSink:
    """Keep every event in memory, in emission order."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    def emit(self, event: Event) -> None:
        self.events.append(event)
