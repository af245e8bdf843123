"""Fan concurrent probe narration into one ordered event stream."""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Sequence

from loguru import logger

from chaincompare.emitter import ChannelEmitter, EventSink
from chaincompare.errors import describe_error
from chaincompare.events import AggregateResultEvent, Event, FailureEvent, Outcome, ProgressEvent
from chaincompare.logging_utils import session_context
from chaincompare.networks import RESULT_ORDER, Network
from chaincompare.probes.base import Probe
from chaincompare.transport import encode_event

STARTING_MESSAGE = "Starting blockchain tests..."

DisconnectCheck = Callable[[], Awaitable[bool]]

_DONE = object()
# Probes left running after their consumer went away; referenced until they finish.
_DETACHED: set[asyncio.Future[list[Outcome]]] = set()


def order_outcomes(outcomes: Iterable[Outcome], order: Sequence[Network] = RESULT_ORDER) -> tuple[Outcome, ...]:
    """Sort outcomes into the fixed network order, independent of completion order."""
    rank = {network: index for index, network in enumerate(order)}
    return tuple(sorted(outcomes, key=lambda outcome: rank.get(outcome.network, len(rank))))


async def collect_outcomes(
    probes: Sequence[Probe], sink: EventSink, order: Sequence[Network] = RESULT_ORDER
) -> tuple[Outcome, ...]:
    """Run probes concurrently without streaming and return their ordered outcomes."""
    outcomes = await asyncio.gather(*(probe.run(sink) for probe in probes))
    return order_outcomes(outcomes, order)


def _release(future: asyncio.Future[list[Outcome]]) -> None:
    _DETACHED.discard(future)
    if not future.cancelled() and future.exception() is not None:
        logger.warning("session.detached.error error={}", future.exception())


class StreamMultiplexer:
    """Owns the output channel of exactly one session.

    Probe events are relayed in arrival order; the only ordering promise
    across probes is that the aggregate result comes last.
    """

    def __init__(
        self,
        probes: Sequence[Probe],
        *,
        order: Sequence[Network] = RESULT_ORDER,
        session_id: str | None = None,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex[:8]
        self._probes = list(probes)
        self._order = tuple(order)
        self._started = False
        self._log = logger.bind(session=self.session_id)
        self.history: list[Event] = []
        self.outcomes: tuple[Outcome, ...] | None = None
        self.disconnected = False

    async def events(self) -> AsyncIterator[Event]:
        """Yield the starting event, every probe event, then the aggregate result."""
        if self._started:
            raise RuntimeError("a multiplexer relays exactly one session")
        self._started = True

        queue: asyncio.Queue[object] = asyncio.Queue()
        emitter = ChannelEmitter(queue)
        yield self._record(ProgressEvent(text=STARTING_MESSAGE))

        with session_context(self.session_id):
            tasks = [
                asyncio.create_task(probe.run(emitter), name=f"probe:{probe.network.value}") for probe in self._probes
            ]
        joined: asyncio.Future[list[Outcome]] = asyncio.gather(*tasks)
        joined.add_done_callback(lambda _: queue.put_nowait(_DONE))
        self._log.info("session.started probes={}", [probe.network.value for probe in self._probes])

        try:
            while True:
                item = await queue.get()
                if item is _DONE:
                    break
                yield self._record(item)  # type: ignore[arg-type]
        finally:
            emitter.close()
            if not joined.done():
                _DETACHED.add(joined)
                joined.add_done_callback(_release)
                self._log.info("session.detached pending={}", sum(not task.done() for task in tasks))

        self.outcomes = order_outcomes(joined.result(), self._order)
        self._log.info("session.completed succeeded={}", sum(outcome.succeeded for outcome in self.outcomes))
        yield self._record(AggregateResultEvent(results=self.outcomes))

    async def relay(self, is_disconnected: DisconnectCheck | None = None) -> AsyncIterator[str]:
        """Encode every event into a frame as soon as it arrives.

        A session-level error ends the stream with one unlabelled failure
        frame and no aggregate result.
        """
        stream = self.events()
        try:
            async for event in stream:
                if is_disconnected is not None and await is_disconnected():
                    self.disconnected = True
                    self._log.warning("session.consumer.disconnected events={}", len(self.history))
                    break
                yield encode_event(event)
        except Exception as exc:
            self._log.opt(exception=exc).error("session.relay.error")
            failure = FailureEvent(text=describe_error(exc))
            self.history.append(failure)
            yield encode_event(failure)
        finally:
            await stream.aclose()

    def _record(self, event: Event) -> Event:
        self.history.append(event)
        return event
