"""Probe skeleton shared by every network."""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, ClassVar

from loguru import logger

from chaincompare.clients.base import ChainClient, ChainHead, FeeQuote, Identity
from chaincompare.config import Settings
from chaincompare.emitter import EventSink
from chaincompare.errors import StepTimeoutError, describe_error
from chaincompare.events import FailureEvent, Outcome, ProgressEvent
from chaincompare.networks import Network

ClientFactory = Callable[[], ChainClient]


@dataclass(frozen=True)
class Receipt:
    fee_usd: float
    reference: str | None


@dataclass(frozen=True)
class Narrator:
    """Emit progress events labelled with one network."""

    network: Network
    sink: EventSink

    def __call__(self, text: str, **payload: Any) -> None:
        self.sink.emit(ProgressEvent(text=text, network=self.network, payload=payload or None))

    def fail(self, reason: str) -> None:
        self.sink.emit(FailureEvent(text=reason, network=self.network))


async def within[T](step: str, seconds: float | None, awaitable: Awaitable[T]) -> T:
    """Await one step, turning an expired deadline into a step failure."""
    if seconds is None:
        return await awaitable
    try:
        async with asyncio.timeout(seconds):
            return await awaitable
    except TimeoutError as exc:
        raise StepTimeoutError(step, seconds) from exc


async def pause(seconds: float) -> None:
    """Simulated latency; zero skips the suspension entirely."""
    if seconds > 0:
        await asyncio.sleep(seconds)


class Probe(ABC):
    """Run one network's transfer scenario and report a single outcome.

    Subclasses fill in the five steps; ``run`` owns timing, resource release
    and failure conversion so that it never raises.
    """

    network: ClassVar[Network]
    asset: ClassVar[str]
    fallback_fee: ClassVar[float]
    fallback_elapsed: ClassVar[float]

    def __init__(self, client_factory: ClientFactory, settings: Settings) -> None:
        self._client_factory = client_factory
        self.settings = settings

    async def run(self, sink: EventSink) -> Outcome:
        say = Narrator(self.network, sink)
        started = time.monotonic()
        try:
            async with self._client_factory() as client:
                receipt = await self._execute(client, say)
            elapsed = time.monotonic() - started
            outcome = Outcome(
                network=self.network,
                fee=receipt.fee_usd,
                elapsed_seconds=round(elapsed, 2),
                succeeded=True,
                reference=receipt.reference,
            )
        except Exception as exc:
            reason = describe_error(exc)
            elapsed = time.monotonic() - started
            logger.warning("probe.failed network={} elapsed={:.2f} reason={}", self.network.value, elapsed, reason)
            say.fail(reason)
            return Outcome(
                network=self.network,
                fee=self.fallback_fee,
                elapsed_seconds=round(elapsed, 2),
                succeeded=False,
                failure_reason=reason,
            )

        say(f"🏦 Bank B received {self.asset}! Total time: {elapsed:.2f}s", elapsed=outcome.elapsed_seconds)
        logger.info("probe.done network={} elapsed={:.2f} fee={}", self.network.value, elapsed, outcome.fee)
        return outcome

    async def _execute(self, client: ChainClient, say: Narrator) -> Receipt:
        await self.connect(client, say)
        sender, receiver = await self.prepare_identities(client, say)
        quote = await self.prepare_payment(client, say, sender, receiver)
        reference = await self.submit(client, say, sender, receiver, quote)
        await self.await_confirmation(say, reference)
        return Receipt(fee_usd=self.fee_in_usd(quote), reference=reference)

    @abstractmethod
    async def connect(self, client: ChainClient, say: Narrator) -> ChainHead: ...

    @abstractmethod
    async def prepare_identities(self, client: ChainClient, say: Narrator) -> tuple[Identity, Identity]: ...

    @abstractmethod
    async def prepare_payment(
        self, client: ChainClient, say: Narrator, sender: Identity, receiver: Identity
    ) -> FeeQuote: ...

    @abstractmethod
    async def submit(
        self, client: ChainClient, say: Narrator, sender: Identity, receiver: Identity, quote: FeeQuote
    ) -> str: ...

    @abstractmethod
    async def await_confirmation(self, say: Narrator, reference: str) -> None: ...

    @abstractmethod
    def fee_in_usd(self, quote: FeeQuote) -> float: ...
