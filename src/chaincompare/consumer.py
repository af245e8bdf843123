"""Consume a comparison stream, remote over HTTP or in-process."""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterable, Callable, Sequence
from contextlib import aclosing

import httpx
from loguru import logger

from chaincompare.events import Event
from chaincompare.multiplexer import StreamMultiplexer
from chaincompare.probes.base import Probe
from chaincompare.reassembler import ClientSession, close_session, reduce_event
from chaincompare.transport import FrameDecoder

STREAM_PATH = "/api/test-transaction-stream"

SessionListener = Callable[[ClientSession], None]


async def decode_stream(
    chunks: AsyncIterable[bytes] | AsyncIterable[str], decoder: FrameDecoder | None = None
) -> AsyncGenerator[Event, None]:
    """Decode events out of raw transport chunks as they arrive."""
    decoder = decoder or FrameDecoder()
    async for chunk in chunks:
        for event in decoder.feed(chunk):
            yield event
    for event in decoder.flush():
        yield event


async def stream_events(
    base_url: str,
    *,
    http: httpx.AsyncClient | None = None,
    timeout_seconds: float | None = None,
) -> AsyncGenerator[Event, None]:
    """Open one session on the server and yield its events."""
    owns_client = http is None
    client = http or httpx.AsyncClient(base_url=base_url, timeout=timeout_seconds)
    try:
        async with client.stream("POST", STREAM_PATH) as response:
            response.raise_for_status()
            async for event in decode_stream(response.aiter_bytes()):
                yield event
    finally:
        if owns_client:
            await client.aclose()


async def watch(
    events: AsyncGenerator[Event, None],
    on_update: SessionListener | None = None,
) -> ClientSession:
    """Reassemble a session from an event stream, notifying after each event.

    The stream is closed once the result arrives.
    """
    session = ClientSession()
    async with aclosing(events):
        async for event in events:
            session = reduce_event(session, event)
            if on_update is not None:
                on_update(session)
            if session.completed:
                break
    session = close_session(session)
    if on_update is not None:
        on_update(session)
    if session.results is None:
        logger.warning("session.incomplete aborted={} events={}", session.aborted, session.event_count)
    return session


async def run_local_session(probes: Sequence[Probe], on_update: SessionListener | None = None) -> ClientSession:
    """Run a session in-process through the same framing a remote consumer sees."""
    frames = StreamMultiplexer(probes).relay()
    try:
        return await watch(decode_stream(frames), on_update)
    finally:
        await frames.aclose()
