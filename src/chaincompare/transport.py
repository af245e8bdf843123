"""Event-stream framing.

Each event travels as one UTF-8 record::

    data: {"type": "log", "message": "...", "network": "Tron"}\n\n

JSON encoding escapes every newline, so the blank-line terminator never
appears inside a record and a consumer can cut records out of an arbitrary
sequence of byte chunks.
"""

from __future__ import annotations

import json

from loguru import logger

from chaincompare.errors import MalformedFrameError
from chaincompare.events import Event, event_from_wire, event_to_wire

FRAME_PREFIX = "data: "
FRAME_TERMINATOR = "\n\n"

_PREFIX_BYTES = FRAME_PREFIX.encode("utf-8")
_TERMINATOR_BYTES = FRAME_TERMINATOR.encode("utf-8")


def encode_event(event: Event) -> str:
    payload = json.dumps(event_to_wire(event), ensure_ascii=False)
    return f"{FRAME_PREFIX}{payload}{FRAME_TERMINATOR}"


def encode_events(events: list[Event]) -> bytes:
    return "".join(encode_event(event) for event in events).encode("utf-8")


def decode_record(record: bytes) -> Event | None:
    """Decode one terminator-free record.

    Returns None for records that carry no event (blank lines, SSE comments,
    other fields).

    Raises:
        MalformedFrameError: when a data record is not a valid event.
    """
    record = record.strip(b"\r\n")
    if not record.startswith(_PREFIX_BYTES):
        return None
    try:
        text = record[len(_PREFIX_BYTES) :].decode("utf-8")
        data = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedFrameError(str(exc)) from exc
    return event_from_wire(data)


class FrameDecoder:
    """Incremental decoder tolerant of arbitrary chunk boundaries."""

    def __init__(self) -> None:
        self._buffer = bytearray()
        self.dropped = 0

    @property
    def pending(self) -> int:
        """Number of buffered bytes that do not yet form a complete record."""
        return len(self._buffer)

    def feed(self, chunk: bytes | str) -> list[Event]:
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        self._buffer.extend(chunk)

        events: list[Event] = []
        while True:
            end = self._buffer.find(_TERMINATOR_BYTES)
            if end < 0:
                break
            record = bytes(self._buffer[:end])
            del self._buffer[: end + len(_TERMINATOR_BYTES)]
            event = self._decode(record)
            if event is not None:
                events.append(event)
        return events

    def flush(self) -> list[Event]:
        """Decode whatever is left once the transport has closed."""
        record = bytes(self._buffer)
        self._buffer.clear()
        if not record.strip():
            return []
        event = self._decode(record)
        return [event] if event is not None else []

    def _decode(self, record: bytes) -> Event | None:
        try:
            return decode_record(record)
        except MalformedFrameError as exc:
            self.dropped += 1
            logger.warning("stream.frame.dropped size={} error={}", len(record), exc)
            return None
