"""chaincompare - side-by-side fee and latency comparison across blockchains."""

from chaincompare.events import AggregateResultEvent, Event, FailureEvent, Outcome, ProgressEvent
from chaincompare.networks import RESULT_ORDER, Network

__version__ = "0.1.0"

__all__ = [
    "RESULT_ORDER",
    "AggregateResultEvent",
    "Event",
    "FailureEvent",
    "Network",
    "Outcome",
    "ProgressEvent",
]
