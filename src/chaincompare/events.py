"""Event and outcome models exchanged between probes, server and client."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from chaincompare.errors import MalformedFrameError
from chaincompare.networks import Network

RESULT_MESSAGE = "All tests completed"

WireEvent = dict[str, Any]


class Outcome(BaseModel):
    """Terminal record of one probe run."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    network: Network
    fee: float = Field(ge=0)
    elapsed_seconds: float = Field(ge=0)
    succeeded: bool
    reference: str | None = None
    failure_reason: str | None = None

    @model_validator(mode="after")
    def _reason_matches_status(self) -> Outcome:
        if self.succeeded and self.failure_reason is not None:
            raise ValueError("succeeded outcome cannot carry a failure reason")
        if not self.succeeded and not self.failure_reason:
            raise ValueError("failed outcome requires a failure reason")
        return self

    def to_wire(self) -> WireEvent:
        data: WireEvent = {
            "network": self.network.value,
            "name": self.network.display_name,
            "fee": self.fee,
            "time": self.elapsed_seconds,
            "success": self.succeeded,
        }
        if self.reference is not None:
            data["transactionHash"] = self.reference
        if self.failure_reason is not None:
            data["error"] = self.failure_reason
        return data

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> Outcome:
        return cls(
            network=data["network"],
            fee=data["fee"],
            elapsed_seconds=data["time"],
            succeeded=data["success"],
            reference=data.get("transactionHash"),
            failure_reason=data.get("error"),
        )


class ProgressEvent(BaseModel):
    """One step of narration from a probe (or the session itself)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["progress"] = "progress"
    text: str
    network: Network | None = None
    payload: dict[str, Any] | None = None


class FailureEvent(BaseModel):
    """A probe failure, or a session-level failure when ``network`` is None."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    text: str
    network: Network | None = None


class AggregateResultEvent(BaseModel):
    """Final event of a session carrying every probe outcome."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["aggregate-result"] = "aggregate-result"
    results: tuple[Outcome, ...]


Event = Annotated[ProgressEvent | FailureEvent | AggregateResultEvent, Field(discriminator="kind")]


def event_to_wire(event: Event) -> WireEvent:
    """Convert an event to the JSON shape consumers see."""
    if isinstance(event, AggregateResultEvent):
        return {
            "type": "result",
            "message": RESULT_MESSAGE,
            "data": {"results": [outcome.to_wire() for outcome in event.results]},
        }

    wire: WireEvent = {"type": "log" if isinstance(event, ProgressEvent) else "error", "message": event.text}
    if event.network is not None:
        wire["network"] = event.network.value
    if isinstance(event, ProgressEvent) and event.payload is not None:
        wire["data"] = event.payload
    return wire


def event_from_wire(data: Any) -> Event:
    """Rebuild an event from its wire shape.

    Raises:
        MalformedFrameError: when the object is not a valid wire event.
    """
    if not isinstance(data, Mapping):
        raise MalformedFrameError(f"expected an object, got {type(data).__name__}")

    wire_type = data.get("type")
    try:
        if wire_type == "log":
            return ProgressEvent(text=data.get("message", ""), network=data.get("network"), payload=data.get("data"))
        if wire_type == "error":
            return FailureEvent(text=data.get("message", ""), network=data.get("network"))
        if wire_type == "result":
            results = data["data"]["results"]
            return AggregateResultEvent(results=tuple(Outcome.from_wire(item) for item in results))
    except (KeyError, TypeError, ValidationError) as exc:
        raise MalformedFrameError(f"invalid {wire_type} event: {exc!s}") from exc
    raise MalformedFrameError(f"unknown event type: {wire_type!r}")
