"""Application-level exception types for chaincompare."""

from __future__ import annotations


class ChainCompareError(Exception):
    """Base exception for chaincompare."""


class ConfigurationError(ChainCompareError):
    """Raised when settings are missing or inconsistent."""


class ProbeError(ChainCompareError):
    """Base exception for failures inside one probe step."""


class StepTimeoutError(ProbeError):
    """Raised when a probe step does not finish within its allotted time."""

    def __init__(self, step: str, seconds: float) -> None:
        super().__init__(f"{step} timeout")
        self.step = step
        self.seconds = seconds


class EndpointUnavailableError(ProbeError):
    """Raised when no configured endpoint of a network answers."""


class TransportError(ChainCompareError):
    """Base exception for stream framing errors."""


class MalformedFrameError(TransportError):
    """Raised when one stream record cannot be decoded into an event."""


class InvalidNetworkError(ChainCompareError):
    """Raised when a request names a network selector that does not exist."""

    def __init__(self, selector: str) -> None:
        super().__init__(f"Invalid network specified: {selector!r}")
        self.selector = selector


def describe_error(exc: BaseException) -> str:
    """Human-readable reason for a failure, never empty."""
    return str(exc) or type(exc).__name__
