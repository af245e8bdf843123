"""Network labels shared by probes, the multiplexer and the client."""

from __future__ import annotations

from enum import Enum


class Network(str, Enum):
    """Known networks, valued by the label carried on streamed events."""

    TRON = "Tron"
    ETHEREUM = "Ethereum"
    XRPL = "XRPL"

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]

    @property
    def selector(self) -> str:
        """Lower-case selector accepted by the HTTP API."""
        return self.value.lower()

    @classmethod
    def from_selector(cls, raw: str) -> Network | None:
        normalized = raw.strip().lower()
        for network in cls:
            if network.selector == normalized:
                return network
        return None


DISPLAY_NAMES: dict[Network, str] = {
    Network.TRON: "USDT (Tron)",
    Network.ETHEREUM: "USDT (Ethereum)",
    Network.XRPL: "Ripple Stablecoin (XRPL)",
}

# Aggregate results are always reported in this order.
RESULT_ORDER: tuple[Network, ...] = (Network.TRON, Network.ETHEREUM, Network.XRPL)

ALL_SELECTOR = "all"
