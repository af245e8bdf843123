"""Deterministic collaborators for probe, multiplexer and server tests."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from chaincompare.clients.base import ChainHead, ClientLifecycle, FeeQuote, Identity
from chaincompare.config import Settings
from chaincompare.networks import Network
from chaincompare.probes.base import Probe
from chaincompare.probes.factory import PROBE_TYPES, ProbeFactory

QUOTES: dict[Network, FeeQuote] = {
    Network.XRPL: FeeQuote(amount=0.00012, symbol="XRP", detail="120 drops"),
    Network.ETHEREUM: FeeQuote(amount=0.001625, symbol="ETH", detail="Gas required: 65000 units @ 25 gwei"),
    Network.TRON: FeeQuote(
        amount=1.2, symbol="TRX", detail="Energy: 31,895 units, Bandwidth: 345 bytes"
    ),
}

REFERENCES: dict[Network, str] = {
    Network.XRPL: "E3FE6EA3D48F0C2B639448020EA4F03D4F4F8FFDB243A852A0F59177921B4879",
    Network.ETHEREUM: "0x" + "00" * 28 + "0063f2a1",
    Network.TRON: "TRC20-61234567",
}


def make_settings(**overrides: object) -> Settings:
    """Settings with every simulated latency removed and short deadlines."""
    values: dict[str, object] = {
        "xrpl_connect_timeout_seconds": 1.0,
        "xrpl_fund_timeout_seconds": 1.0,
        "xrpl_submit_timeout_seconds": 1.0,
        "xrpl_confirmation_delay_seconds": 0.0,
        "ethereum_rpc_urls": ["http://eth.invalid"],
        "ethereum_request_timeout_seconds": 1.0,
        "ethereum_build_delay_seconds": 0.0,
        "ethereum_broadcast_delay_seconds": 0.0,
        "ethereum_confirmation_delay_seconds": 0.0,
        "tron_request_timeout_seconds": 1.0,
        "tron_build_delay_seconds": 0.0,
        "tron_resource_delay_seconds": 0.0,
        "tron_broadcast_delay_seconds": 0.0,
        "tron_confirmation_delay_seconds": 0.0,
        "estimate_timeout_seconds": 1.0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[arg-type]


class FakeChainClient(ClientLifecycle):
    """Scripted client: can be slowed down, fail, or hang at a named step.

    Step names are ``connect``, ``allocate_identity``, ``fund``,
    ``quote_fee`` and ``submit``. ``close_error`` makes ``close()`` raise
    after counting the call.
    """

    def __init__(
        self,
        network: Network,
        *,
        fail_on: str | None = None,
        error: Exception | None = None,
        hang_on: str | None = None,
        delays: dict[str, float] | None = None,
        close_error: Exception | None = None,
    ) -> None:
        self.network = network
        self.fail_on = fail_on
        self.error = error
        self.hang_on = hang_on
        self.delays = delays or {}
        self.close_error = close_error
        self.calls: list[str] = []
        self.close_count = 0

    async def _step(self, name: str) -> None:
        self.calls.append(name)
        delay = self.delays.get(name, 0.0)
        if delay:
            await asyncio.sleep(delay)
        if name == self.hang_on:
            await asyncio.Event().wait()
        if name == self.fail_on:
            raise self.error or RuntimeError(f"{name} failed")

    async def connect(self) -> ChainHead:
        await self._step("connect")
        return ChainHead(endpoint=f"fake://{self.network.selector}", block_number=6_543_210)

    async def allocate_identity(self, role: str) -> Identity:
        await self._step("allocate_identity")
        return Identity(role=role, address=f"{self.network.selector}-{role}")

    async def fund(self, identity: Identity) -> Identity:
        await self._step("fund")
        return identity

    async def quote_fee(self, sender: Identity, receiver: Identity) -> FeeQuote:
        await self._step("quote_fee")
        return QUOTES[self.network]

    async def submit(self, sender: Identity, receiver: Identity, quote: FeeQuote) -> str:
        await self._step("submit")
        return REFERENCES[self.network]

    async def close(self) -> None:
        self.close_count += 1
        if self.close_error is not None:
            raise self.close_error


class ClientRecorder:
    """Build fake clients per network and remember every instance."""

    def __init__(self, **per_network: dict[str, object]) -> None:
        self._options = {Network(label): options for label, options in per_network.items()}
        self.clients: dict[Network, list[FakeChainClient]] = {network: [] for network in Network}

    def factory_for(self, network: Network):
        def build() -> FakeChainClient:
            client = FakeChainClient(network, **self._options.get(network, {}))  # type: ignore[arg-type]
            self.clients[network].append(client)
            return client

        return build

    def probe_factory(self) -> ProbeFactory:
        def build_probes(settings: Settings, networks: Sequence[Network]) -> list[Probe]:
            return [PROBE_TYPES[network](self.factory_for(network), settings) for network in networks]

        return build_probes


def fake_probe_factory(**per_network: dict[str, object]) -> ProbeFactory:
    return ClientRecorder(**per_network).probe_factory()
