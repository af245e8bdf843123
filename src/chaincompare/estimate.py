"""Quick fee/latency estimate from a single endpoint round trip per network."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass

import httpx
from loguru import logger

from chaincompare.config import Settings
from chaincompare.events import Outcome
from chaincompare.multiplexer import order_outcomes
from chaincompare.networks import RESULT_ORDER, Network
from chaincompare.probes import ContractProbe, LedgerProbe, MeteredProbe, Probe


@dataclass(frozen=True)
class EstimateRule:
    """Scale one round trip into a confirmation estimate, never below ``floor``."""

    network: Network
    method: str
    multiplier: float
    floor: float
    probe: type[Probe]
    body: bytes | None = None


RULES: dict[Network, EstimateRule] = {
    Network.XRPL: EstimateRule(Network.XRPL, "HEAD", multiplier=1.0, floor=3.0, probe=LedgerProbe),
    Network.ETHEREUM: EstimateRule(
        Network.ETHEREUM, "POST", multiplier=10.0, floor=15.0, probe=ContractProbe, body=b"{}"
    ),
    Network.TRON: EstimateRule(Network.TRON, "HEAD", multiplier=8.0, floor=12.0, probe=MeteredProbe),
}


def _target(settings: Settings, network: Network) -> str:
    return {
        Network.XRPL: settings.xrpl_estimate_url,
        Network.ETHEREUM: settings.ethereum_estimate_url,
        Network.TRON: settings.tron_estimate_url,
    }[network]


async def estimate_network(http: httpx.AsyncClient, settings: Settings, network: Network) -> Outcome:
    rule = RULES[network]
    started = time.monotonic()
    try:
        await http.request(rule.method, _target(settings, network), content=rule.body)
    except httpx.HTTPError as exc:
        logger.info("estimate.unreachable network={} error={}", network.value, exc)
        return Outcome(
            network=network,
            fee=rule.probe.fallback_fee,
            elapsed_seconds=rule.probe.fallback_elapsed,
            succeeded=False,
            failure_reason=f"endpoint unreachable: {exc!s}" if str(exc) else "endpoint unreachable",
        )
    round_trip = time.monotonic() - started
    return Outcome(
        network=network,
        fee=rule.probe.fallback_fee,
        elapsed_seconds=round(max(round_trip * rule.multiplier, rule.floor), 2),
        succeeded=True,
    )


async def estimate_all(
    settings: Settings,
    networks: tuple[Network, ...] = RESULT_ORDER,
    *,
    http: httpx.AsyncClient | None = None,
) -> tuple[Outcome, ...]:
    """Estimate every network concurrently and return outcomes in result order."""
    owns_client = http is None
    client = http or httpx.AsyncClient(timeout=settings.estimate_timeout_seconds)
    try:
        outcomes = await asyncio.gather(*(estimate_network(client, settings, network) for network in networks))
    finally:
        if owns_client:
            await client.aclose()
    return order_outcomes(outcomes)
