"""Wire probes to the real network collaborators."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from chaincompare.clients.ethereum import EthereumClient
from chaincompare.clients.tron import TronClient
from chaincompare.clients.xrpl import XrplClient
from chaincompare.config import Settings
from chaincompare.networks import RESULT_ORDER, Network
from chaincompare.probes.base import ClientFactory, Probe
from chaincompare.probes.contract import ContractProbe
from chaincompare.probes.ledger import LedgerProbe
from chaincompare.probes.metered import MeteredProbe

ProbeFactory = Callable[[Settings, Sequence[Network]], list[Probe]]

PROBE_TYPES: dict[Network, type[Probe]] = {
    Network.XRPL: LedgerProbe,
    Network.ETHEREUM: ContractProbe,
    Network.TRON: MeteredProbe,
}


def client_factory_for(network: Network, settings: Settings) -> ClientFactory:
    if network is Network.XRPL:
        return lambda: XrplClient(
            settings.xrpl_ws_url,
            faucet_host=settings.xrpl_faucet_host,
            payment_xrp=settings.xrpl_payment_xrp,
        )
    if network is Network.ETHEREUM:
        return lambda: EthereumClient(
            settings.ethereum_rpc_urls,
            request_timeout_seconds=settings.ethereum_request_timeout_seconds,
            gas_estimate=settings.ethereum_gas_estimate,
            fallback_gas_price_gwei=settings.ethereum_fallback_gas_price_gwei,
        )
    return lambda: TronClient(
        settings.tron_api_url,
        request_timeout_seconds=settings.tron_request_timeout_seconds,
        fee_trx=settings.tron_fee_trx,
        energy_units=settings.tron_energy_units,
        bandwidth_bytes=settings.tron_bandwidth_bytes,
    )


def build_probe(network: Network, settings: Settings) -> Probe:
    return PROBE_TYPES[network](client_factory_for(network, settings), settings)


def build_probes(settings: Settings, networks: Sequence[Network] = RESULT_ORDER) -> list[Probe]:
    """Create one live probe per requested network."""
    return [build_probe(network, settings) for network in networks]
