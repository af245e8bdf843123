"""Ethereum (Sepolia) collaborator backed by web3.py."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from eth_account import Account
from loguru import logger
from web3 import AsyncWeb3, Web3

from chaincompare.clients.base import ChainHead, ClientLifecycle, FeeQuote, Identity
from chaincompare.errors import EndpointUnavailableError


class EthereumClient(ClientLifecycle):
    """Read chain state from the first healthy RPC endpoint.

    The ERC-20 transfer itself is not broadcast: fee and reference are derived
    from live gas price and block height.
    """

    def __init__(
        self,
        rpc_urls: Sequence[str],
        *,
        request_timeout_seconds: float = 10.0,
        gas_estimate: int = 65_000,
        fallback_gas_price_gwei: float = 25.0,
    ) -> None:
        self._rpc_urls = list(rpc_urls)
        self._request_timeout = request_timeout_seconds
        self._gas_estimate = gas_estimate
        self._fallback_gas_price = Web3.to_wei(fallback_gas_price_gwei, "gwei")
        self._w3: AsyncWeb3 | None = None
        self._head: ChainHead | None = None

    async def connect(self) -> ChainHead:
        last_error: Exception | None = None
        for url in self._rpc_urls:
            w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(url, request_kwargs={"timeout": self._request_timeout}))
            try:
                block_number = await asyncio.wait_for(w3.eth.block_number, timeout=self._request_timeout)
            except Exception as exc:
                # Endpoints fail in provider-specific ways; try the next one.
                last_error = exc
                logger.info("ethereum.endpoint.unavailable url={} error={}", url, exc)
                await w3.provider.disconnect()
                continue
            self._w3 = w3
            self._head = ChainHead(endpoint=url, block_number=int(block_number))
            return self._head
        if last_error is not None:
            raise EndpointUnavailableError(f"All Ethereum RPC endpoints failed: {last_error!s}") from last_error
        raise EndpointUnavailableError("All Ethereum RPC endpoints failed")

    async def allocate_identity(self, role: str) -> Identity:
        account = Account.create()
        return Identity(role=role, address=account.address, handle=account)

    async def quote_fee(self, sender: Identity, receiver: Identity) -> FeeQuote:
        gas_price = await self._connected().eth.gas_price or self._fallback_gas_price
        cost_wei = self._gas_estimate * gas_price
        gwei = Web3.from_wei(gas_price, "gwei")
        return FeeQuote(
            amount=float(Web3.from_wei(cost_wei, "ether")),
            symbol="ETH",
            detail=f"Gas required: {self._gas_estimate} units @ {gwei} gwei",
        )

    async def submit(self, sender: Identity, receiver: Identity, quote: FeeQuote) -> str:
        block_number = self._head.block_number if self._head is not None else 0
        return f"0x{block_number or 0:064x}"

    async def close(self) -> None:
        if self._w3 is not None:
            await self._w3.provider.disconnect()
            self._w3 = None

    def _connected(self) -> AsyncWeb3:
        if self._w3 is None:
            raise EndpointUnavailableError("Ethereum client is not connected")
        return self._w3
