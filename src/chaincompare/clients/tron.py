"""Tron collaborator backed by the TronGrid HTTP API."""

from __future__ import annotations

import base58
import httpx
from eth_account import Account

from chaincompare.clients.base import ChainHead, ClientLifecycle, FeeQuote, Identity
from chaincompare.errors import EndpointUnavailableError

TRON_ADDRESS_PREFIX = b"\x41"


def tron_address(evm_address: str) -> str:
    """Encode a 20-byte account address as a TRON base58check address."""
    raw = TRON_ADDRESS_PREFIX + bytes.fromhex(evm_address.removeprefix("0x"))
    return base58.b58encode_check(raw).decode("ascii")


class TronClient(ClientLifecycle):
    """Read the current block; fee comes from the configured resource quote."""

    def __init__(
        self,
        api_url: str,
        *,
        request_timeout_seconds: float = 10.0,
        fee_trx: float = 1.2,
        energy_units: int = 31_895,
        bandwidth_bytes: int = 345,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._fee_trx = fee_trx
        self._energy_units = energy_units
        self._bandwidth_bytes = bandwidth_bytes
        self._http = http or httpx.AsyncClient(timeout=request_timeout_seconds)
        self._block_number: int | None = None

    async def connect(self) -> ChainHead:
        response = await self._http.post(
            f"{self._api_url}/wallet/getnowblock",
            headers={"Content-Type": "application/json"},
        )
        if response.is_error:
            raise EndpointUnavailableError(f"Tron API error: {response.status_code}")
        data = response.json()
        number = data.get("block_header", {}).get("raw_data", {}).get("number")
        self._block_number = int(number) if number is not None else None
        return ChainHead(endpoint=self._api_url, block_number=self._block_number)

    async def allocate_identity(self, role: str) -> Identity:
        account = Account.create()
        return Identity(role=role, address=tron_address(account.address), handle=account)

    async def quote_fee(self, sender: Identity, receiver: Identity) -> FeeQuote:
        return FeeQuote(
            amount=self._fee_trx,
            symbol="TRX",
            detail=f"Energy: {self._energy_units:,} units, Bandwidth: {self._bandwidth_bytes} bytes",
        )

    async def submit(self, sender: Identity, receiver: Identity, quote: FeeQuote) -> str:
        if self._block_number:
            return f"TRC20-{self._block_number}"
        return "TRC20-simulated"

    async def close(self) -> None:
        await self._http.aclose()
