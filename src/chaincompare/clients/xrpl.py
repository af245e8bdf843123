"""XRPL testnet collaborator backed by xrpl-py."""

from __future__ import annotations

from loguru import logger
from xrpl.asyncio.clients import AsyncWebsocketClient
from xrpl.asyncio.ledger import get_latest_validated_ledger_sequence
from xrpl.asyncio.transaction import autofill, submit_and_wait
from xrpl.asyncio.wallet import generate_faucet_wallet
from xrpl.models.transactions import Payment
from xrpl.utils import xrp_to_drops
from xrpl.wallet import Wallet

from chaincompare.clients.base import ChainHead, ClientLifecycle, FeeQuote, Identity

DROPS_PER_XRP = 1_000_000
DEFAULT_FEE_DROPS = 10


class XrplClient(ClientLifecycle):
    """Real payment on the XRPL testnet; the sender is funded by the faucet."""

    def __init__(self, url: str, *, faucet_host: str | None = None, payment_xrp: int = 10) -> None:
        self._url = url
        self._faucet_host = faucet_host
        self._payment_xrp = payment_xrp
        self._client = AsyncWebsocketClient(url)

    async def connect(self) -> ChainHead:
        await self._client.open()
        sequence = await get_latest_validated_ledger_sequence(self._client)
        return ChainHead(endpoint=self._url, block_number=sequence)

    async def allocate_identity(self, role: str) -> Identity:
        wallet = Wallet.create()
        return Identity(role=role, address=wallet.address, handle=wallet)

    async def fund(self, identity: Identity) -> Identity:
        wallet = await generate_faucet_wallet(self._client, wallet=identity.handle, faucet_host=self._faucet_host)
        return Identity(role=identity.role, address=wallet.address, handle=wallet)

    async def quote_fee(self, sender: Identity, receiver: Identity) -> FeeQuote:
        payment = Payment(
            account=sender.address,
            amount=xrp_to_drops(self._payment_xrp),
            destination=receiver.address,
        )
        prepared = await autofill(payment, self._client)
        drops = int(prepared.fee or DEFAULT_FEE_DROPS)
        return FeeQuote(amount=drops / DROPS_PER_XRP, symbol="XRP", detail=f"{drops} drops", handle=prepared)

    async def submit(self, sender: Identity, receiver: Identity, quote: FeeQuote) -> str:
        response = await submit_and_wait(quote.handle, self._client, wallet=sender.handle)
        return str(response.result["hash"])

    async def close(self) -> None:
        if self._client.is_open():
            await self._client.close()
            logger.debug("xrpl.client.closed url={}", self._url)
