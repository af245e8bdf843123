"""Smart-contract-network probe: a USDT (ERC-20) transfer on Ethereum."""

from __future__ import annotations

from chaincompare.clients.base import ChainClient, ChainHead, FeeQuote, Identity
from chaincompare.networks import Network
from chaincompare.probes.base import Narrator, Probe, pause, within

USDT_ERC20_ADDRESS = "0xdAC17F958D2ee523a2206206994597C13D831ec7"


class ContractProbe(Probe):
    network = Network.ETHEREUM
    asset = "USDT"
    fallback_fee = 5.4
    fallback_elapsed = 45.0

    async def connect(self, client: ChainClient, say: Narrator) -> ChainHead:
        say("🏦 Bank A (JPMorgan) initiating Ethereum USDT transfer...")
        say("Connecting to Ethereum network...")
        # Every configured endpoint may be tried once before giving up.
        endpoints = max(1, len(self.settings.ethereum_rpc_urls))
        head = await within("Connection", self.settings.ethereum_request_timeout_seconds * endpoints, client.connect())
        say(f"Connected to Ethereum. Block: {head.block_number}", blockNumber=head.block_number)
        return head

    async def prepare_identities(self, client: ChainClient, say: Narrator) -> tuple[Identity, Identity]:
        sender = await client.allocate_identity("sender")
        say(f"Bank A wallet: {sender.address}", address=sender.address)
        receiver = await client.allocate_identity("receiver")
        say(f"🏦 Bank B (HSBC) receiving wallet: {receiver.address}")
        return sender, receiver

    async def prepare_payment(
        self, client: ChainClient, say: Narrator, sender: Identity, receiver: Identity
    ) -> FeeQuote:
        say("💵 Preparing USDT transfer: $10,000")
        say(f"Using USDT contract: {USDT_ERC20_ADDRESS[:10]}...")
        await pause(self.settings.ethereum_build_delay_seconds)
        say("⛽ Estimating gas for ERC-20 transfer...")
        quote = await within("Gas estimate", self.settings.ethereum_request_timeout_seconds, client.quote_fee(sender, receiver))
        say(quote.detail or f"Fee: {quote.amount} {quote.symbol}", fee=self.fee_in_usd(quote))
        return quote

    async def submit(
        self, client: ChainClient, say: Narrator, sender: Identity, receiver: Identity, quote: FeeQuote
    ) -> str:
        say("📤 Broadcasting transaction...")
        reference = await client.submit(sender, receiver, quote)
        await pause(self.settings.ethereum_broadcast_delay_seconds)
        return reference

    async def await_confirmation(self, say: Narrator, reference: str) -> None:
        say("⏳ Waiting for block confirmation (15s avg)...")
        await pause(self.settings.ethereum_confirmation_delay_seconds)
        say("✅ Transaction confirmed!")

    def fee_in_usd(self, quote: FeeQuote) -> float:
        return round(quote.amount * self.settings.eth_usd, 2)
