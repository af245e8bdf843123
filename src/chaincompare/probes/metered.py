"""Resource-metered-network probe: a USDT (TRC-20) transfer on Tron."""

from __future__ import annotations

from chaincompare.clients.base import ChainClient, ChainHead, FeeQuote, Identity
from chaincompare.networks import Network
from chaincompare.probes.base import Narrator, Probe, pause, within

USDT_TRC20_ADDRESS = "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t"


class MeteredProbe(Probe):
    network = Network.TRON
    asset = "USDT"
    fallback_fee = 1.2
    fallback_elapsed = 30.0

    async def connect(self, client: ChainClient, say: Narrator) -> ChainHead:
        say("🏦 Bank A (JPMorgan) initiating Tron USDT transfer...")
        say("Connecting to Tron network...")
        head = await within("Connection", self.settings.tron_request_timeout_seconds, client.connect())
        say(f"Connected to Tron. Block: {head.block_number}", blockNumber=head.block_number)
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
        say("💵 Preparing USDT-TRC20 transfer: $10,000")
        say(f"Using USDT contract: {USDT_TRC20_ADDRESS}")
        await pause(self.settings.tron_build_delay_seconds)
        say("⚡ Checking bandwidth and energy costs...")
        await pause(self.settings.tron_resource_delay_seconds)
        quote = await client.quote_fee(sender, receiver)
        if quote.detail:
            say(quote.detail)
        fee_usd = self.fee_in_usd(quote)
        say(f"Total fee: {quote.amount} {quote.symbol} (~${fee_usd:.2f})", fee=fee_usd)
        return quote

    async def submit(
        self, client: ChainClient, say: Narrator, sender: Identity, receiver: Identity, quote: FeeQuote
    ) -> str:
        say("📤 Broadcasting TRC-20 transaction...")
        reference = await client.submit(sender, receiver, quote)
        await pause(self.settings.tron_broadcast_delay_seconds)
        return reference

    async def await_confirmation(self, say: Narrator, reference: str) -> None:
        say("⏳ Waiting for block confirmation (3s avg)...")
        await pause(self.settings.tron_confirmation_delay_seconds)
        say("✅ Transaction confirmed!")

    def fee_in_usd(self, quote: FeeQuote) -> float:
        return round(quote.amount * self.settings.trx_usd, 2)
