"""Ledger-network probe: a real XRPL testnet payment."""

from __future__ import annotations

from chaincompare.clients.base import ChainClient, ChainHead, FeeQuote, Identity
from chaincompare.networks import Network
from chaincompare.probes.base import Narrator, Probe, pause, within


class LedgerProbe(Probe):
    network = Network.XRPL
    asset = "funds"
    fallback_fee = 0.001
    fallback_elapsed = 4.5

    async def connect(self, client: ChainClient, say: Narrator) -> ChainHead:
        say("🏦 Bank A (JPMorgan) initiating XRPL transfer...")
        say("Connecting to XRPL network...")
        head = await within("Connection", self.settings.xrpl_connect_timeout_seconds, client.connect())
        say("Connected! Funding Bank A wallet...", blockNumber=head.block_number)
        return head

    async def prepare_identities(self, client: ChainClient, say: Narrator) -> tuple[Identity, Identity]:
        sender = await client.allocate_identity("sender")
        say(f"Bank A wallet: {sender.address}", address=sender.address)
        sender = await within("Funding", self.settings.xrpl_fund_timeout_seconds, client.fund(sender))
        receiver = await client.allocate_identity("receiver")
        say(f"🏦 Bank B (HSBC) receiving address: {receiver.address}")
        return sender, receiver

    async def prepare_payment(
        self, client: ChainClient, say: Narrator, sender: Identity, receiver: Identity
    ) -> FeeQuote:
        say("💵 Preparing payment: $10,000 USD equivalent")
        quote = await client.quote_fee(sender, receiver)
        say(f"Network fee: {quote.amount} {quote.symbol}", fee=self.fee_in_usd(quote))
        return quote

    async def submit(
        self, client: ChainClient, say: Narrator, sender: Identity, receiver: Identity, quote: FeeQuote
    ) -> str:
        say("📝 Signing transaction with Bank A credentials...")
        say("📤 Broadcasting to XRPL network...")
        return await within("Submission", self.settings.xrpl_submit_timeout_seconds, client.submit(sender, receiver, quote))

    async def await_confirmation(self, say: Narrator, reference: str) -> None:
        await pause(self.settings.xrpl_confirmation_delay_seconds)
        say("✅ Payment confirmed in ledger!")
        say(f"Transaction hash: {reference}")

    def fee_in_usd(self, quote: FeeQuote) -> float:
        return round(quote.amount * self.settings.xrp_usd, 4)
