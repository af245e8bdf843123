from __future__ import annotations

import httpx
import pytest

from chaincompare.clients import ethereum
from chaincompare.clients.ethereum import EthereumClient
from chaincompare.clients.tron import TronClient, tron_address
from chaincompare.errors import EndpointUnavailableError


def test_tron_address_encodes_base58check() -> None:
    assert tron_address("0x" + "00" * 20) == "T9yD14Nj9j7xAB4dbGeiX9h8unkKHxuWwb"


def test_tron_address_shape() -> None:
    address = tron_address("0x95222290DD7278Aa3Ddd389Cc1E1d165CC4BAfe5")

    assert address.startswith("T")
    assert len(address) == 34


def _tron(handler) -> TronClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TronClient("https://api.trongrid.io/", http=http)


@pytest.mark.asyncio
async def test_tron_client_reads_block_and_quotes_resources() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"block_header": {"raw_data": {"number": 61234567}}})

    async with _tron(handler) as client:
        head = await client.connect()
        sender = await client.allocate_identity("sender")
        receiver = await client.allocate_identity("receiver")
        quote = await client.quote_fee(sender, receiver)
        reference = await client.submit(sender, receiver, quote)

    assert seen[0].method == "POST"
    assert str(seen[0].url) == "https://api.trongrid.io/wallet/getnowblock"
    assert head.block_number == 61234567
    assert sender.address.startswith("T")
    assert sender.address != receiver.address
    assert (quote.amount, quote.symbol) == (1.2, "TRX")
    assert quote.detail == "Energy: 31,895 units, Bandwidth: 345 bytes"
    assert reference == "TRC20-61234567"


@pytest.mark.asyncio
async def test_tron_client_rejects_error_status() -> None:
    async with _tron(lambda request: httpx.Response(503)) as client:
        with pytest.raises(EndpointUnavailableError, match="Tron API error: 503"):
            await client.connect()


@pytest.mark.asyncio
async def test_tron_client_without_block_number_simulates_reference() -> None:
    async with _tron(lambda request: httpx.Response(200, json={})) as client:
        head = await client.connect()
        sender = await client.allocate_identity("sender")
        quote = await client.quote_fee(sender, sender)
        reference = await client.submit(sender, sender, quote)

    assert head.block_number is None
    assert reference == "TRC20-simulated"


class FakeHTTPProvider:
    def __init__(self, url: str, request_kwargs: dict | None = None) -> None:
        self.url = url
        self.request_kwargs = request_kwargs
        self.disconnects = 0

    async def disconnect(self) -> None:
        self.disconnects += 1


class FakeEth:
    def __init__(self, node: FakeNode, url: str) -> None:
        self._node = node
        self._url = url

    async def _read(self, value: int) -> int:
        if self._url in self._node.failing:
            raise ConnectionError(f"{self._url} refused")
        return value

    @property
    def block_number(self):
        return self._read(self._node.blocks.get(self._url, 0))

    @property
    def gas_price(self):
        return self._read(self._node.gas_price)


class FakeNode:
    """Stands in for ``AsyncWeb3`` and remembers every instance it builds."""

    def __init__(self, *, failing: set[str] | None = None, blocks: dict[str, int] | None = None, gas_price: int = 0):
        self.failing = failing or set()
        self.blocks = blocks or {}
        self.gas_price = gas_price
        self.built: list[object] = []

    def install(self, monkeypatch: pytest.MonkeyPatch) -> None:
        node = self

        class FakeAsyncWeb3:
            AsyncHTTPProvider = FakeHTTPProvider

            def __init__(self, provider: FakeHTTPProvider) -> None:
                self.provider = provider
                self.eth = FakeEth(node, provider.url)
                node.built.append(self)

        monkeypatch.setattr(ethereum, "AsyncWeb3", FakeAsyncWeb3)

    def providers(self) -> list[FakeHTTPProvider]:
        return [w3.provider for w3 in self.built]


@pytest.mark.asyncio
async def test_ethereum_client_skips_failing_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    node = FakeNode(failing={"http://down.invalid"}, blocks={"http://up.invalid": 6_543_210})
    node.install(monkeypatch)
    client = EthereumClient(["http://down.invalid", "http://up.invalid"], request_timeout_seconds=1.0)

    async with client:
        head = await client.connect()
        down, up = node.providers()
        assert (down.disconnects, up.disconnects) == (1, 0)

    assert head.endpoint == "http://up.invalid"
    assert head.block_number == 6_543_210
    assert [provider.url for provider in node.providers()] == ["http://down.invalid", "http://up.invalid"]
    assert up.request_kwargs == {"timeout": 1.0}
    assert up.disconnects == 1


@pytest.mark.asyncio
async def test_ethereum_client_reports_when_every_endpoint_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    urls = ["http://a.invalid", "http://b.invalid"]
    node = FakeNode(failing=set(urls))
    node.install(monkeypatch)

    async with EthereumClient(urls, request_timeout_seconds=1.0) as client:
        expected = "All Ethereum RPC endpoints failed: http://b.invalid refused"
        with pytest.raises(EndpointUnavailableError, match=expected):
            await client.connect()

    assert [provider.disconnects for provider in node.providers()] == [1, 1]


@pytest.mark.asyncio
async def test_ethereum_client_without_endpoints_fails() -> None:
    with pytest.raises(EndpointUnavailableError, match="All Ethereum RPC endpoints failed"):
        await EthereumClient([]).connect()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("gas_price", "detail", "amount"),
    [
        (30_000_000_000, "Gas required: 65000 units @ 30 gwei", 0.00195),
        (0, "Gas required: 65000 units @ 25 gwei", 0.001625),
    ],
)
async def test_ethereum_client_quotes_gas(
    monkeypatch: pytest.MonkeyPatch, gas_price: int, detail: str, amount: float
) -> None:
    FakeNode(blocks={"http://up.invalid": 4096}, gas_price=gas_price).install(monkeypatch)

    async with EthereumClient(["http://up.invalid"]) as client:
        await client.connect()
        sender = await client.allocate_identity("sender")
        receiver = await client.allocate_identity("receiver")
        quote = await client.quote_fee(sender, receiver)
        reference = await client.submit(sender, receiver, quote)

    assert quote.symbol == "ETH"
    assert quote.detail == detail
    assert quote.amount == pytest.approx(amount)
    assert sender.address != receiver.address
    assert reference == "0x" + f"{4096:064x}"


@pytest.mark.asyncio
async def test_ethereum_client_quote_requires_connection() -> None:
    client = EthereumClient(["http://up.invalid"])
    sender = await client.allocate_identity("sender")

    with pytest.raises(EndpointUnavailableError, match="not connected"):
        await client.quote_fee(sender, sender)
