"""Collaborator contract wrapped by each probe."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import TracebackType
from typing import Any, Protocol, Self

from loguru import logger


@dataclass(frozen=True)
class ChainHead:
    """What the network reported when the probe connected."""

    endpoint: str
    block_number: int | None = None


@dataclass(frozen=True)
class Identity:
    """An account the probe can send from or to."""

    role: str
    address: str
    handle: Any = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class FeeQuote:
    """Fee for one transfer in the network's native unit."""

    amount: float
    symbol: str
    detail: str | None = None
    handle: Any = field(default=None, repr=False, compare=False)


class ChainClient(Protocol):
    """Network operations a probe drives, in call order.

    ``handle`` fields carry SDK objects (wallets, prepared transactions)
    between calls without the probe having to know their types.
    """

    async def connect(self) -> ChainHead: ...

    async def allocate_identity(self, role: str) -> Identity: ...

    async def fund(self, identity: Identity) -> Identity: ...

    async def quote_fee(self, sender: Identity, receiver: Identity) -> FeeQuote: ...

    async def submit(self, sender: Identity, receiver: Identity, quote: FeeQuote) -> str: ...

    async def close(self) -> None: ...

    async def __aenter__(self) -> Self: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


class ClientLifecycle:
    """Mixin turning ``close()`` into async-context-manager exit.

    A failing ``close()`` is logged and suppressed so it never replaces the
    result of the block it guards.
    """

    async def fund(self, identity: Identity) -> Identity:
        """Networks without a faucet hand the identity back unchanged."""
        return identity

    async def close(self) -> None:
        return None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            await self.close()
        except Exception as close_exc:
            logger.warning("client.close.failed client={} error={}", type(self).__name__, close_exc)
