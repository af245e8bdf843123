"""Network collaborators driven by probes."""

from chaincompare.clients.base import ChainClient, ChainHead, ClientLifecycle, FeeQuote, Identity

__all__ = ["ChainClient", "ChainHead", "ClientLifecycle", "FeeQuote", "Identity"]
