"""
Broadcast error taxonomy.
"""

from __future__ import annotations


class BroadcastError(Exception):
    """Base class for errors raised while broadcasting a batch."""

    pass


class ConfigurationError(BroadcastError):
    """Required credential material is missing (memo key, recipient account)."""

    pass


class TransportError(BroadcastError):
    """The network, the signer, or the signer extension rejected the batch."""

    pass


class SidechainError(BroadcastError):
    """The side-chain processed the transaction and reported errors."""

    pass
