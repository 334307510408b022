"""
Chain SDK
Async clients for the condenser node, side-chain RPC and analytics collector.
"""

from chain_sdk.client import AnalyticsClient, CondenserClient, RpcError, SidechainClient
from chain_sdk.models import Account, BroadcastResult, ContentRecord, TransactionInfo

__all__ = [
    "Account",
    "AnalyticsClient",
    "BroadcastResult",
    "CondenserClient",
    "ContentRecord",
    "RpcError",
    "SidechainClient",
    "TransactionInfo",
]
