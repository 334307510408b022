"""
Broadcaster
Transaction broadcast orchestration for a condenser-API blockchain client.
"""

from broadcaster.errors import BroadcastError, ConfigurationError, SidechainError, TransportError
from broadcaster.executor import BroadcastExecutor
from broadcaster.models import BroadcastPayload, BroadcastRequest
from broadcaster.orchestrator import Orchestrator
from broadcaster.service import build_orchestrator
from broadcaster.state import MemoryStore

__all__ = [
    "BroadcastError",
    "BroadcastExecutor",
    "BroadcastPayload",
    "BroadcastRequest",
    "ConfigurationError",
    "MemoryStore",
    "Orchestrator",
    "SidechainError",
    "TransportError",
    "build_orchestrator",
]
