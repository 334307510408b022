"""
Broadcast Transports

Local signing and the external signer extension present the same
contract upward: ``send`` returns a BroadcastResult or raises
TransportError.  The bench transport fakes either outcome after a fixed
delay for UI timing checks and is not a production path.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol

from broadcaster.errors import TransportError
from broadcaster.operations import Authority, Batch, strip_config
from chain_sdk.models import BroadcastResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration (from env vars with defaults)
# ---------------------------------------------------------------------------

# 0 = live, 1 = fake rejection, 2 = fake success
BROADCAST_BENCH_MODE = int(os.environ.get("BROADCAST_BENCH_MODE", "0"))
BENCH_DELAY_SECONDS = 2.0


class TransactionSigner(Protocol):
    async def sign(self, transaction: dict[str, Any], keys: list[str]) -> dict[str, Any]: ...


class SignerExtension(Protocol):
    async def request_broadcast(
        self, username: str, operations: Batch, authority: str
    ) -> dict[str, Any]: ...


class BroadcastTransport(ABC):
    """Base transport. Subclasses implement send()."""

    name = "base"

    @abstractmethod
    async def send(
        self,
        operations: Batch,
        authority: Authority,
        keys: list[str],
        username: Optional[str],
    ) -> BroadcastResult: ...


class LocalSigningTransport(BroadcastTransport):
    """Sign with the supplied keys and submit through the condenser node."""

    name = "local"

    def __init__(self, signer: TransactionSigner, client: Any):
        self.signer = signer
        self.client = client

    async def send(self, operations, authority, keys, username):
        transaction = {"extensions": [], "operations": strip_config(operations)}
        try:
            signed = await self.signer.sign(transaction, keys)
            return await self.client.broadcast_transaction_synchronous(signed)
        except Exception as exc:
            raise TransportError(str(exc)) from exc


class ExternalSignerTransport(BroadcastTransport):
    """Delegate signing and broadcast to the installed signer extension."""

    name = "external"

    def __init__(self, extension: SignerExtension):
        self.extension = extension

    async def send(self, operations, authority, keys, username):
        try:
            response = await self.extension.request_broadcast(
                username, strip_config(operations), authority.value
            )
        except Exception as exc:
            raise TransportError(str(exc)) from exc
        if not response.get("success"):
            raise TransportError(response.get("message") or "Signer extension rejected the broadcast")
        result = response.get("result") or {}
        return BroadcastResult(
            id=result.get("id"),
            block_num=result.get("block_num"),
            trx_num=result.get("trx_num"),
            expired=result.get("expired", False),
            raw=result,
        )


class BenchTransport(BroadcastTransport):
    """No network I/O: reject (mode 1) or resolve (mode 2) after a delay."""

    name = "bench"

    def __init__(self, mode: int, delay: float = BENCH_DELAY_SECONDS):
        if mode not in (1, 2):
            raise ValueError(f"Bench mode must be 1 or 2, got {mode}")
        self.mode = mode
        self.delay = delay

    async def send(self, operations, authority, keys, username):
        verdict = "reject" if self.mode == 1 else "resolve"
        logger.info("bench (no broadcast) and %s: %s", verdict, json.dumps(strip_config(operations)))
        await asyncio.sleep(self.delay)
        if self.mode == 1:
            raise TransportError("Testing, fake error")
        return BroadcastResult()


def select_transport(
    local: BroadcastTransport,
    external: Optional[BroadcastTransport],
    use_external_signer: bool,
    bench_mode: int = BROADCAST_BENCH_MODE,
) -> BroadcastTransport:
    """Pick the transport for one batch."""
    if bench_mode in (1, 2):
        return BenchTransport(bench_mode)
    if use_external_signer:
        if external is None:
            raise TransportError("Logged in with a signer extension, but none is installed")
        return external
    return local
