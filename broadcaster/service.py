"""
Service wiring: builds an Orchestrator over the live chain clients.
"""

from __future__ import annotations

from typing import Any, Optional

from broadcaster.executor import READ_ONLY_MODE, BroadcastExecutor
from broadcaster.hooks import HookContext, MemoEncoder
from broadcaster.orchestrator import AnalyticsRecorder, CredentialResolver, Orchestrator
from broadcaster.poller import ConfirmationPoller
from broadcaster.state import StateStore
from broadcaster.transport import (
    BROADCAST_BENCH_MODE,
    ExternalSignerTransport,
    LocalSigningTransport,
    SignerExtension,
    TransactionSigner,
)
from chain_sdk.client import AnalyticsClient, CondenserClient, SidechainClient


def build_orchestrator(
    store: StateStore,
    credentials: CredentialResolver,
    signer: TransactionSigner,
    extension: Optional[SignerExtension] = None,
    memo_encoder: Optional[MemoEncoder] = None,
    condenser: Optional[Any] = None,
    sidechain: Optional[Any] = None,
    analytics: Optional[AnalyticsRecorder] = None,
    read_only: bool = READ_ONLY_MODE,
    bench_mode: int = BROADCAST_BENCH_MODE,
) -> Orchestrator:
    """
    Args:
        store: UI state store receiving commands
        credentials: Resolves signing keys from the session or a password
        signer: Local transaction signer (black box)
        extension: Browser signer extension, when one is installed
        memo_encoder: Memo encryption primitive for ``#`` memos
        condenser / sidechain / analytics: Override the default clients

    Returns:
        Orchestrator ready for ``submit``.
    """
    condenser = condenser or CondenserClient()
    context = HookContext(store=store, client=condenser, memo_encoder=memo_encoder)
    executor = BroadcastExecutor(
        context=context,
        local=LocalSigningTransport(signer, condenser),
        external=ExternalSignerTransport(extension) if extension is not None else None,
        poller=ConfirmationPoller(sidechain or SidechainClient()),
        read_only=read_only,
        bench_mode=bench_mode,
    )
    return Orchestrator(
        store=store,
        executor=executor,
        credentials=credentials,
        analytics=analytics or AnalyticsClient(),
    )
