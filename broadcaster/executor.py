"""
Broadcast Payload Executor

Takes a payload that has passed the confirmation, safety and credential
gates and carries it through transform, transport, side-chain
confirmation, and outcome hooks.

Flow:
  1. Clear stale per-type error markers.
  2. Transform every operation (may expand one into several).
  3. Send the batch as one submission.
  4. Wait on the side-chain for a single ssc custom_json.
  5. Accepted: per-op accepted hooks + notifications, then success callback.
     Failed: TransactionFailed command, then per-op error hooks.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Optional

from broadcaster.hooks import HookContext, handler_for, transform_batch
from broadcaster.models import BroadcastPayload
from broadcaster.operations import Batch, authority_for, is_sidechain_batch, operation_config
from broadcaster.poller import ConfirmationPoller
from broadcaster.state import (
    CURRENT_USERNAME,
    EXTERNAL_SIGNER_LOGIN,
    AddNotification,
    RemoveState,
    TransactionFailed,
)
from broadcaster.transport import BROADCAST_BENCH_MODE, BroadcastTransport, select_transport

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration (from env vars with defaults)
# ---------------------------------------------------------------------------

READ_ONLY_MODE = os.environ.get("READ_ONLY_MODE", "false").lower() in {"true", "1", "yes", "on"}

NOTIFICATION_DISMISS_MS = 5000


class BroadcastExecutor:

    def __init__(
        self,
        context: HookContext,
        local: BroadcastTransport,
        poller: ConfirmationPoller,
        external: Optional[BroadcastTransport] = None,
        read_only: bool = READ_ONLY_MODE,
        bench_mode: int = BROADCAST_BENCH_MODE,
    ):
        self.context = context
        self.store = context.store
        self.local = local
        self.external = external
        self.poller = poller
        self.read_only = read_only
        self.bench_mode = bench_mode

    async def uses_external_signer(self, payload: BroadcastPayload) -> bool:
        if payload.use_external_signer:
            return True
        return bool(await self.store.get_state(EXTERNAL_SIGNER_LOGIN, False))

    async def execute(self, payload: BroadcastPayload) -> None:
        """
        Broadcast one payload.

        Transform errors propagate to the caller.  Transport, side-chain and
        anything raised after the batch is built are handled here.
        """
        if self.read_only:
            logger.info("read-only mode, skipping broadcast")
            return

        for op_type, _operation in payload.operations:
            await self.store.dispatch(RemoveState(("TransactionError", op_type)))

        username = payload.username or await self.store.get_state(CURRENT_USERNAME)
        operations = await transform_batch(self.context, payload.operations, username)

        try:
            transport = select_transport(
                self.local,
                self.external,
                await self.uses_external_signer(payload),
                bench_mode=self.bench_mode,
            )
            result = await transport.send(
                operations,
                authority_for(payload.needs_active_auth),
                payload.keys,
                username,
            )
            if is_sidechain_batch(operations):
                await self.poller.poll(result.id)
            logger.info(
                "broadcast accepted via %s: %s",
                transport.name, ", ".join(op_type for op_type, _ in operations),
            )
            await self._accepted(operations, username)
            if payload.success_callback is not None:
                try:
                    payload.success_callback()
                except Exception:
                    logger.exception("success callback raised")
        except Exception as error:
            logger.error("broadcast failed: %s", error)
            await self._failed(operations, error, payload)

    async def _accepted(self, operations: Batch, username: Optional[str]) -> None:
        for op_type, operation in operations:
            try:
                await handler_for(op_type).accepted(self.context, operation, username)
            except Exception:
                logger.exception("accepted_%s hook failed", op_type)
            message = operation_config(operation).get("successMessage")
            if message:
                await self.store.dispatch(AddNotification(
                    key=f"trx_{int(time.time() * 1000)}",
                    message=message,
                    dismiss_after=NOTIFICATION_DISMISS_MS,
                ))

    async def _failed(
        self, operations: Batch, error: Exception, payload: BroadcastPayload
    ) -> None:
        try:
            await self.store.dispatch(TransactionFailed(
                operations=operations,
                error=error,
                error_callback=payload.error_callback,
            ))
        except Exception:
            logger.exception("recording transaction error failed")
        for op_type, operation in operations:
            try:
                await handler_for(op_type).error(self.context, operation)
            except Exception:
                logger.exception("error_%s hook failed", op_type)
