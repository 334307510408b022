"""
Side-Chain Confirmation Poller

A custom_json addressed to the side-chain is only accepted on the main
chain; the side-chain processes it a few blocks later and records the
outcome in the transaction's logs.  The poller waits for those logs.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable

from broadcaster.errors import SidechainError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

POLL_ATTEMPTS = 15
POLL_INTERVAL_SECONDS = 1.0


class ConfirmationPoller:
    """
    Poll ``getTransactionInfo`` until logs appear.

    Logs without an ``errors`` field succeed, logs carrying one (even empty) raise
    SidechainError.  Running out of attempts is treated as acceptance.
    """

    def __init__(
        self,
        client: Any,                 # SidechainClient or compatible
        attempts: int = POLL_ATTEMPTS,
        interval: float = POLL_INTERVAL_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.attempts = attempts
        self.interval = interval
        self._sleep = sleep

    async def poll(self, transaction_id: str) -> None:
        for attempt in range(1, self.attempts + 1):
            info = await self.client.get_transaction_info(transaction_id)
            if info is not None and info.logs:
                logs = json.loads(info.logs)
                if logs.get("errors") is not None:
                    raise SidechainError("Error with tx: " + json.dumps(logs["errors"]))
                logger.info("side-chain confirmed %s after %d attempt(s)", transaction_id, attempt)
                return
            await self._sleep(self.interval)
        # TODO: decide whether a silent timeout should fail the broadcast instead
        logger.warning(
            "side-chain gave no result for %s after %d attempts; treating as accepted",
            transaction_id, self.attempts,
        )
