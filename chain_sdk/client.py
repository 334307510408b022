"""
Chain SDK: Clients
Thin async wrappers over the condenser node, the side-chain RPC and the
analytics collector.
"""

from __future__ import annotations

import logging
import os
from itertools import count
from typing import Any, Optional

import httpx

from chain_sdk.models import Account, BroadcastResult, ContentRecord, TransactionInfo

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration (from env vars with defaults)
# ---------------------------------------------------------------------------

CONDENSER_NODE_URL = os.environ.get("CONDENSER_NODE_URL", "https://api.steemit.com")
SIDECHAIN_RPC_URL = os.environ.get("SIDECHAIN_RPC_URL", "https://api.steem-engine.com/rpc")
ANALYTICS_API_BASE = os.environ.get("ANALYTICS_API_BASE", "http://localhost:8080/api/v1")


class RpcError(Exception):
    """A JSON-RPC error object returned by a node."""

    def __init__(self, method: str, error: dict[str, Any]):
        self.method = method
        self.error = error
        super().__init__(f"{method}: {error.get('message', error)}")


class _JsonRpcClient:
    """Shared JSON-RPC 2.0 plumbing over httpx.AsyncClient."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url.rstrip("/")
        self._ids = count(1)
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def _call(self, path: str, method: str, params: Any) -> Any:
        resp = await self._client.post(
            f"{self.url}{path}",
            json={
                "jsonrpc": "2.0",
                "id": next(self._ids),
                "method": method,
                "params": params,
            },
        )
        resp.raise_for_status()
        body = resp.json()
        if body.get("error"):
            raise RpcError(method, body["error"])
        return body.get("result")

    async def aclose(self) -> None:
        await self._client.aclose()


class CondenserClient(_JsonRpcClient):
    """
    Client for a condenser-API node.

    Covers the account/content lookups used by the transform and outcome
    hooks, and the synchronous transaction submit used by local signing.
    """

    def __init__(
        self,
        node_url: str = CONDENSER_NODE_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(node_url, timeout=timeout, transport=transport)

    async def get_accounts(self, names: list[str]) -> list[Account]:
        result = await self._call("", "condenser_api.get_accounts", [names])
        return [
            Account(name=a["name"], memo_key=a.get("memo_key", ""), raw=a)
            for a in result or []
        ]

    async def get_account(self, name: str) -> Optional[Account]:
        """Fetch a single account. Returns None if it does not exist."""
        accounts = await self.get_accounts([name])
        return accounts[0] if accounts else None

    async def get_content(self, author: str, permlink: str) -> ContentRecord:
        result = await self._call(
            "", "condenser_api.get_content", [author, permlink]
        ) or {}
        return ContentRecord(
            author=result.get("author", ""),
            permlink=result.get("permlink", ""),
            body=result.get("body", ""),
            parent_author=result.get("parent_author", ""),
            parent_permlink=result.get("parent_permlink", ""),
            raw=result,
        )

    async def broadcast_transaction_synchronous(
        self,
        transaction: dict[str, Any],
    ) -> BroadcastResult:
        """
        Submit a signed transaction and wait for block inclusion.

        Args:
            transaction: Signed transaction (operations, ref block, signatures)

        Returns:
            BroadcastResult with the transaction id and block position.
        """
        result = await self._call(
            "", "condenser_api.broadcast_transaction_synchronous", [transaction]
        ) or {}
        return BroadcastResult(
            id=result.get("id"),
            block_num=result.get("block_num"),
            trx_num=result.get("trx_num"),
            expired=result.get("expired", False),
            raw=result,
        )


class SidechainClient(_JsonRpcClient):
    """Client for the side-chain RPC that processes ssc custom_json actions."""

    def __init__(
        self,
        rpc_url: str = SIDECHAIN_RPC_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(rpc_url, timeout=timeout, transport=transport)

    async def get_transaction_info(self, txid: str) -> Optional[TransactionInfo]:
        """Returns None until the side-chain has seen the transaction."""
        result = await self._call(
            "/blockchain", "getTransactionInfo", {"txid": txid}
        )
        if not result:
            return None
        return TransactionInfo(logs=result.get("logs"), raw=result)


class AnalyticsClient:
    """Fire-and-forget event recorder. Failures are logged, never raised."""

    def __init__(
        self,
        api_base: str = ANALYTICS_API_BASE,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_base = api_base.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def record_event(self, event_name: str, page: str = "") -> None:
        try:
            resp = await self._client.post(
                f"{self.api_base}/record_event",
                json={"type": event_name, "value": page},
            )
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("record_event %s failed: %s", event_name, type(exc).__name__)

    async def aclose(self) -> None:
        await self._client.aclose()
