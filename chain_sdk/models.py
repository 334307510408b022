"""
Chain SDK: Data Models
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class Account(BaseModel):
    """Subset of a condenser account record."""
    name: str
    memo_key: str = ""
    raw: dict               # full account object


class ContentRecord(BaseModel):
    """A post or comment as returned by get_content."""
    author: str = ""
    permlink: str = ""
    body: str = ""
    parent_author: str = ""
    parent_permlink: str = ""
    raw: dict

    @property
    def exists(self) -> bool:
        # get_content answers unknown content with an empty record
        return self.body != ""


class BroadcastResult(BaseModel):
    """Result of a broadcast, whichever transport produced it."""
    id: str | None = None
    block_num: int | None = None
    trx_num: int | None = None
    expired: bool = False
    raw: dict[str, Any] = {}


class TransactionInfo(BaseModel):
    """Side-chain transaction info; logs is a JSON string once processed."""
    logs: str | None = None
    raw: dict
