"""
Operation helpers

An operation is a plain dict of type-specific fields, paired with its type
tag in an ordered batch: ``[[type, operation], ...]``.  Client-only data
rides along under the ``__config`` sidecar key and never reaches the wire.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CONFIG_KEY = "__config"

SIDECHAIN_ID = "ssc-mainnet1"
FOLLOW_ID = "follow"

# Operation types signable with the posting key
POSTING_OPS = frozenset({
    "vote",
    "comment",
    "delete_comment",
    "custom_json",
    "claim_reward_balance",
    "account_update2",
})

Batch = list[list[Any]]  # [[type, operation], ...]


class Authority(str, Enum):
    ACTIVE = "active"
    POSTING = "posting"


# ---------------------------------------------------------------------------
# Authority
# ---------------------------------------------------------------------------

def needs_active_auth(op_type: str, operation: dict[str, Any]) -> bool:
    """True unless posting authority is sufficient for this operation.

    custom_json is a posting op, but one that lists ``required_auths``
    must be signed with the active key.
    """
    if op_type not in POSTING_OPS:
        return True
    return op_type == "custom_json" and bool(operation.get("required_auths"))


def authority_for(active: bool) -> Authority:
    return Authority.ACTIVE if active else Authority.POSTING


# ---------------------------------------------------------------------------
# Sidecar
# ---------------------------------------------------------------------------

def operation_config(operation: dict[str, Any]) -> dict[str, Any]:
    return operation.get(CONFIG_KEY) or {}


def strip_config(operations: Batch) -> Batch:
    """Wire form of a batch: same order, sidecars removed."""
    return [
        [op_type, {k: v for k, v in operation.items() if k != CONFIG_KEY}]
        for op_type, operation in operations
    ]


def is_sidechain_batch(operations: Batch) -> bool:
    """A single custom_json addressed to the side-chain."""
    return (
        len(operations) == 1
        and operations[0][0] == "custom_json"
        and operations[0][1].get("id") == SIDECHAIN_ID
    )


# ---------------------------------------------------------------------------
# Analytics naming
# ---------------------------------------------------------------------------

def analytics_event_name(op_type: str, operation: dict[str, Any]) -> str:
    """``custom_json`` -> ``CustomJson``; a top-level ``comment`` -> ``Post``."""
    name = re.sub(r"^([a-z])", lambda m: m.group(1).upper(), op_type)
    name = re.sub(r"_([a-z])", lambda m: m.group(1).upper(), name)
    if name == "Comment" and not operation.get("parent_author"):
        name = "Post"
    return name


def analytics_page(event_name: str, operation: dict[str, Any]) -> str:
    if event_name == "Vote":
        return f"@{operation.get('author')}/{operation.get('permlink')}"
    return ""
