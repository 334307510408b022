#!/usr/bin/env python3
"""
Broadcaster: Bench Demo Script

Walks a vote through the full broadcast loop without touching the network:
confirmation gate, replay, safety re-prompt, login prompt, and a bench
broadcast that resolves (mode 2) or rejects (mode 1) after two seconds.

Usage:
    python scripts/demo.py          # bench success
    python scripts/demo.py 1        # bench failure
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from broadcaster import BroadcastRequest, MemoryStore, build_orchestrator
from broadcaster.state import ConfirmOperation, ShowLogin, vote_marker_key
from chain_sdk.models import ContentRecord

# Well-known example WIF, not a funded key
EXAMPLE_WIF = "5HueCGU8rMjxEXxiPuD5BDku4MkFqeZyd4dZ1jvhTVqvbTLvyTJ"

# ---------------------------------------------------------------------------
# Terminal colors (ANSI)
# ---------------------------------------------------------------------------

class C:
    RESET   = "\033[0m"
    BOLD    = "\033[1m"
    DIM     = "\033[2m"
    RED     = "\033[91m"
    GREEN   = "\033[92m"
    CYAN    = "\033[96m"
    WHITE   = "\033[97m"


def banner(text: str, color: str = C.CYAN):
    width = 64
    print()
    print(f"{color}{C.BOLD}{'=' * width}{C.RESET}")
    print(f"{color}{C.BOLD}  {text}{C.RESET}")
    print(f"{color}{C.BOLD}{'=' * width}{C.RESET}")
    print()


def step(n: int, text: str):
    print(f"  {C.BOLD}{C.WHITE}[Step {n}]{C.RESET} {text}")


def ok(text: str):
    print(f"  {C.GREEN}{C.BOLD}OK{C.RESET} {text}")


def fail(text: str):
    print(f"  {C.RED}{C.BOLD}FAIL{C.RESET} {text}")


def info(text: str):
    print(f"  {C.DIM}{text}{C.RESET}")


# ---------------------------------------------------------------------------
# Offline collaborators
# ---------------------------------------------------------------------------

class OfflineNode:
    """Answers lookups with empty records."""

    async def get_content(self, author: str, permlink: str) -> ContentRecord:
        return ContentRecord(author=author, permlink=permlink, raw={"author": author, "permlink": permlink})

    async def get_account(self, name: str):
        return None


class NoChain:
    async def get_transaction_info(self, txid: str):
        return None


class SessionKeys:
    """Resolves a key only when a password is supplied."""

    async def resolve_signing_key(self, op_type, needs_active_auth, username, password):
        return f"key-for-{username}" if password else None


class NoSigner:
    async def sign(self, transaction, keys):
        raise RuntimeError("bench mode never signs")


class PrintAnalytics:
    async def record_event(self, event_name: str, page: str = "") -> None:
        info(f"analytics: {event_name} {page}")


async def run(bench_mode: int) -> bool:
    store = MemoryStore({"user": {"current": {"username": "bob"}}})
    orchestrator = build_orchestrator(
        store=store,
        credentials=SessionKeys(),
        signer=NoSigner(),
        condenser=OfflineNode(),
        sidechain=NoChain(),
        analytics=PrintAnalytics(),
        bench_mode=bench_mode,
    )
    outcome: dict[str, str] = {}
    vote = {"author": "alice", "permlink": "post1", "weight": 10000}

    banner("CONFIRMATION GATE")
    step(1, "Submit a vote that asks for confirmation")
    await orchestrator.submit(BroadcastRequest(
        type="vote", operation=vote, confirm="Upvote @alice/post1?", username="bob",
    ))
    pending = store.of_type(ConfirmOperation)[-1]
    ok(f"parked for confirmation: {pending.confirm}")

    banner("SAFETY GATE")
    step(2, "Submit a transfer whose memo contains a private key")
    await orchestrator.submit(BroadcastRequest(
        type="transfer",
        operation={"from": "bob", "to": "alice", "amount": "1.000 STEEM", "memo": EXAMPLE_WIF},
        username="bob",
    ))
    ok(f"re-prompted: {store.of_type(ConfirmOperation)[-1].warning}")

    banner("LOGIN GATE")
    step(3, "Replay the confirmed vote without a password")
    await orchestrator.submit(pending.operation)
    if store.of_type(ShowLogin):
        ok("login requested for replay")
    else:
        fail("expected a login prompt")

    banner("BROADCAST (bench mode %d)" % bench_mode)
    step(4, "Replay the vote with a password")
    await orchestrator.submit(pending.operation.model_copy(update={
        "password": "hunter2",
        "success_callback": lambda: outcome.setdefault("result", "accepted"),
        "error_callback": lambda e: outcome.setdefault("result", f"failed: {e}"),
    }))
    info(f"vote marker present: {vote_marker_key('alice', 'post1') in store.state}")
    result = outcome.get("result", "no callback")
    (ok if result == "accepted" else fail)(result)
    return result == "accepted"


def main():
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(name)s - %(message)s")
    bench_mode = int(sys.argv[1]) if len(sys.argv) > 1 else 2
    # the settle delay after an accepted vote makes a success run take ~12s
    accepted = asyncio.run(run(bench_mode))
    sys.exit(0 if accepted == (bench_mode == 2) else 1)


if __name__ == "__main__":
    main()
