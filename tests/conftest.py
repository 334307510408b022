"""Shared fakes for the broadcaster test suite."""

from __future__ import annotations

from typing import Optional

import pytest

from broadcaster.executor import BroadcastExecutor
from broadcaster.hooks import HookContext
from broadcaster.poller import ConfirmationPoller
from broadcaster.state import MemoryStore
from broadcaster.transport import BroadcastTransport
from chain_sdk.models import Account, BroadcastResult, ContentRecord, TransactionInfo

# Well-known example WIF (uncompressed, version 0x80), not a funded key
EXAMPLE_WIF = "5HueCGU8rMjxEXxiPuD5BDku4MkFqeZyd4dZ1jvhTVqvbTLvyTJ"


class FakeNode:
    """Condenser stand-in: contents keyed by (author, permlink), memo keys by name."""

    def __init__(self, contents: dict | None = None, accounts: dict | None = None):
        self.contents = contents or {}
        self.accounts = accounts or {}
        self.content_calls: list[tuple[str, str]] = []

    async def get_content(self, author: str, permlink: str) -> ContentRecord:
        self.content_calls.append((author, permlink))
        found = self.contents.get((author, permlink), {})
        return ContentRecord(
            author=author,
            permlink=permlink,
            body=found.get("body", ""),
            raw={"author": author, "permlink": permlink, **found},
        )

    async def get_account(self, name: str) -> Optional[Account]:
        memo_key = self.accounts.get(name)
        if memo_key is None:
            return None
        return Account(name=name, memo_key=memo_key, raw={"name": name, "memo_key": memo_key})


class FakeTransport(BroadcastTransport):
    name = "fake"

    def __init__(self, result: BroadcastResult | None = None, error: Exception | None = None):
        self.result = result or BroadcastResult(id="trx-1")
        self.error = error
        self.sent: list[tuple] = []

    async def send(self, operations, authority, keys, username):
        self.sent.append((operations, authority, keys, username))
        if self.error is not None:
            raise self.error
        return self.result


class FakeSidechain:
    """Replays scripted getTransactionInfo answers, then keeps answering None."""

    def __init__(self, answers: list | None = None):
        self.answers = list(answers or [])
        self.calls: list[str] = []

    async def get_transaction_info(self, txid: str) -> Optional[TransactionInfo]:
        self.calls.append(txid)
        if self.answers:
            return self.answers.pop(0)
        return None


class Sleeps(list):
    """Records requested delays instead of sleeping."""

    async def __call__(self, seconds: float) -> None:
        self.append(seconds)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore({"user": {"current": {"username": "bob"}}})


@pytest.fixture
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture
def sleeps() -> Sleeps:
    return Sleeps()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sidechain() -> FakeSidechain:
    return FakeSidechain()


@pytest.fixture
def context(store, node, sleeps) -> HookContext:
    return HookContext(store=store, client=node, sleep=sleeps)


@pytest.fixture
def executor(context, transport, sidechain, sleeps) -> BroadcastExecutor:
    return BroadcastExecutor(
        context=context,
        local=transport,
        poller=ConfirmationPoller(sidechain, sleep=sleeps),
        read_only=False,
        bench_mode=0,
    )
