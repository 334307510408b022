"""
Broadcast Payload Executor Test Suite
Read-only mode, transform-then-send, side-chain confirmation, and the
isolation rules for hooks and callbacks on both outcome paths.
"""

from __future__ import annotations

import json

import pytest

from conftest import FakeSidechain, FakeTransport

from broadcaster.errors import ConfigurationError, TransportError
from broadcaster.executor import BroadcastExecutor
from broadcaster.hooks import HANDLERS, OperationHandler
from broadcaster.models import BroadcastPayload
from broadcaster.operations import CONFIG_KEY, Authority
from broadcaster.poller import ConfirmationPoller
from broadcaster.state import AddNotification, RemoveState, SetState, TransactionFailed, vote_marker_key
from chain_sdk.models import TransactionInfo

VOTE = {"author": "alice", "permlink": "post1", "weight": 10000}


class Recorder(OperationHandler):
    """Records outcome hooks; optionally raises from them."""

    def __init__(self, raise_in: str | None = None):
        self.raise_in = raise_in
        self.calls: list[str] = []

    async def accepted(self, ctx, operation, username):
        self.calls.append("accepted")
        if self.raise_in == "accepted":
            raise RuntimeError("accepted hook blew up")

    async def error(self, ctx, operation):
        self.calls.append("error")
        if self.raise_in == "error":
            raise RuntimeError("error hook blew up")


def payload(operations, **kw) -> BroadcastPayload:
    return BroadcastPayload(operations=operations, needs_active_auth=kw.pop("active", False), **kw)


@pytest.mark.asyncio
async def test_read_only_mode_is_a_silent_noop(context, transport, sidechain, store) -> None:
    called: list[bool] = []
    executor = BroadcastExecutor(
        context=context, local=transport, poller=ConfirmationPoller(sidechain),
        read_only=True, bench_mode=0,
    )
    await executor.execute(payload([["vote", dict(VOTE)]], success_callback=lambda: called.append(True)))
    assert transport.sent == []
    assert store.commands == []
    assert called == []


@pytest.mark.asyncio
async def test_clears_stale_errors_and_sends_transformed_batch(executor, transport, store) -> None:
    await executor.execute(payload([["vote", dict(VOTE)]], keys=["5Kkey"]))
    assert store.commands[0] == RemoveState(("TransactionError", "vote"))
    assert store.commands[1] == SetState(vote_marker_key("alice", "post1"), True)
    [(operations, authority, keys, username)] = transport.sent
    assert operations == [["vote", {**VOTE, "voter": "bob"}]]
    assert authority == Authority.POSTING
    assert keys == ["5Kkey"]
    assert username == "bob"


@pytest.mark.asyncio
async def test_explicit_username_wins_over_session(executor, transport) -> None:
    await executor.execute(payload([["vote", dict(VOTE)]], username="carol"))
    assert transport.sent[0][3] == "carol"
    assert transport.sent[0][0][0][1]["voter"] == "carol"


@pytest.mark.asyncio
async def test_active_authority(executor, transport) -> None:
    await executor.execute(payload([["transfer", {"from": "bob", "to": "alice"}]], active=True))
    assert transport.sent[0][1] == Authority.ACTIVE


@pytest.mark.asyncio
async def test_transform_error_propagates_before_send(executor, transport) -> None:
    op = {"from": "bob", "to": "alice", "amount": "1.000 STEEM", "memo": "#secret"}
    with pytest.raises(ConfigurationError):
        await executor.execute(payload([["transfer", op]], active=True))
    assert transport.sent == []


@pytest.mark.asyncio
async def test_success_notification_and_callback_order(executor, store) -> None:
    events: list[str] = []
    op = {"account": "bob", CONFIG_KEY: {"successMessage": "Rewards claimed"}}
    await executor.execute(payload(
        [["claim_reward_balance", op]],
        success_callback=lambda: events.append("success"),
    ))
    [note] = store.of_type(AddNotification)
    assert note.message == "Rewards claimed"
    assert note.key.startswith("trx_")
    assert note.dismiss_after == 5000
    assert events == ["success"]


@pytest.mark.asyncio
async def test_accepted_hook_failure_is_isolated(executor, monkeypatch) -> None:
    first, second = Recorder(raise_in="accepted"), Recorder()
    monkeypatch.setitem(HANDLERS, "op_a", first)
    monkeypatch.setitem(HANDLERS, "op_b", second)
    events: list[str] = []
    await executor.execute(payload(
        [["op_a", {}], ["op_b", {}]],
        success_callback=lambda: events.append("success"),
        error_callback=events.append,
    ))
    assert first.calls == ["accepted"]
    assert second.calls == ["accepted"]
    assert events == ["success"]


@pytest.mark.asyncio
async def test_success_callback_exception_is_contained(executor, store) -> None:
    def boom() -> None:
        raise RuntimeError("ui went away")

    await executor.execute(payload([["claim_reward_balance", {"account": "bob"}]], success_callback=boom))
    assert store.of_type(TransactionFailed) == []


@pytest.mark.asyncio
async def test_transport_failure_emits_error_state_and_hooks(context, store, sidechain, monkeypatch) -> None:
    first, second = Recorder(raise_in="error"), Recorder()
    monkeypatch.setitem(HANDLERS, "op_a", first)
    monkeypatch.setitem(HANDLERS, "op_b", second)
    transport = FakeTransport(error=TransportError("node said no"))
    executor = BroadcastExecutor(
        context=context, local=transport, poller=ConfirmationPoller(sidechain),
        read_only=False, bench_mode=0,
    )
    errors: list[str] = []
    await executor.execute(payload([["op_a", {}], ["op_b", {}]], error_callback=errors.append))
    [failed] = store.of_type(TransactionFailed)
    assert str(failed.error) == "node said no"
    assert failed.operations == [["op_a", {}], ["op_b", {}]]
    assert first.calls == ["error"] and second.calls == ["error"]
    assert errors == ["node said no"]


@pytest.mark.asyncio
async def test_vote_error_reverts_marker(context, store, sidechain) -> None:
    transport = FakeTransport(error=TransportError("rejected"))
    executor = BroadcastExecutor(
        context=context, local=transport, poller=ConfirmationPoller(sidechain),
        read_only=False, bench_mode=0,
    )
    await executor.execute(payload([["vote", dict(VOTE)]]))
    assert vote_marker_key("alice", "post1") not in store.state
    assert store.commands.count(RemoveState(vote_marker_key("alice", "post1"))) == 1


@pytest.mark.asyncio
async def test_sidechain_batch_is_polled(context, store, transport, sleeps) -> None:
    chain = FakeSidechain([TransactionInfo(logs=json.dumps({"events": []}), raw={})])
    executor = BroadcastExecutor(
        context=context, local=transport, poller=ConfirmationPoller(chain, sleep=sleeps),
        read_only=False, bench_mode=0,
    )
    events: list[str] = []
    op = {"id": "ssc-mainnet1", "json": "{}", "required_auths": ["bob"], "required_posting_auths": []}
    await executor.execute(payload([["custom_json", op]], active=True, success_callback=lambda: events.append("ok")))
    assert chain.calls == ["trx-1"]
    assert events == ["ok"]


@pytest.mark.asyncio
async def test_other_custom_json_is_not_polled(executor, sidechain) -> None:
    op = {"id": "follow", "json": "[]", "required_auths": [], "required_posting_auths": ["bob"]}
    await executor.execute(payload([["custom_json", op]]))
    assert sidechain.calls == []


@pytest.mark.asyncio
async def test_external_signer_session_uses_external_transport(context, store, sidechain) -> None:
    await store.dispatch(SetState(("user", "current", "external_signer"), True))
    local, external = FakeTransport(), FakeTransport()
    executor = BroadcastExecutor(
        context=context, local=local, external=external,
        poller=ConfirmationPoller(sidechain), read_only=False, bench_mode=0,
    )
    await executor.execute(payload([["claim_reward_balance", {"account": "bob"}]]))
    assert local.sent == []
    assert len(external.sent) == 1
