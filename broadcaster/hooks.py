"""
Per-Operation Hooks

Each operation type may transform itself before broadcast and react to
the batch being accepted or rejected.  Handlers form a closed registry;
a type without a handler passes through unchanged and has no outcome
hooks.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Protocol, Union

from broadcaster.errors import ConfigurationError
from broadcaster.operations import FOLLOW_ID, operation_config
from broadcaster.patch import choose_body
from broadcaster.permlink import create_permlink
from broadcaster.state import (
    MEMO_PRIVATE_KEY,
    DeleteContent,
    LinkReply,
    LookupVotingPower,
    ReceiveContent,
    RemoveState,
    SetState,
    StateStore,
    UpdateState,
    VoteRecorded,
    follow_key,
    update_follow_state,
    vote_marker_key,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration (from env vars with defaults)
# ---------------------------------------------------------------------------

DEBT_TICKER = os.environ.get("DEBT_TICKER", "SBD")

# Votes can take a few blocks to show up in voting power
VOTE_SETTLE_SECONDS = 10.0

Operation = dict[str, Any]
Expansion = Union[Operation, list]


class MemoEncoder(Protocol):
    def encode(self, private_key: str, public_key: str, memo: str) -> str: ...


@dataclass
class HookContext:
    """Collaborators the hooks read from and write to."""
    store: StateStore
    client: Any                      # CondenserClient or compatible
    memo_encoder: Optional[MemoEncoder] = None
    settle_delay: float = VOTE_SETTLE_SECONDS
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)


async def refresh_content(ctx: HookContext, author: str, permlink: str) -> None:
    content = await ctx.client.get_content(author, permlink)
    await ctx.store.dispatch(ReceiveContent(content))


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

class OperationHandler:
    """Pass-through handler; subclasses override the capabilities they have."""

    async def pre_broadcast(
        self, ctx: HookContext, operation: Operation, username: Optional[str]
    ) -> Expansion:
        return operation

    async def accepted(
        self, ctx: HookContext, operation: Operation, username: Optional[str]
    ) -> None:
        return None

    async def error(self, ctx: HookContext, operation: Operation) -> None:
        return None


class CommentHandler(OperationHandler):

    async def pre_broadcast(self, ctx, operation, username):
        """Expand a comment into ``[comment, comment_options?]``."""
        op = dict(operation)
        if not op.get("author"):
            op["author"] = username
        author = op["author"]
        config = operation_config(op)
        comment_options = config.get("comment_options")

        parent_author = op.get("parent_author") or ""
        parent_permlink = op["parent_permlink"] if "parent_permlink" in op else op.get("category", "")
        op.pop("category", None)

        body = choose_body(config.get("originalBody"), (op.get("body") or "").strip())

        permlink = op.get("permlink")
        if not permlink:
            permlink = await create_permlink(
                op.get("title"), author, parent_author, parent_permlink,
                ctx.client.get_content,
            )
        permlink = permlink.lower()

        md = op.get("json_metadata", "")
        op.update(
            permlink=permlink,
            parent_author=parent_author,
            parent_permlink=parent_permlink,
            json_metadata=md if isinstance(md, str) else json.dumps(md),
            title=(op.get("title") or "").strip(),
            body=body,
        )

        expanded: list = [["comment", op]]
        # comment_options must come directly after its comment
        if comment_options is not None:
            expanded.append(["comment_options", {
                "author": author,
                "permlink": permlink,
                "max_accepted_payout": comment_options.get(
                    "max_accepted_payout", f"1000000.000 {DEBT_TICKER}"
                ),
                "percent_steem_dollars": comment_options.get("percent_steem_dollars", 10000),
                "allow_votes": comment_options.get("allow_votes", True),
                "allow_curation_rewards": comment_options.get("allow_curation_rewards", True),
                "extensions": comment_options.get("extensions") or [],
            }])
        return expanded

    async def accepted(self, ctx, operation, username):
        await refresh_content(ctx, operation["author"], operation["permlink"])
        await ctx.store.dispatch(LinkReply(operation))


class TransferHandler(OperationHandler):

    async def pre_broadcast(self, ctx, operation, username):
        """Trim the memo and encrypt it when it starts with ``#``."""
        memo = operation.get("memo")
        if not memo:
            return operation
        op = dict(operation)
        memo = (memo.decode("utf-8") if isinstance(memo, bytes) else str(memo)).strip()
        if memo.startswith("#"):
            memo_private = await ctx.store.get_state(MEMO_PRIVATE_KEY)
            if not memo_private:
                raise ConfigurationError("Unable to encrypt memo, missing memo private key")
            account = await ctx.client.get_account(op["to"])
            if account is None:
                raise ConfigurationError(f"Unknown to account {op['to']}")
            if ctx.memo_encoder is None:
                raise ConfigurationError("Unable to encrypt memo, no memo encoder configured")
            memo = ctx.memo_encoder.encode(memo_private, account.memo_key, memo)
        op["memo"] = memo
        return op


class VoteHandler(OperationHandler):

    async def pre_broadcast(self, ctx, operation, username):
        op = dict(operation)
        if not op.get("voter"):
            op["voter"] = username
        author, permlink = op["author"], op["permlink"]
        # immediate feedback, reverted by error()
        await ctx.store.dispatch(SetState(vote_marker_key(author, permlink), True))
        await ctx.store.dispatch(VoteRecorded(
            username=op["voter"], author=author, permlink=permlink, weight=op.get("weight", 0),
        ))
        return op

    async def accepted(self, ctx, operation, username):
        author, permlink = operation["author"], operation["permlink"]
        logger.info("vote accepted, weight %s on %s/%s", operation.get("weight"), author, permlink)
        await ctx.store.dispatch(RemoveState(vote_marker_key(author, permlink)))
        await refresh_content(ctx, author, permlink)
        await ctx.sleep(ctx.settle_delay)
        await ctx.store.dispatch(LookupVotingPower(account=username))

    async def error(self, ctx, operation):
        author, permlink = operation["author"], operation["permlink"]
        await ctx.store.dispatch(RemoveState(vote_marker_key(author, permlink)))
        # re-fetch to drop the optimistic vote
        await refresh_content(ctx, author, permlink)


class CustomJsonHandler(OperationHandler):

    async def accepted(self, ctx, operation, username):
        if operation.get("id") != FOLLOW_ID:
            return
        try:
            payload = json.loads(operation["json"])
            if payload[0] != "follow":
                return
            body = payload[1]
            follower, following = body["follower"], body["following"]
            what = body.get("what") or []
            action = what[0] if what else None
        except (ValueError, KeyError, IndexError, TypeError):
            logger.warning("unrecognized follow custom_json format: %r", operation.get("json"))
            return
        await ctx.store.dispatch(UpdateState(
            key=follow_key(follower),
            not_set={},
            updater=lambda prior: update_follow_state(action, following, prior or {}),
        ))

    async def error(self, ctx, operation):
        if operation.get("id") != FOLLOW_ID:
            return
        follower = operation["required_posting_auths"][0]
        await ctx.store.dispatch(UpdateState(
            key=follow_key(follower) + ("loading",),
            updater=lambda _prior: None,
        ))


class DeleteCommentHandler(OperationHandler):

    async def accepted(self, ctx, operation, username):
        await ctx.store.dispatch(DeleteContent(operation))


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

PASS_THROUGH = OperationHandler()

HANDLERS: dict[str, OperationHandler] = {
    "comment": CommentHandler(),
    "transfer": TransferHandler(),
    "vote": VoteHandler(),
    "custom_json": CustomJsonHandler(),
    "delete_comment": DeleteCommentHandler(),
}


def handler_for(op_type: str) -> OperationHandler:
    return HANDLERS.get(op_type, PASS_THROUGH)


async def transform_batch(
    ctx: HookContext, operations: list, username: Optional[str]
) -> list:
    """Run every operation through its pre-broadcast hook, flattening expansions."""
    transformed: list = []
    for op_type, operation in operations:
        result = await handler_for(op_type).pre_broadcast(ctx, operation, username)
        if isinstance(result, list):
            transformed.extend(result)
        else:
            transformed.append([op_type, result])
    return transformed
