"""
UI State Commands

The broadcaster never touches the UI store directly.  It reads through
``get_state(path)`` and writes by dispatching command objects that describe
the intended mutation; the store applies them as pure transforms over its
prior state.  ``MemoryStore`` is the in-process reference implementation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Union

from chain_sdk.models import ContentRecord

logger = logging.getLogger(__name__)

Path = Union[str, tuple]

# ---------------------------------------------------------------------------
# Well-known read paths
# ---------------------------------------------------------------------------

CURRENT_USERNAME = ("user", "current", "username")
MEMO_PRIVATE_KEY = ("user", "current", "private_keys", "memo_private")
EXTERNAL_SIGNER_LOGIN = ("user", "current", "external_signer")


def vote_marker_key(author: str, permlink: str) -> str:
    return f"transaction_vote_active_{author}_{permlink}"


def follow_key(follower: str) -> tuple:
    return ("follow", "getFollowingAsync", follower)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@dataclass
class SetState:
    key: Path
    value: Any


@dataclass
class RemoveState:
    key: Path


@dataclass
class UpdateState:
    key: Path
    updater: Callable[[Any], Any]
    not_set: Any = None


@dataclass
class ReceiveContent:
    content: ContentRecord


@dataclass
class VoteRecorded:
    username: str
    author: str
    permlink: str
    weight: int


@dataclass
class LinkReply:
    operation: dict[str, Any]


@dataclass
class DeleteContent:
    operation: dict[str, Any]


@dataclass
class AddNotification:
    key: str
    message: str
    dismiss_after: int = 5000


@dataclass
class ConfirmOperation:
    """Ask the user to approve ``operation`` (a BroadcastRequest) before replay."""
    confirm: Any
    warning: Optional[str]
    operation: Any
    error_callback: Optional[Callable[[str], Any]] = None
    checkbox: Optional[str] = None


@dataclass
class ShowLogin:
    operation: Any
    save_login: bool = True


@dataclass
class TransactionFailed:
    operations: list
    error: BaseException
    error_callback: Optional[Callable[[str], Any]] = None


@dataclass
class LookupVotingPower:
    account: str


class StateStore(Protocol):
    async def dispatch(self, command: Any) -> None: ...

    async def get_state(self, path: Path, default: Any = None) -> Any: ...


# ---------------------------------------------------------------------------
# Pure transforms
# ---------------------------------------------------------------------------

def _as_path(key: Path) -> tuple:
    return key if isinstance(key, tuple) else (key,)


def get_in(state: dict, path: Path, default: Any = None) -> Any:
    node: Any = state
    for part in _as_path(path):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def assoc_in(state: dict, path: Path, value: Any) -> dict:
    """Return a copy of ``state`` with ``value`` at ``path``."""
    head, *rest = _as_path(path)
    new = dict(state)
    if rest:
        child = state.get(head)
        new[head] = assoc_in(child if isinstance(child, dict) else {}, tuple(rest), value)
    else:
        new[head] = value
    return new


def dissoc_in(state: dict, path: Path) -> dict:
    head, *rest = _as_path(path)
    if head not in state:
        return state
    new = dict(state)
    if rest:
        child = state[head]
        if isinstance(child, dict):
            new[head] = dissoc_in(child, tuple(rest))
    else:
        del new[head]
    return new


def update_follow_state(action: Optional[str], following: str, state: dict) -> dict:
    """Move ``following`` between the blog and ignore sets and recount.

    ``action`` is ``"blog"``, ``"ignore"``, or None (unfollow / unignore).
    """
    blog = set(state.get("blog_result") or ())
    ignore = set(state.get("ignore_result") or ())
    if action is None:
        blog.discard(following)
        ignore.discard(following)
    elif action == "blog":
        blog.add(following)
        ignore.discard(following)
    elif action == "ignore":
        ignore.add(following)
        blog.discard(following)
    return {
        **state,
        "blog_result": frozenset(blog),
        "ignore_result": frozenset(ignore),
        "blog_count": len(blog),
        "ignore_count": len(ignore),
    }


# ---------------------------------------------------------------------------
# Reference store
# ---------------------------------------------------------------------------

class MemoryStore:
    """
    Dict-backed StateStore.

    Every dispatched command is appended to ``commands``; path commands and
    content commands are applied to ``state``.
    """

    def __init__(self, state: dict | None = None):
        self.state: dict = state or {}
        self.commands: list = []

    async def get_state(self, path: Path, default: Any = None) -> Any:
        return get_in(self.state, path, default)

    async def dispatch(self, command: Any) -> None:
        self.commands.append(command)
        self.state = self._apply(self.state, command)

    def of_type(self, command_type: type) -> list:
        return [c for c in self.commands if isinstance(c, command_type)]

    def _apply(self, state: dict, command: Any) -> dict:
        if isinstance(command, SetState):
            return assoc_in(state, command.key, command.value)
        if isinstance(command, RemoveState):
            return dissoc_in(state, command.key)
        if isinstance(command, UpdateState):
            prior = get_in(state, command.key, command.not_set)
            return assoc_in(state, command.key, command.updater(prior))
        if isinstance(command, ReceiveContent):
            c = command.content
            return assoc_in(state, ("content", f"{c.author}/{c.permlink}"), c.raw)
        if isinstance(command, DeleteContent):
            op = command.operation
            return dissoc_in(state, ("content", f"{op['author']}/{op['permlink']}"))
        if isinstance(command, LinkReply):
            return self._link_reply(state, command.operation)
        if isinstance(command, VoteRecorded):
            key = ("content", f"{command.author}/{command.permlink}", "active_votes")
            votes = [v for v in get_in(state, key, []) if v.get("voter") != command.username]
            votes.append({"voter": command.username, "percent": command.weight})
            return assoc_in(state, key, votes)
        if isinstance(command, TransactionFailed):
            return self._record_failure(state, command)
        return state

    @staticmethod
    def _link_reply(state: dict, operation: dict) -> dict:
        parent_author = operation.get("parent_author")
        if not parent_author:
            return state
        key = ("content", f"{parent_author}/{operation.get('parent_permlink')}", "replies")
        reply = f"{operation['author']}/{operation['permlink']}"
        replies = list(get_in(state, key, []))
        if reply in replies:
            return state
        return assoc_in(state, key, replies + [reply])

    @staticmethod
    def _record_failure(state: dict, command: TransactionFailed) -> dict:
        message = str(command.error)
        for op_type, _operation in command.operations:
            state = assoc_in(state, ("TransactionError", op_type), message)
        if command.error_callback is not None:
            try:
                command.error_callback(message)
            except Exception:
                logger.exception("error callback raised")
        return state
