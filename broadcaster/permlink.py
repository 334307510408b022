"""
Permlink generation for new posts and replies.
"""

from __future__ import annotations

import re
import secrets
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

import base58
from slugify import slugify

from chain_sdk.models import ContentRecord

MAX_PERMLINK_LENGTH = 255
SLUG_MAX_LENGTH = 128

# Reply permlinks end in "-<yyyymmdd>t<hhmmssmmm>z"
_REPLY_SUFFIX = re.compile(r"(-\d{8}t\d{9}z)")
_NOT_SLUG = re.compile(r"[^a-z0-9-]+")

ContentLookup = Callable[[str, str], Awaitable[ContentRecord]]


def slug(text: str) -> str:
    return slugify(re.sub(r"[<>]", "", text), max_length=SLUG_MAX_LENGTH, word_boundary=True)


def random_token() -> str:
    """base58 of 4 random bytes."""
    return base58.b58encode(secrets.token_bytes(4)).decode("ascii")


def reply_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO timestamp with punctuation removed, e.g. ``20261019t080405123z``."""
    now = now or datetime.now(timezone.utc)
    now = now.astimezone(timezone.utc)
    return f"{now:%Y%m%dt%H%M%S}{now.microsecond // 1000:03d}z"


async def create_permlink(
    title: Optional[str],
    author: str,
    parent_author: str,
    parent_permlink: str,
    get_content: ContentLookup,
    now: Optional[datetime] = None,
) -> str:
    """
    Build a permlink for a comment that has none.

    Titled posts get a slug of the title, prefixed with a random token when
    the author already has content at that slug.  Untitled replies get
    ``re-<parent_author>-<parent_permlink>-<timestamp>``.  Results longer
    than the network limit keep their last 255 characters.
    """
    if title and title.strip() != "":
        s = slug(title)
        if s == "":
            s = random_token()
        s = _NOT_SLUG.sub("", s.lower())
        existing = await get_content(author, s)
        prefix = random_token() + "-" if existing.exists else ""
        permlink = prefix + s
    else:
        parent_permlink = _REPLY_SUFFIX.sub("", parent_permlink or "")
        # Periods are valid in account names but not in permlinks
        parent_author = (parent_author or "").replace(".", "")
        permlink = f"re-{parent_author}-{parent_permlink}-{reply_timestamp(now)}"

    if len(permlink) > MAX_PERMLINK_LENGTH:
        permlink = permlink[-MAX_PERMLINK_LENGTH:]
    return permlink
