"""
Private Key Safety Scanner

Detects WIF-encoded private keys pasted into public operation fields
(memos, post bodies, json payloads) before they are broadcast.  A hit is
not an error: the Orchestrator turns it into a confirmation re-prompt.
"""

from __future__ import annotations

import json
import re
from typing import Any

import base58

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Optional "P" marks a master password; the key itself is "5" + 50 base58 chars
WIF_PATTERN = re.compile(
    r"P?(5[123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz]{50})"
)

WIF_VERSION = 0x80
PRIVATE_KEY_BYTES = 32


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------

def is_valid_wif(candidate: str) -> bool:
    """Base58check decode; format validity only, not key ownership."""
    try:
        decoded = base58.b58decode_check(candidate)
    except ValueError:
        return False
    return len(decoded) == 1 + PRIVATE_KEY_BYTES and decoded[0] == WIF_VERSION


def find_private_keys(text: str) -> list[str]:
    """Every WIF-valid candidate in ``text``, in order of appearance."""
    return [m.group(1) for m in WIF_PATTERN.finditer(text) if is_valid_wif(m.group(1))]


def has_private_keys(operations: Any) -> bool:
    """True if the JSON serialization of ``operations`` embeds a private key."""
    blob = json.dumps(operations, default=str)
    for match in WIF_PATTERN.finditer(blob):
        if is_valid_wif(match.group(1)):
            return True
    return False
