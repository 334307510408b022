"""
Comment body patching.

Edits to an existing comment may be broadcast as a diff-match-patch text
patch instead of the full body when the patch is smaller.
"""

from __future__ import annotations

from typing import Optional

from diff_match_patch import diff_match_patch

_dmp = diff_match_patch()


def create_patch(original: str, updated: str) -> Optional[str]:
    if original == "":
        return None
    patches = _dmp.patch_make(original, updated)
    return _dmp.patch_toText(patches)


def choose_body(original_body: Optional[str], body: str) -> str:
    """Return the patch when shorter than the body's UTF-8 size, else the body.

    The patch is measured in characters, the body in bytes.
    """
    if original_body:
        patch = create_patch(original_body, body)
        if patch and len(patch) < len(body.encode("utf-8")):
            return patch
    return body
