#!/usr/bin/env python3
"""
Private Key Scanner

Scans JSON operation dumps for embedded WIF private keys and prints a
masked report of every hit.

Usage:  python scripts/scan_keys.py ops.json [more.json ...]
Exit code is 1 when any file contains a key.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from broadcaster.safety import find_private_keys, has_private_keys


def mask(wif: str) -> str:
    """Show only the first and last four characters."""
    return f"{wif[:4]}...{wif[-4:]}"


def scan_file(path: Path) -> list[str]:
    operations = json.loads(path.read_text())
    if not has_private_keys(operations):
        return []
    return find_private_keys(json.dumps(operations))


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)

    dirty = False
    for arg in sys.argv[1:]:
        hits = scan_file(Path(arg))
        if hits:
            dirty = True
            print(f"  [KEY ] {arg}")
            for wif in hits:
                print(f"         {mask(wif)}")
        else:
            print(f"  [OK  ] {arg}")
    sys.exit(1 if dirty else 0)


if __name__ == "__main__":
    main()
