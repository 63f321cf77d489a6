"""Prefix scanner: locate where structured content begins."""

from __future__ import annotations

import re

# A key run must start the line or follow a space/`=`, so each run is tried once.
_KEY_START_RE = re.compile(r"(?<![^= ])[^= ]+=")


def scan_prefix(line: str) -> int | None:
    """Return the earliest offset where a `key=` token begins, or None."""
    m = _KEY_START_RE.search(line)
    if m is None:
        return None
    return m.start()
