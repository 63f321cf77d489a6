"""Pair tokenizer."""

from __future__ import annotations

import re
from collections.abc import Iterator

from ..models import ABSENT, Pair, ValuelessKeyPolicy
from .values import decode_quoted, decode_value

_SPACES_RE = re.compile(r" *")
_TOKEN_RE = re.compile(r"[^ ]*")
_KEY_RE = re.compile(r"(?P<key>[^= ]+)(?P<eq>=?)")


def iter_pairs(
    line: str,
    start: int = 0,
    *,
    policy: ValuelessKeyPolicy = ValuelessKeyPolicy.REQUIRE_EQUALS,
) -> Iterator[Pair]:
    """Yield pairs from `start` until the first position that is not a pair.

    Text after the last pair is ignored. Under ALLOW_BARE nothing stops the
    scan: bare words (quoted or not) become keys without a value, and a token
    with an empty key (`=x`) is dropped on its own.
    """
    pos = _SPACES_RE.match(line, start).end()
    end = len(line)
    while pos < end:
        m = _KEY_RE.match(line, pos)
        if m is not None and m.group("eq"):
            key = m.group("key")
            value, pos = decode_value(line, m.end())
        elif policy is not ValuelessKeyPolicy.ALLOW_BARE:
            return
        elif line[pos] == '"':
            word, pos = decode_quoted(line, pos + 1)
            key = word.text
            if pos < end and line[pos] == "=":
                value, pos = decode_value(line, pos + 1)
            else:
                value = ABSENT
        elif m is not None:
            key, value, pos = m.group("key"), ABSENT, m.end()
        else:
            # `=` with an empty key
            key, value, pos = "", ABSENT, _TOKEN_RE.match(line, pos).end()

        pos = _SPACES_RE.match(line, pos).end()
        if key:
            yield Pair(key=key, value=value)
