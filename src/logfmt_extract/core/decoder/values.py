"""Value decoding for quoted and bare logfmt values."""

from __future__ import annotations

import re

from ..models import ABSENT, Value, ValueKind

_BARE_RE = re.compile(r"[^ ]+")
_QUOTED_RUN_RE = re.compile(r'[^"\\]+')

_ESCAPES = {'"': '"', "\\": "\\"}


def decode_value(line: str, pos: int) -> tuple[Value, int]:
    """Decode the value starting right after `=`.

    Returns the value and the offset just past it.
    """
    if pos >= len(line) or line[pos] == " ":
        return ABSENT, pos
    if line[pos] == '"':
        return decode_quoted(line, pos + 1)

    m = _BARE_RE.match(line, pos)
    return Value(ValueKind.BARE, m.group()), m.end()


def decode_quoted(line: str, pos: int) -> tuple[Value, int]:
    """Decode a quoted body starting just after the opening quote.

    Only `\\"` and `\\\\` are escapes; other backslashes are kept as written.
    Without a closing quote the body runs to the end of the line.
    """
    parts: list[str] = []
    end = len(line)
    while pos < end:
        m = _QUOTED_RUN_RE.match(line, pos)
        if m is not None:
            parts.append(m.group())
            pos = m.end()
            continue

        if line[pos] == '"':
            return Value(ValueKind.QUOTED, "".join(parts)), pos + 1

        escaped = _ESCAPES.get(line[pos + 1 : pos + 2])
        if escaped is not None:
            parts.append(escaped)
            pos += 2
        else:
            parts.append("\\")
            pos += 1

    return Value(ValueKind.QUOTED, "".join(parts)), pos
