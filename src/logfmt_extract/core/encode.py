"""Format decoded fields back into a logfmt line."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

_NEEDS_QUOTES = (" ", "=", '"', "\\")


def format_value(value: str | None) -> str:
    """Render a value; None renders as nothing (`key=`)."""
    if value is None:
        return ""
    if value == "" or any(c in value for c in _NEEDS_QUOTES):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return value


def format_logfmt(fields: Mapping[str, str | None] | Iterable[tuple[str, str | None]]) -> str:
    """Format a mapping or iterable of pairs into a logfmt line."""
    items = fields.items() if isinstance(fields, Mapping) else fields
    out: list[str] = []
    for key, value in items:
        if not key or "=" in key or " " in key:
            raise ValueError(f"Invalid logfmt key: {key!r}")
        out.append(f"{key}={format_value(value)}")
    return " ".join(out)
