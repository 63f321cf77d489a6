"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import TypeAdapter, ValidationError

from logfmt_extract.core.decoder import DecoderConfig, LogfmtDecoder, decode, resolve_decoder_config
from logfmt_extract.core.log_service import count_keys, get_records
from logfmt_extract.core.models import LogfmtRecord, ValuelessKeyPolicy
from logfmt_extract.core.projection import (
    RecordColumn,
    iter_keys,
    keys_array,
    parse_columns,
    to_object,
    to_record,
)

DEFAULT_LIMIT = 200
HARD_LIMIT = 5000

_JSONABLE = TypeAdapter(list[Any])


def _policy(bare_keys: bool | None) -> ValuelessKeyPolicy:
    """Explicit flag wins; otherwise fall back to the environment config."""
    if bare_keys is None:
        return resolve_decoder_config().policy
    return ValuelessKeyPolicy.ALLOW_BARE if bare_keys else ValuelessKeyPolicy.REQUIRE_EQUALS


def _resolve_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    if limit <= 0:
        raise ValueError("limit must be > 0")
    return min(limit, HARD_LIMIT)


def _parse_columns(columns: str | Sequence[Mapping[str, Any]]) -> list[RecordColumn]:
    """Accept either `name type, ...` text or a list of {name, type} objects."""
    if isinstance(columns, str):
        return parse_columns(columns)
    try:
        out = [RecordColumn.model_validate(c) for c in columns]
    except ValidationError as e:
        raise ValueError(f"Invalid columns: {e.errors()[0]['msg']}") from e
    if not out:
        raise ValueError("At least one column must be provided")
    return out


def _record_to_dict(record: LogfmtRecord, *, include_raw: bool) -> dict[str, Any]:
    """Convert a LogfmtRecord into a JSON-serializable dict."""
    d: dict[str, Any] = {
        "line_no": record.line_no,
        "fields": to_object(record.fields),
    }
    if include_raw and record.raw is not None:
        d["raw"] = record.raw
    return d


def logfmt_to_json_impl(*, line: str, bare_keys: bool | None = None) -> dict[str, Any]:
    """Implementation for the `logfmt_to_json` MCP tool."""
    fields = to_object(decode(line, policy=_policy(bare_keys)))
    return {"logfmt": fields is not None, "fields": fields}


def logfmt_keys_impl(*, line: str, bare_keys: bool | None = None) -> dict[str, Any]:
    """Implementation for the `logfmt_keys` MCP tool (always a list)."""
    return {"keys": list(iter_keys(line, policy=_policy(bare_keys)))}


def logfmt_keys_array_impl(*, line: str, bare_keys: bool | None = None) -> dict[str, Any]:
    """Implementation for the `logfmt_keys_array` MCP tool (null for non-logfmt)."""
    return {"keys": keys_array(line, policy=_policy(bare_keys))}


def logfmt_to_record_impl(
    *,
    line: str,
    columns: str | Sequence[Mapping[str, Any]],
    bare_keys: bool | None = None,
) -> dict[str, Any]:
    """Implementation for the `logfmt_to_record` MCP tool."""
    cols = _parse_columns(columns)
    values = to_record(line, cols, policy=_policy(bare_keys))
    return {
        "columns": [c.model_dump() for c in cols],
        "values": _JSONABLE.dump_python(list(values), mode="json"),
    }


async def extract_logfmt_impl(
    *,
    log_path: str,
    contains: str | None = None,
    limit: int | None = None,
    include_raw: bool = False,
    bare_keys: bool | None = None,
) -> dict[str, Any]:
    """Implementation for the `extract_logfmt` MCP tool."""
    records = await get_records(
        log_path,
        decoder=LogfmtDecoder(config=DecoderConfig(policy=_policy(bare_keys))),
        contains=contains,
        limit=_resolve_limit(limit),
        include_raw=include_raw,
    )
    return {
        "count": len(records),
        "records": [_record_to_dict(r, include_raw=include_raw) for r in records],
    }


async def logfmt_key_stats_impl(
    *,
    log_path: str,
    contains: str | None = None,
    bare_keys: bool | None = None,
) -> dict[str, Any]:
    """Implementation for the `logfmt_key_stats` MCP tool."""
    counts = await count_keys(
        log_path,
        decoder=LogfmtDecoder(config=DecoderConfig(policy=_policy(bare_keys))),
        contains=contains,
    )
    return {
        "count": len(counts),
        "keys": [{"key": k, "lines": n} for k, n in counts.items()],
    }
