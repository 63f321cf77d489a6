"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: decode single lines or whole log files
- Resources: addressable data blobs (sample log, decoder config, schemas)
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m logfmt_extract.server.log_server
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from logfmt_extract.logging_utils import configure_logging
from logfmt_extract.prompts.registry import register_prompts
from logfmt_extract.resources.registry import register_resources
from logfmt_extract.tools.extract import (
    extract_logfmt_impl,
    logfmt_key_stats_impl,
    logfmt_keys_array_impl,
    logfmt_keys_impl,
    logfmt_to_json_impl,
    logfmt_to_record_impl,
)

LOGGER = logging.getLogger(__name__)

mcp = FastMCP("logfmt-extract", json_response=True)

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
def logfmt_to_json(line: str, bare_keys: bool | None = None) -> dict[str, Any]:
    """Decode the logfmt part of one log line into an object.

    Any non-logfmt preamble (timestamp, severity tag) is skipped. Keys written
    without a value map to null; `key=""` maps to an empty string.

    Returns
    -------
    dict:
        {"logfmt": bool, "fields": dict | None}
    """
    return logfmt_to_json_impl(line=line, bare_keys=bare_keys)


@mcp.tool()
def logfmt_keys(line: str, bare_keys: bool | None = None) -> dict[str, Any]:
    """List the keys of one log line in order of first appearance (empty if not logfmt)."""
    return logfmt_keys_impl(line=line, bare_keys=bare_keys)


@mcp.tool()
def logfmt_keys_array(line: str, bare_keys: bool | None = None) -> dict[str, Any]:
    """Like logfmt_keys, but keys is null when the line holds no logfmt."""
    return logfmt_keys_array_impl(line=line, bare_keys=bare_keys)


@mcp.tool()
def logfmt_to_record(
    line: str,
    columns: str | list[dict[str, Any]],
    bare_keys: bool | None = None,
) -> dict[str, Any]:
    """Project one log line onto a fixed list of typed columns.

    Parameters
    ----------
    line:
        The log line.
    columns:
        Either a column definition list (e.g., "source text, status int") or a
        list of {"name": ..., "type": ...} objects. Types: text, int, bigint,
        integer, float, real, double, numeric, bool, boolean, date, timestamp,
        timestamptz, json.

    Returns
    -------
    dict:
        {"columns": list[dict], "values": list}; missing keys are null.
    """
    return logfmt_to_record_impl(line=line, columns=columns, bare_keys=bare_keys)


@mcp.tool()
async def extract_logfmt(
    log_path: str,
    contains: str | None = None,
    limit: int | None = None,
    include_raw: bool = False,
    bare_keys: bool | None = None,
) -> dict[str, Any]:
    """Decode every logfmt line of a local log file (plain text or .gz).

    Parameters
    ----------
    contains:
        Substring filter applied to the raw line before decoding.
    limit:
        Maximum number of records returned (hard-capped in the implementation).
    include_raw:
        Whether to include the original raw line in each record.
    bare_keys:
        Record bare words after the first pair as keys without value.

    Returns
    -------
    dict:
        {"count": int, "records": list[dict]}
    """
    return await extract_logfmt_impl(
        log_path=log_path,
        contains=contains,
        limit=limit,
        include_raw=include_raw,
        bare_keys=bare_keys,
    )


@mcp.tool()
async def logfmt_key_stats(
    log_path: str,
    contains: str | None = None,
    bare_keys: bool | None = None,
) -> dict[str, Any]:
    """Count how many logfmt lines of a file carry each key."""
    return await logfmt_key_stats_impl(log_path=log_path, contains=contains, bare_keys=bare_keys)


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
