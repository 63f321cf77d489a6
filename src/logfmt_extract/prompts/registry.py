"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP


def _format_flag(value: bool | None) -> str:
    """Return a tool argument as a JSON literal for prompt display."""
    if value is None:
        return "null"
    return "true" if value else "false"


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def explore_logfmt_file(
        log_path: str,
        contains: str | None = None,
        bare_keys: bool | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Build a prompt that explores the structured fields of a log file."""
        call_lines = [f"- log_path: {log_path}"]
        if contains:
            call_lines.append(f"- contains: {contains}")
        call_lines.append(f"- bare_keys: {_format_flag(bare_keys)}")
        call_block = "\n".join(call_lines)
        return [
            {
                "role": "system",
                "content": (
                    "You are a precise assistant for structured log analysis. "
                    "Base every statement on tool output. Do not invent keys or values."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Explore the logfmt fields of a log file. Follow this workflow:\n"
                    "- Call logfmt_key_stats first with the parameters below.\n"
                    f"- Then call extract_logfmt with the same parameters, limit={limit} "
                    "and include_raw=true.\n"
                    "- A null value means the key was written without a value; an empty "
                    "string means it was written as key=\"\". Keep the two apart.\n"
                    "- Lines without logfmt content are skipped by the tools; say so if the "
                    "file yields no records.\n\n"
                    "Call with:\n"
                    f"{call_block}\n\n"
                    "Return this structure:\n"
                    "1) Keys (most frequent first, with line counts)\n"
                    "2) Notable values or patterns (2-5 bullets, quote line_no)\n"
                    "3) Suggested column list for logfmt_to_record "
                    "(e.g., \"status int, service text\")\n"
                ),
            },
            {
                "role": "user",
                "content": [
                    {
                        "type": "text",
                        "text": "Optional: decoded lines are also available via:",
                    },
                    {"type": "resource", "uri": f"logfmt://{log_path}"},
                ],
            },
        ]

    @mcp.prompt()
    def design_record_columns(sample_line: str) -> list[dict[str, Any]]:
        """Build a prompt that proposes typed columns for a sample line."""
        return [
            {
                "role": "system",
                "content": (
                    "You design fixed-schema projections for logfmt lines. Allowed types: "
                    "text, int, bigint, float, numeric, bool, date, timestamp, timestamptz, json."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Call logfmt_to_json on the sample line below, then propose a column list "
                    "and verify it with logfmt_to_record. Prefer text when a value is not "
                    "clearly typed (e.g., '18ms' is text, '204' is int).\n\n"
                    f"Sample line:\n{sample_line}\n"
                ),
            },
        ]
