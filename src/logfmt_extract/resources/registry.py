"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

import asyncio
import gzip
import json
import os
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from logfmt_extract.core.decoder import decode, resolve_decoder_config
from logfmt_extract.core.decoder.base import BARE_KEYS_ENV
from logfmt_extract.core.log_service import MAX_WORKERS_ENV
from logfmt_extract.core.projection import RecordColumn

ALLOWED_FILE_SUFFIXES = {".log", ".txt"}
BASE_DIR_ENV = "LOGFMT_EXTRACT_BASE_DIR"
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "replace"

SAMPLE_LOG = (
    "at=info method=GET path=\"/\" host=example.com request_id=8601b555-6a83 "
    "fwd=\"10.0.0.1\" dyno=web.1 connect=1ms service=18ms status=200 bytes=1548\n"
    "I, [2022-08-05T15:55:06.123 #56]  INFO -- : [f116113c] Started GET \"/\"\n"
    "I, [2022-08-05T15:55:06.456 #56]  INFO -- : at=info method=POST path=\"/foo/bar\" status=204\n"
    "source=web.1 dyno=heroku.238235071.aa92a0d0 sample#load_avg_1m=0.57 sample#load_avg_5m=0.16\n"
    "at=error code=H12 desc=\"Request timeout\" method=GET path=\"/slow\" status=503\n"
)


def _base_dir() -> Path:
    """Return the resolved base directory for file resources."""
    raw = os.getenv(BASE_DIR_ENV, os.getcwd())
    return Path(raw).resolve()


def _safe_resolve(path: str) -> Path:
    """Resolve a path under the configured base directory."""
    base = _base_dir()
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = base / p
    p = p.resolve()
    if base not in p.parents and p != base:
        raise ValueError("Path escapes base dir")
    return p


def _allowed_suffix(path: Path) -> str:
    """Return the effective suffix for allowlist checks."""
    suffix = path.suffix.lower()
    if suffix == ".gz":
        suffix = path.with_suffix("").suffix.lower()
    return suffix


def _resolve_resource_path(path: str) -> Path:
    """Resolve and validate a resource file path."""
    resolved = _safe_resolve(path)
    if not resolved.is_file():
        raise FileNotFoundError(f"File not found: {resolved}")
    if _allowed_suffix(resolved) not in ALLOWED_FILE_SUFFIXES:
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        raise ValueError(f"File type not allowed. Allowed: {allowed}.")
    return resolved


def _open_text(path: Path) -> str:
    """Read text from a file, supporting optional gzip compression."""
    if path.suffix.lower() == ".gz":
        with gzip.open(path, mode="rt", encoding=TEXT_ENCODING, errors=TEXT_ERRORS) as f:
            return f.read()
    return path.read_text(encoding=TEXT_ENCODING, errors=TEXT_ERRORS)


def decoded_lines(text: str) -> str:
    """Return one JSON object per logfmt line of `text` (JSON lines)."""
    policy = resolve_decoder_config().policy
    out: list[str] = []
    for line in text.splitlines():
        fields = decode(line, policy=policy)
        if fields is not None:
            out.append(json.dumps(fields, ensure_ascii=False))
    return "\n".join(out)


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://logfmt-extract/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        base = _base_dir()
        return (
            "Resources:\n"
            "- app://logfmt-extract/help\n"
            "- app://logfmt-extract/config/decoder\n"
            "- app://logfmt-extract/schemas/record-column\n"
            "- app://logfmt-extract/examples/sample-log\n"
            f"- log://{{path}} (restricted to {BASE_DIR_ENV}; allowed: {allowed}, .gz)\n"
            "- logfmt://{path} (same rules as log://; decoded as JSON lines)\n"
            f"\nBase directory: {base}\n"
        )

    @mcp.resource("app://logfmt-extract/examples/sample-log")
    def sample_log() -> str:
        """Return a tiny sample log for demos and tests."""
        return SAMPLE_LOG

    @mcp.resource("app://logfmt-extract/config/decoder")
    def decoder_config() -> dict[str, Any]:
        """Return the effective decoder configuration."""
        cfg = resolve_decoder_config()
        return {
            "policy": cfg.policy.value,
            "env": {
                BARE_KEYS_ENV: os.getenv(BARE_KEYS_ENV),
                MAX_WORKERS_ENV: os.getenv(MAX_WORKERS_ENV),
            },
        }

    @mcp.resource("app://logfmt-extract/schemas/record-column")
    def record_column_schema() -> dict[str, Any]:
        """Return the JSON schema for record columns."""
        return RecordColumn.model_json_schema()

    @mcp.resource("log://{path}")
    async def read_log(path: str) -> str:
        """Return the full log contents."""
        p = _resolve_resource_path(path)
        return await asyncio.to_thread(_open_text, p)

    @mcp.resource("logfmt://{path}")
    async def read_decoded(path: str) -> str:
        """Return the logfmt lines of a log as JSON lines."""
        p = _resolve_resource_path(path)
        text = await asyncio.to_thread(_open_text, p)
        return decoded_lines(text)
