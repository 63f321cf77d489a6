from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from contextlib import aclosing
from pathlib import Path

from logfmt_extract.core.decoder import DecoderConfig, LogfmtDecoder, resolve_decoder_config
from logfmt_extract.core.log_service import count_keys, iter_records
from logfmt_extract.core.models import ValuelessKeyPolicy
from logfmt_extract.core.projection import RecordColumn, parse_columns, project_fields
from logfmt_extract.logging_utils import configure_logging

LOGGER = logging.getLogger(__name__)


def _parse_columns(s: str) -> list[RecordColumn]:
    try:
        return parse_columns(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _positive_int(s: str) -> int:
    value = int(s)
    if value < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return value


def _decoder(args: argparse.Namespace) -> LogfmtDecoder:
    cfg = resolve_decoder_config()
    if args.bare_keys:
        cfg = DecoderConfig(policy=ValuelessKeyPolicy.ALLOW_BARE)
    return LogfmtDecoder(config=cfg)


async def _print_records(args: argparse.Namespace, path: Path) -> int:
    printed = 0
    records = iter_records(
        path,
        decoder=_decoder(args),
        contains=args.contains,
        max_workers=args.workers,
        include_raw=False,
    )
    async with aclosing(records):
        async for record in records:
            if args.columns:
                values = project_fields(record.fields, args.columns)
                row = {c.name: v for c, v in zip(args.columns, values)}
                print(json.dumps({"line_no": record.line_no, "values": row}, default=str, ensure_ascii=False))
            else:
                print(json.dumps({"line_no": record.line_no, "fields": record.fields}, ensure_ascii=False))
            printed += 1
            if args.max_results is not None and printed >= args.max_results:
                break
    return printed


async def _print_keys(args: argparse.Namespace, path: Path) -> int:
    counts = await count_keys(
        path,
        decoder=_decoder(args),
        contains=args.contains,
        max_workers=args.workers,
    )
    for key, n in counts.items():
        print(f"{n}\t{key}")
    return len(counts)


def main() -> None:
    p = argparse.ArgumentParser(description="Extract logfmt fields from log lines.")
    p.add_argument("log_path")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--keys", action="store_true", help="Print key frequencies instead of records")
    mode.add_argument(
        "--columns",
        type=_parse_columns,
        default=None,
        help='Project onto typed columns, e.g. "status int, service text"',
    )
    p.add_argument("--contains", default=None, help="Only decode lines containing this substring")
    p.add_argument("--bare-keys", action="store_true", help="Treat bare words after the first pair as keys")
    p.add_argument("--max", dest="max_results", type=_positive_int, default=None, help="Max records to print")
    p.add_argument("--workers", type=_positive_int, default=None, help="Decode threads (default: env or CPU count)")

    args = p.parse_args()
    configure_logging()
    path = Path(args.log_path)

    try:
        if args.keys:
            found = asyncio.run(_print_keys(args, path))
            print(f"\nFound {found} distinct keys.", file=sys.stderr)
        else:
            found = asyncio.run(_print_records(args, path))
            print(f"\nFound {found} logfmt lines.", file=sys.stderr)
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    LOGGER.debug("Done: %s", path)


if __name__ == "__main__":
    main()
