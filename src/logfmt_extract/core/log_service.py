"""Log loading and record iteration.

This module is the integration point that reads log files line by line, runs
the decoder on each line and returns `LogfmtRecord`s in file order.
"""

from __future__ import annotations

import asyncio
import gzip
import logging
import os
from collections.abc import AsyncIterator, Awaitable, Callable
from concurrent.futures import ThreadPoolExecutor
from contextlib import aclosing, asynccontextmanager
from pathlib import Path

import aiofiles
from aiofiles.threadpool import wrap

from .decoder import LogfmtDecoder, RecordParser, resolve_decoder_config
from .models import LogfmtRecord

LOGGER = logging.getLogger(__name__)

MAX_WORKERS_ENV = "LOGFMT_EXTRACT_MAX_WORKERS"


@asynccontextmanager
async def _open_text(path: Path, *, encoding: str, decode_errors: str):
    """Open a log file for async text reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        f = gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors)
        af = wrap(f)
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=encoding, errors=decode_errors) as f:
            yield f


def default_decoder() -> LogfmtDecoder:
    """Decoder configured from the environment."""
    return LogfmtDecoder(config=resolve_decoder_config())


def _drop_raw(record: LogfmtRecord) -> LogfmtRecord:
    """Return a copy of the record without raw payload."""
    return LogfmtRecord(line_no=record.line_no, fields=record.fields, raw=None)


def _resolve_max_workers(max_workers: int | None) -> int:
    if max_workers is not None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        return max_workers

    env = os.getenv(MAX_WORKERS_ENV)
    if env:
        try:
            value = int(env)
        except ValueError as exc:
            raise ValueError(f"{MAX_WORKERS_ENV} must be an integer") from exc
        if value < 1:
            raise ValueError(f"{MAX_WORKERS_ENV} must be >= 1")
        return value

    cpu_count = os.cpu_count() or 1
    return min(32, cpu_count)


async def _run_pipeline(
    work_iter: AsyncIterator[tuple[int, tuple[int, str]]],
    *,
    worker_count: int,
    processor: Callable[[tuple[int, str]], Awaitable[LogfmtRecord | None]],
) -> AsyncIterator[LogfmtRecord]:
    """Process items on `worker_count` tasks and yield results in input order."""
    if worker_count < 1:
        raise ValueError("worker_count must be >= 1")

    queue_size = max(1, worker_count * 4)
    work_queue: asyncio.Queue[tuple[object, object]] = asyncio.Queue(maxsize=queue_size)
    result_queue: asyncio.Queue[tuple[object, LogfmtRecord | None]] = asyncio.Queue(maxsize=queue_size)
    work_sentinel = object()
    done_sentinel = object()
    errors: list[Exception] = []

    async def reader() -> None:
        try:
            async for seq, item in work_iter:
                await work_queue.put((seq, item))
        except Exception as exc:
            errors.append(exc)
        finally:
            for _ in range(worker_count):
                await work_queue.put((work_sentinel, None))

    async def worker() -> None:
        try:
            while True:
                seq, item = await work_queue.get()
                if seq is work_sentinel:
                    break
                record = await processor(item)
                await result_queue.put((seq, record))
        except Exception as exc:
            errors.append(exc)
        finally:
            await result_queue.put((done_sentinel, None))

    reader_task = asyncio.create_task(reader())
    worker_tasks = [asyncio.create_task(worker()) for _ in range(worker_count)]

    pending: dict[int, LogfmtRecord | None] = {}
    next_seq = 0
    done_workers = 0

    try:
        while True:
            seq, record = await result_queue.get()
            if seq is done_sentinel:
                done_workers += 1
                if done_workers == worker_count:
                    break
                continue

            pending[seq] = record
            while next_seq in pending:
                next_record = pending.pop(next_seq)
                if next_record is not None:
                    yield next_record
                next_seq += 1

        if errors:
            raise errors[0]
    finally:
        reader_task.cancel()
        for task in worker_tasks:
            task.cancel()
        await asyncio.gather(reader_task, *worker_tasks, return_exceptions=True)


async def iter_records(
    log_path: str | Path,
    *,
    decoder: RecordParser | None = None,
    contains: str | None = None,
    encoding: str = "utf-8",
    decode_errors: str = "replace",
    max_workers: int | None = None,
    include_raw: bool = True,
    include_non_logfmt: bool = False,
) -> AsyncIterator[LogfmtRecord]:
    """Yield a record for every logfmt line of a file, in file order.

    Lines that hold no logfmt content are skipped, unless `include_non_logfmt`
    is set; they are then yielded with empty `fields`.
    """
    path = Path(log_path)
    if not path.is_file():
        raise FileNotFoundError(f"Log file not found: {path}")

    decoder = decoder or default_decoder()
    workers = _resolve_max_workers(max_workers)
    parallel_ok = workers > 1 and path.suffix.lower() != ".gz"
    LOGGER.debug("Decoding %s (workers=%d, parallel=%s)", path, workers, parallel_ok)

    def finish(line_no: int, line: str, record: LogfmtRecord | None) -> LogfmtRecord | None:
        if record is None and include_non_logfmt:
            record = LogfmtRecord(line_no=line_no, fields={}, raw=line)
        if record is not None and not include_raw:
            record = _drop_raw(record)
        return record

    if parallel_ok:
        loop = asyncio.get_running_loop()

        async def line_work_iter() -> AsyncIterator[tuple[int, tuple[int, str]]]:
            seq = 0
            async with _open_text(path, encoding=encoding, decode_errors=decode_errors) as f:
                async for line_no, line in _enumerate_async(f, start=1):
                    line = line.rstrip("\r\n")
                    if contains is not None and contains not in line:
                        continue
                    yield seq, (line_no, line)
                    seq += 1

        async def process_line(item: tuple[int, str]) -> LogfmtRecord | None:
            line_no, line = item
            record = await loop.run_in_executor(executor, decoder.parse, line_no, line)
            return finish(line_no, line, record)

        executor = ThreadPoolExecutor(max_workers=workers)
        try:
            pipeline = _run_pipeline(
                line_work_iter(),
                worker_count=workers,
                processor=process_line,
            )
            async with aclosing(pipeline) as records:
                async for record in records:
                    yield record
        finally:
            executor.shutdown(wait=True)
        return

    async with _open_text(path, encoding=encoding, decode_errors=decode_errors) as f:
        async for line_no, line in _enumerate_async(f, start=1):
            line = line.rstrip("\r\n")
            if contains is not None and contains not in line:
                continue
            record = finish(line_no, line, decoder.parse(line_no, line))
            if record is not None:
                yield record


async def get_records(
    log_path: str | Path,
    *,
    limit: int | None = None,
    **iter_kwargs,
) -> list[LogfmtRecord]:
    """Collect iter_records into a list, stopping after `limit` records."""
    out: list[LogfmtRecord] = []
    if limit is not None and limit <= 0:
        return out
    async with aclosing(iter_records(log_path, **iter_kwargs)) as records:
        async for record in records:
            out.append(record)
            if limit is not None and len(out) >= limit:
                break
    return out


async def count_keys(log_path: str | Path, **iter_kwargs) -> dict[str, int]:
    """Count the logfmt lines each key occurs in, in first-appearance order.

    `include_raw` and `include_non_logfmt` are ignored; only fields are counted.
    """
    iter_kwargs.update(include_raw=False, include_non_logfmt=False)
    counts: dict[str, int] = {}
    lines = 0
    async for record in iter_records(log_path, **iter_kwargs):
        lines += 1
        for key in record.fields:
            counts[key] = counts.get(key, 0) + 1
    LOGGER.debug("Counted %d keys over %d logfmt lines in %s", len(counts), lines, log_path)
    return counts


async def _enumerate_async(iterable, start: int = 0):
    """Async enumerate helper for async iterators."""
    index = start
    async for item in iterable:
        yield index, item
        index += 1
