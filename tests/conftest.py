from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

MIXED_LINES = [
    'at=info method=GET path="/" host=example.com dyno=web.1 status=200 bytes=1548',
    'I, [2022-08-05T15:55:06.123 #56]  INFO -- : [f116113c] Started GET "/"',
    'I, [2022-08-05T15:55:06.456 #56]  INFO -- : at=info method=POST path="/foo/bar" status=204',
    "",
    'at=error code=H12 desc="Request timeout" method=GET path="/slow" status=503',
]


@pytest.fixture
def write_logfmt_log() -> Callable[[Path], None]:
    def _write(path: Path) -> None:
        path.write_text("\n".join(MIXED_LINES) + "\n", encoding="utf-8")

    return _write


@pytest.fixture
def write_bytes() -> Callable[[Path, list[bytes]], None]:
    def _write(path: Path, lines: list[bytes]) -> None:
        path.write_bytes(b"".join(line + b"\n" for line in lines))

    return _write
