from __future__ import annotations

from pathlib import Path

import pytest

from logfmt_extract.tools.extract import (
    HARD_LIMIT,
    extract_logfmt_impl,
    logfmt_key_stats_impl,
    logfmt_keys_array_impl,
    logfmt_keys_impl,
    logfmt_to_json_impl,
    logfmt_to_record_impl,
)

NORMAL_LINE = "I, [2023-04-21T13:13:00.953378 #2] INFO -- : [FOOBAR] Reporting 2 metrics"


def test_logfmt_to_json_impl() -> None:
    out = logfmt_to_json_impl(line='at=info path="/foo bar" empty="" none=')
    assert out == {
        "logfmt": True,
        "fields": {"at": "info", "path": "/foo bar", "empty": "", "none": None},
    }


def test_logfmt_to_json_impl_not_logfmt() -> None:
    assert logfmt_to_json_impl(line=NORMAL_LINE) == {"logfmt": False, "fields": None}


def test_logfmt_to_json_impl_bare_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOGFMT_EXTRACT_BARE_KEYS", raising=False)
    line = "a=1 d x=sf"

    assert logfmt_to_json_impl(line=line)["fields"] == {"a": "1"}
    assert logfmt_to_json_impl(line=line, bare_keys=True)["fields"] == {"a": "1", "d": None, "x": "sf"}

    monkeypatch.setenv("LOGFMT_EXTRACT_BARE_KEYS", "true")
    assert logfmt_to_json_impl(line=line)["fields"] == {"a": "1", "d": None, "x": "sf"}
    assert logfmt_to_json_impl(line=line, bare_keys=False)["fields"] == {"a": "1"}


def test_logfmt_keys_impls() -> None:
    line = "source=web.1 dyno=web.2 source=web.3"
    assert logfmt_keys_impl(line=line) == {"keys": ["source", "dyno"]}
    assert logfmt_keys_array_impl(line=line) == {"keys": ["source", "dyno"]}
    assert logfmt_keys_impl(line=NORMAL_LINE) == {"keys": []}
    assert logfmt_keys_array_impl(line=NORMAL_LINE) == {"keys": None}


def test_logfmt_to_record_impl_text_columns() -> None:
    out = logfmt_to_record_impl(
        line="source=web.1 status=204 at=2025-12-30T08:12:04Z",
        columns="source text, status int, at timestamptz, money numeric",
    )
    assert [c["name"] for c in out["columns"]] == ["source", "status", "at", "money"]
    assert out["values"][:2] == ["web.1", 204]
    assert out["values"][2].startswith("2025-12-30T08:12:04")
    assert out["values"][3] is None


def test_logfmt_to_record_impl_object_columns() -> None:
    out = logfmt_to_record_impl(
        line="ok=true n=3",
        columns=[{"name": "ok", "type": "boolean"}, {"name": "n", "type": "BIGINT"}],
    )
    assert out["values"] == [True, 3]


def test_logfmt_to_record_impl_invalid_columns() -> None:
    with pytest.raises(ValueError):
        logfmt_to_record_impl(line="a=1", columns=[{"name": "a", "type": "blob"}])
    with pytest.raises(ValueError):
        logfmt_to_record_impl(line="a=1", columns=[])


@pytest.mark.asyncio
async def test_extract_logfmt_impl(tmp_path: Path, write_logfmt_log) -> None:
    log = tmp_path / "router.log"
    write_logfmt_log(log)

    out = await extract_logfmt_impl(log_path=str(log), contains="method=")

    assert out["count"] == 3
    assert out["records"][0]["line_no"] == 1
    assert "raw" not in out["records"][0]


@pytest.mark.asyncio
async def test_extract_logfmt_impl_limit_and_raw(tmp_path: Path, write_logfmt_log) -> None:
    log = tmp_path / "router.log"
    write_logfmt_log(log)

    out = await extract_logfmt_impl(log_path=str(log), limit=1, include_raw=True)

    assert out["count"] == 1
    assert out["records"][0]["raw"].startswith("at=info method=GET")


@pytest.mark.asyncio
async def test_extract_logfmt_impl_invalid_limit(tmp_path: Path, write_logfmt_log) -> None:
    log = tmp_path / "router.log"
    write_logfmt_log(log)

    with pytest.raises(ValueError):
        await extract_logfmt_impl(log_path=str(log), limit=0)
    out = await extract_logfmt_impl(log_path=str(log), limit=HARD_LIMIT * 2)
    assert out["count"] == 3


@pytest.mark.asyncio
async def test_extract_logfmt_impl_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        await extract_logfmt_impl(log_path=str(tmp_path / "missing.log"))


@pytest.mark.asyncio
async def test_logfmt_key_stats_impl(tmp_path: Path, write_logfmt_log) -> None:
    log = tmp_path / "router.log"
    write_logfmt_log(log)

    out = await logfmt_key_stats_impl(log_path=str(log))

    assert out["keys"][0] == {"key": "at", "lines": 3}
    assert {"key": "code", "lines": 1} in out["keys"]
    assert out["count"] == len(out["keys"])
