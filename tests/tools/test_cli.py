from __future__ import annotations

import json
import logging
import os
import subprocess
import sys
from pathlib import Path

import pytest

from logfmt_extract import cli, logging_utils

SRC_DIR = Path(__file__).resolve().parents[2] / "src"


def _run(monkeypatch: pytest.MonkeyPatch, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", ["logfmt-extract", *args])
    cli.main()


def test_cli_prints_records(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], write_logfmt_log
) -> None:
    log = tmp_path / "router.log"
    write_logfmt_log(log)

    _run(monkeypatch, str(log), "--workers", "1", "--max", "2")

    rows = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert [r["line_no"] for r in rows] == [1, 3]
    assert rows[1]["fields"]["path"] == "/foo/bar"


def test_cli_columns(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], write_logfmt_log
) -> None:
    log = tmp_path / "router.log"
    write_logfmt_log(log)

    _run(monkeypatch, str(log), "--workers", "1", "--columns", "status int, code text")

    rows = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert [r["values"] for r in rows] == [
        {"status": 200, "code": None},
        {"status": 204, "code": None},
        {"status": 503, "code": "H12"},
    ]


def test_cli_keys(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], write_logfmt_log
) -> None:
    log = tmp_path / "router.log"
    write_logfmt_log(log)

    _run(monkeypatch, str(log), "--workers", "1", "--keys")

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "3\tat"


def test_cli_missing_file_exits_2(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, str(tmp_path / "missing.log"))
    assert exc.value.code == 2


def test_cli_import_does_not_build_server() -> None:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    code = "import sys, logfmt_extract.cli; print('logfmt_extract.server.log_server' in sys.modules)"

    out = subprocess.run([sys.executable, "-c", code], env=env, capture_output=True, text=True, check=True)

    assert out.stdout.strip() == "False"


def test_configure_logging_reads_level_env(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, object] = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: seen.update(kw))
    monkeypatch.setenv("LOGFMT_EXTRACT_LOG_LEVEL", "debug")

    logging_utils.configure_logging()

    assert seen["level"] == logging.DEBUG
