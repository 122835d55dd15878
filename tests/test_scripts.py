from __future__ import annotations

import json
from pathlib import Path

import pytest

from scripts import import_csv, run_server
from skillcheck.infrastructure.config import LoggingConfig


def test_run_server_passes_options_to_uvicorn(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.chdir(tmp_path)
    calls: list[tuple[str, dict]] = []
    configured: list[LoggingConfig] = []

    def fake_run(target: str, **kwargs) -> None:
        calls.append((target, kwargs))

    monkeypatch.setattr(run_server.uvicorn, "run", fake_run)
    monkeypatch.setattr(run_server, "configure_logging", configured.append)
    run_server.main(["--port", "9000", "--reload"])

    assert calls == [("skillcheck.web.main:app", {"host": "0.0.0.0", "port": 9000, "reload": True})]
    assert len(configured) == 1
    assert isinstance(configured[0], LoggingConfig)


def test_import_csv_script(tmp_path: Path, sample_csv: bytes, capsys: pytest.CaptureFixture) -> None:
    csv_path = tmp_path / "results.csv"
    csv_path.write_bytes(sample_csv)
    db_path = tmp_path / "checks.db"

    assert import_csv.main([str(csv_path), "--backend", "sqlite", "--sqlite-path", str(db_path)]) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["processed"] == 2
    assert db_path.exists()


def test_import_csv_script_missing_file(tmp_path: Path) -> None:
    assert import_csv.main([str(tmp_path / "missing.csv"), "--sqlite-path", str(tmp_path / "x.db")]) == 1


def test_import_csv_script_strict(
    tmp_path: Path, sample_csv: bytes, capsys: pytest.CaptureFixture
) -> None:
    csv_path = tmp_path / "results.csv"
    csv_path.write_bytes(sample_csv)
    args = [str(csv_path), "--backend", "sqlite", "--sqlite-path", str(tmp_path / "checks.db")]

    assert import_csv.main(args + ["--strict"]) == 1
    err = capsys.readouterr().err
    assert "Please correct the following errors" in err
    assert "row 5" in err
