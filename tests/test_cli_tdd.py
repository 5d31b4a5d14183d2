from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from bingo_eval.cli import app
from bingo_eval.version import __version__

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_board_prints_letters():
    result = runner.invoke(app, ["board", "--seed", "1", "--colors", "never"])
    assert result.exit_code == 0
    for letter in "BINGO":
        assert letter in result.output


def test_simulate_dry_run():
    result = runner.invoke(app, ["simulate", "--dry-run", "--games", "3"])
    assert result.exit_code == 0
    assert "Params hash: sha256:" in result.output


def test_simulate_writes_transcript(tmp_path: Path):
    out = tmp_path / "t.json"
    result = runner.invoke(
        app,
        ["simulate", "-n", "3", "--seed", "4", "--out-transcript", str(out), "--colors", "never"],
    )
    assert result.exit_code == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["run_meta"]["rng_engine"] == "py_random"
    assert len(data["games"]) == 3


def test_simulate_rejects_unknown_mode():
    result = runner.invoke(app, ["simulate", "--mode", "nope"])
    assert result.exit_code != 0


def test_bare_invocation_prints_help():
    result = runner.invoke(app, [])
    assert result.exit_code == 0
    assert "simulate" in result.output


def test_uniformity_on_fair_shuffle(tmp_path: Path):
    out = tmp_path / "report.json"
    result = runner.invoke(
        app,
        ["uniformity", "--samples", "500", "--seed", "2", "--alpha", "0.001", "--out-report", str(out)],
    )
    assert result.exit_code == 0
    report = json.loads(out.read_text(encoding="utf-8"))
    assert report["tests"]["position"]["df"] == 24
    assert report["tests"]["position"]["uniform"] is True
