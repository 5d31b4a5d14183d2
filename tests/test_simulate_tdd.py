from __future__ import annotations

import json
from pathlib import Path

import pytest

from bingo_eval.serialize import board_hash, build_run_meta, emit_transcript_json
from bingo_eval.session import ENDED
from bingo_eval.simulate import run_simulation, summarize


@pytest.mark.parametrize("mode", ["ai_vs_ai", "random_vs_ai"])
def test_games_run_to_completion(mode):
    sessions = run_simulation(games=20, mode=mode, engine="py_random", seed=99)
    assert len(sessions) == 20
    for s in sessions:
        assert s.state == ENDED
        assert s.outcome in ("win", "tie")
        assert len(s.history) == len(set(s.history))
        assert 5 <= len(s.history) <= 25
    summary = summarize(sessions)
    assert summary.games == 20
    assert sum(summary.wins.values()) + summary.ties == 20


def test_seeded_runs_are_reproducible():
    a = run_simulation(games=5, mode="ai_vs_ai", engine="py_random", seed=123)
    b = run_simulation(games=5, mode="ai_vs_ai", engine="py_random", seed=123)
    assert [s.history for s in a] == [s.history for s in b]


def test_bad_mode_and_count():
    with pytest.raises(ValueError):
        run_simulation(games=1, mode="human_vs_human")
    with pytest.raises(ValueError):
        run_simulation(games=0, mode="ai_vs_ai")


def test_transcript_emission(tmp_path: Path):
    sessions = run_simulation(games=2, mode="random_vs_ai", engine="py_random", seed=5)
    meta = build_run_meta(app_version="0.0.0", params_hash="sha256:x", seed=5, rng_engine="py_random")
    out = tmp_path / "nested" / "transcript.json"
    emit_transcript_json(out, sessions=sessions, run_meta=meta, mkdirs=True, overwrite=False)
    data = json.loads(out.read_text(encoding="utf-8"))
    assert len(data["games"]) == 2
    game = data["games"][0]
    assert set(game["parties"]) == {"player", "ai"}
    assert game["calls"] == sessions[0].history
    assert game["parties"]["player"]["board_hash"] == board_hash(sessions[0].boards["player"])
    assert data["boards_hash"].startswith("sha256:")
    with pytest.raises(FileExistsError):
        emit_transcript_json(out, sessions=sessions, run_meta=meta, mkdirs=True, overwrite=False)
