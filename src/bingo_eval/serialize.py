from __future__ import annotations

import csv
import hashlib
import json
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .core.board import Board
from .session import GameSession


def board_hash(board: Board) -> str:
    payload = json.dumps(board.rows(), ensure_ascii=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def boards_hash(boards: Iterable[Board]) -> str:
    hashes = [board_hash(b) for b in boards]
    payload = json.dumps(hashes, ensure_ascii=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def ensure_parent(path: Path, *, mkdirs: bool) -> None:
    parent = path.parent
    if not parent.exists() and mkdirs:
        parent.mkdir(parents=True, exist_ok=True)


def write_json(path: Path, data: object, *, mkdirs: bool, overwrite: bool) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(
            f"Refusing to overwrite existing file without --force: {path}"
        )
    ensure_parent(path, mkdirs=mkdirs)
    text = json.dumps(data, ensure_ascii=True, sort_keys=True, indent=2)
    path.write_text(text + "\n", encoding="utf-8")


def build_run_meta(
    *,
    app_version: str,
    params_hash: str,
    seed: Optional[int],
    rng_engine: str,
) -> Dict[str, object]:
    return {
        "app_version": app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "python_version": sys.version.split()[0],
        "platform": platform.system().lower(),
        "params_hash": params_hash,
        "seed": seed,
        "rng_engine": rng_engine,
        "hash_algorithm": "sha256",
    }


def session_record(session: GameSession) -> Dict[str, object]:
    parties: Dict[str, object] = {}
    for party, board in session.boards.items():
        snap = session.snapshot(party)
        parties[party] = {
            "board": board.rows(),
            "board_hash": board_hash(board),
            "marked_positions": sorted(snap.marked),
            "completed_lines": list(snap.completed_lines),
            "has_won": snap.has_won,
        }
    return {
        "state": session.state,
        "outcome": session.outcome,
        "calls": list(session.history),
        "winners": list(session.winners),
        "parties": parties,
    }


def emit_transcript_json(
    path: Path,
    *,
    sessions: Sequence[GameSession],
    run_meta: Dict[str, object],
    mkdirs: bool,
    overwrite: bool,
) -> None:
    games: List[Dict[str, object]] = []
    for idx, session in enumerate(sessions, start=1):
        record = session_record(session)
        record["id"] = str(idx)
        games.append(record)
    data = {
        "run_meta": run_meta,
        "games": games,
        "boards_hash": boards_hash(b for s in sessions for b in s.boards.values()),
    }
    write_json(path, data, mkdirs=mkdirs, overwrite=overwrite)


def emit_report_json(
    path: Path, *, report: Dict[str, object], mkdirs: bool, overwrite: bool
) -> None:
    write_json(path, report, mkdirs=mkdirs, overwrite=overwrite)


def emit_position_csv(
    path: Path,
    *,
    by_position: Dict[int, Dict[int, int]],
    mkdirs: bool,
    overwrite: bool,
) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(
            f"Refusing to overwrite existing file without --force: {path}"
        )
    ensure_parent(path, mkdirs=mkdirs)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["position", "number", "count"])
        for pos in sorted(by_position.keys()):
            row = by_position[pos]
            for num in sorted(row.keys()):
                writer.writerow([pos, num, row[num]])
