"""Headless games played to completion, for benchmarking and transcripts."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional

from .ai import choose_number
from .core.board import create_board
from .rng import RandomSource, create_rng, derive_game_seed
from .session import ENDED, PLAYER, GameSession, VersusAIGame

logger = logging.getLogger(__name__)

MODES = ("ai_vs_ai", "random_vs_ai")


def play_ai_vs_ai(rng: RandomSource) -> GameSession:
    """Two random AIs alternate, each calling from its own board."""
    parties = ("ai_1", "ai_2")
    session = GameSession({p: create_board(rng) for p in parties})
    turn = 0
    while session.state != ENDED:
        party = parties[turn % 2]
        number = choose_number(session.boards[party], session.called, rng)
        turn += 1
        if number is None:
            continue
        session.call_number(number)
    return session


def play_random_vs_ai(rng: RandomSource) -> GameSession:
    """A player picking at random against the AI, through the turn-taking game."""
    game = VersusAIGame(rng)
    while not game.ended:
        number = choose_number(game.session.boards[PLAYER], game.session.called, rng)
        if number is None:  # pragma: no cover - a full board always wins first
            break
        game.player_pick(number)
    return game.session


def run_simulation(
    *, games: int, mode: str, engine: str = "system", seed: Optional[int] = None
) -> List[GameSession]:
    if mode not in MODES:
        raise ValueError(f"mode must be one of {', '.join(MODES)}")
    if games < 1:
        raise ValueError("games must be >= 1")
    play = play_ai_vs_ai if mode == "ai_vs_ai" else play_random_vs_ai
    sessions: List[GameSession] = []
    shared = create_rng(engine) if seed is None else None
    for index in range(games):
        if seed is None:
            rng = shared
        else:
            rng = create_rng(engine, derive_game_seed(seed, index, mode))
        session = play(rng)
        logger.debug(
            "Game %d ended after %d calls: %s", index + 1, len(session.history), session.outcome
        )
        sessions.append(session)
    return sessions


@dataclass
class SimulationSummary:
    games: int
    wins: Dict[str, int]
    ties: int
    avg_calls: float
    min_calls: int
    max_calls: int


def summarize(sessions: List[GameSession]) -> SimulationSummary:
    wins: Counter = Counter()
    ties = 0
    calls = [len(s.history) for s in sessions]
    for s in sessions:
        if s.outcome == "tie":
            ties += 1
        elif s.outcome == "win":
            wins[s.winners[0]] += 1
    parties = sorted({p for s in sessions for p in s.boards})
    return SimulationSummary(
        games=len(sessions),
        wins={p: wins.get(p, 0) for p in parties},
        ties=ties,
        avg_calls=(sum(calls) / len(calls)) if calls else 0.0,
        min_calls=min(calls) if calls else 0,
        max_calls=max(calls) if calls else 0,
    )
