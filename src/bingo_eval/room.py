"""In-memory multiplayer room.

Each player marks numbers on their own board; the room keeps every player's
progress current through the evaluator and settles bingo claims. Operations
are expected to arrive already serialized.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from .core.board import Board, create_board
from .core.evaluator import BoardSnapshot, evaluate
from .errors import RoomError
from .rng import RandomSource

logger = logging.getLogger(__name__)

WAITING = "waiting"
PLAYING = "playing"
FINISHED = "finished"

DEFAULT_MAX_PLAYERS = 8


def new_room_code() -> str:
    return uuid.uuid4().hex[:6].upper()


@dataclass
class RoomPlayer:
    id: str
    name: str
    board: Board
    is_ready: bool = False
    snapshot: BoardSnapshot = field(init=False)
    joined_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        self.reset_progress()

    def reset_progress(self) -> None:
        self.snapshot = evaluate(self.board, frozenset())

    @property
    def marked_numbers(self) -> frozenset:
        return self.snapshot.called

    @property
    def completed_lines(self) -> Tuple[int, ...]:
        return self.snapshot.completed_lines

    @property
    def has_won(self) -> bool:
        return self.snapshot.has_won


class Room:
    def __init__(
        self,
        host_id: str,
        *,
        max_players: int = DEFAULT_MAX_PLAYERS,
        code: Optional[str] = None,
        rng: Optional[RandomSource] = None,
    ):
        if max_players < 2:
            raise ValueError("max_players must be >= 2")
        self.id = code or new_room_code()
        self.host_id = host_id
        self.max_players = max_players
        self.state = WAITING
        self.players: Dict[str, RoomPlayer] = {}
        self.winners: Tuple[str, ...] = ()
        self.created_at = datetime.now(timezone.utc)
        self._rng = rng

    @property
    def game_winner(self) -> Optional[str]:
        """Single winner id, or None when nobody or several players won."""
        return self.winners[0] if len(self.winners) == 1 else None

    @property
    def ready_players_count(self) -> int:
        return sum(1 for p in self.players.values() if p.is_ready)

    @property
    def can_start(self) -> bool:
        return len(self.players) >= 2 and all(p.is_ready for p in self.players.values())

    def _player(self, player_id: str) -> RoomPlayer:
        try:
            return self.players[player_id]
        except KeyError:
            raise RoomError(f"Player {player_id} is not in room {self.id}") from None

    def join(self, player_id: str, name: str, board: Optional[Board] = None) -> RoomPlayer:
        if not name:
            raise ValueError("Player name must not be empty")
        if self.state != WAITING:
            raise RoomError(f"Room {self.id} is not accepting players ({self.state})")
        if player_id in self.players:
            return self.players[player_id]
        if len(self.players) >= self.max_players:
            raise RoomError(f"Room {self.id} is full")
        player = RoomPlayer(player_id, name, board or create_board(self._rng))
        self.players[player_id] = player
        logger.info("%s joined room %s", name, self.id)
        return player

    def leave(self, player_id: str) -> None:
        self._player(player_id)
        del self.players[player_id]
        logger.info("Player %s left room %s", player_id, self.id)

    def set_ready(self, player_id: str, ready: bool) -> None:
        self._player(player_id).is_ready = ready

    def toggle_ready(self, player_id: str) -> bool:
        player = self._player(player_id)
        player.is_ready = not player.is_ready
        return player.is_ready

    def start(self) -> None:
        if self.state != WAITING:
            raise RoomError(f"Room {self.id} already {self.state}")
        if not self.can_start:
            raise RoomError("Need at least 2 players, all ready")
        for player in self.players.values():
            player.reset_progress()
        self.winners = ()
        self.state = PLAYING
        logger.info("Room %s started with %d players", self.id, len(self.players))

    def mark(self, player_id: str, number: int) -> str:
        """Mark ``number`` on one player's board; returns the evaluator's reason."""
        player = self._player(player_id)
        if self.state != PLAYING:
            raise RoomError(f"Room {self.id} is not playing ({self.state})")
        before = player.snapshot
        player.snapshot, result = before.advance(number)
        if result.applied and player.has_won and not before.has_won:
            logger.info("Player %s has BINGO and can claim victory", player_id)
        return result.reason

    def claim_bingo(self, player_id: str) -> bool:
        """Settle a claim. Every player holding a win at this moment is a winner."""
        claimant = self._player(player_id)
        if self.state != PLAYING:
            logger.debug("Claim from %s ignored: room %s", player_id, self.state)
            return False
        if not claimant.has_won:
            logger.info("Rejected claim from %s: only %d lines", player_id, len(claimant.completed_lines))
            return False
        self.winners = tuple(pid for pid, p in self.players.items() if p.has_won)
        self.state = FINISHED
        logger.info("Room %s finished, winners: %s", self.id, ", ".join(self.winners))
        return True

    def progress(self) -> List[Dict[str, object]]:
        return [
            {
                "id": p.id,
                "name": p.name,
                "ready": p.is_ready,
                "marked": len(p.marked_numbers),
                "completed_lines": list(p.completed_lines),
                "has_won": p.has_won,
            }
            for p in self.players.values()
        ]

