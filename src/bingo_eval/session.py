"""Game sessions: one shared called set evaluated against every party's board."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .ai import choose_number
from .core.board import Board, create_board
from .core.evaluator import ALREADY_CALLED, APPLIED, BoardSnapshot, check_number, evaluate
from .core.patterns import pattern_name
from .errors import SessionEnded
from .rng import RandomSource, create_rng

logger = logging.getLogger(__name__)

NOT_STARTED = "not_started"
IN_PROGRESS = "in_progress"
ENDED = "ended"

SESSION_ENDED = "session_ended"
NOT_YOUR_TURN = "not_your_turn"
NOT_ON_BOARD = "not_on_board"


@dataclass(frozen=True)
class CallOutcome:
    number: int
    applied: bool
    reason: str
    state: str
    snapshots: Mapping[str, BoardSnapshot]
    new_lines: Mapping[str, Tuple[int, ...]] = field(default_factory=dict)
    winners: Tuple[str, ...] = ()

    @property
    def is_tie(self) -> bool:
        return len(self.winners) > 1


Listener = Callable[[CallOutcome], None]


class GameSession:
    """Owns the called set for one game and the board of every tracked party.

    Calls must be made one at a time; the session does no locking.
    """

    def __init__(self, boards: Mapping[str, Board]):
        if not boards:
            raise ValueError("A session needs at least one board")
        self.boards: Dict[str, Board] = dict(boards)
        self.state = NOT_STARTED
        self.history: List[int] = []
        self.winners: Tuple[str, ...] = ()
        self.abandoned = False
        self._snapshots: Dict[str, BoardSnapshot] = {
            party: evaluate(board, frozenset()) for party, board in self.boards.items()
        }
        self._listeners: List[Listener] = []

    @property
    def called(self) -> frozenset:
        return frozenset(self.history)

    @property
    def outcome(self) -> Optional[str]:
        if self.state != ENDED:
            return None
        if self.abandoned:
            return "abandoned"
        return "tie" if len(self.winners) > 1 else "win"

    def snapshot(self, party: str) -> BoardSnapshot:
        return self._snapshots[party]

    def snapshots(self) -> Dict[str, BoardSnapshot]:
        return dict(self._snapshots)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> None:
        if self.state == NOT_STARTED:
            self.state = IN_PROGRESS
            logger.debug("Session started with parties %s", ", ".join(self.boards))

    def abandon(self) -> None:
        """End the session with no winner."""
        if self.state != ENDED:
            self.state = ENDED
            self.abandoned = True
            logger.info("Session abandoned after %d calls", len(self.history))

    def call_number(self, number: int, *, strict: bool = False) -> CallOutcome:
        number = check_number(number)
        if self.state == ENDED:
            if strict:
                raise SessionEnded(f"Cannot call {number}: session has ended")
            logger.debug("Rejected %d: session ended", number)
            return CallOutcome(number, False, SESSION_ENDED, self.state, self.snapshots())
        self.start()
        if number in self.history:
            logger.debug("Ignored %d: already called", number)
            return CallOutcome(number, False, ALREADY_CALLED, self.state, self.snapshots())

        self.history.append(number)
        new_lines: Dict[str, Tuple[int, ...]] = {}
        for party, snap in self._snapshots.items():
            nxt, _ = snap.advance(number)
            added = tuple(p for p in nxt.completed_lines if p not in snap.completed_lines)
            if added:
                new_lines[party] = added
                logger.debug(
                    "%s completed %s", party, ", ".join(pattern_name(p) for p in added)
                )
            self._snapshots[party] = nxt

        winners = tuple(party for party, snap in self._snapshots.items() if snap.has_won)
        if winners:
            self.state = ENDED
            self.winners = winners
            logger.info(
                "Session ended on %d: %s", number, "tie" if len(winners) > 1 else winners[0]
            )

        outcome = CallOutcome(
            number, True, APPLIED, self.state, self.snapshots(), new_lines, self.winners
        )
        for listener in list(self._listeners):
            listener(outcome)
        return outcome


PLAYER = "player"
AI = "ai"


@dataclass(frozen=True)
class TurnResult:
    number: int
    applied: bool
    reason: str
    player: Optional[CallOutcome] = None
    ai: Optional[CallOutcome] = None


class VersusAIGame:
    """A human against the random AI, turns strictly alternating."""

    def __init__(self, rng: Optional[RandomSource] = None):
        self.rng = rng if rng is not None else create_rng("system")
        self.new_game()

    def new_game(self) -> None:
        logger.info("Starting new AI game")
        self.session = GameSession(
            {PLAYER: create_board(self.rng), AI: create_board(self.rng)}
        )
        self.is_player_turn = True
        self.last_player_choice: Optional[int] = None
        self.last_ai_choice: Optional[int] = None

    @property
    def ended(self) -> bool:
        return self.session.state == ENDED

    @property
    def winner_message(self) -> Optional[str]:
        if not self.ended or self.session.abandoned:
            return None
        if self.session.outcome == "tie":
            return "It's a tie!"
        return "You Win!" if self.session.winners == (PLAYER,) else "AI Wins!"

    def player_pick(self, number: int) -> TurnResult:
        number = check_number(number)
        if self.ended:
            return TurnResult(number, False, SESSION_ENDED)
        if not self.is_player_turn:
            return TurnResult(number, False, NOT_YOUR_TURN)
        if number not in self.session.boards[PLAYER]:
            return TurnResult(number, False, NOT_ON_BOARD)

        player_outcome = self.session.call_number(number)
        if not player_outcome.applied:
            return TurnResult(number, False, player_outcome.reason, player=player_outcome)
        self.last_player_choice = number
        logger.debug("Player chose %d", number)

        ai_outcome = None
        if not self.ended:
            self.is_player_turn = False
            ai_outcome = self.ai_turn()
            self.is_player_turn = True
        return TurnResult(number, True, APPLIED, player=player_outcome, ai=ai_outcome)

    def ai_turn(self) -> Optional[CallOutcome]:
        choice = choose_number(self.session.boards[AI], self.session.called, self.rng)
        if choice is None:
            return None
        self.last_ai_choice = choice
        logger.debug("AI chose %d", choice)
        return self.session.call_number(choice)

    def end_game(self) -> None:
        """Abandon the current game and deal fresh boards."""
        self.session.abandon()
        self.new_game()
