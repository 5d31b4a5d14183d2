"""Pure evaluation of a board against a set of called numbers.

Nothing here holds state: every function takes the board and the called set
it works on and returns new immutable values. Sessions and rooms own the
current called set and decide what to do with the results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, FrozenSet, Optional, Tuple

from ..errors import InvalidNumber
from .board import Board
from .patterns import CELLS, compute_completed_lines, completed_lines_after, crossed_letters, has_won

APPLIED = "applied"
ALREADY_CALLED = "already_called"


def check_number(number: object) -> int:
    # bool is an int subclass; True/False are never valid calls
    if isinstance(number, bool) or not isinstance(number, int):
        raise InvalidNumber(number)
    if not 1 <= number <= CELLS:
        raise InvalidNumber(number)
    return number


def marked_positions(board: Board, called: AbstractSet[int]) -> FrozenSet[int]:
    return frozenset(i for i, n in enumerate(board.numbers) if n in called)


@dataclass(frozen=True)
class MarkResult:
    number: int
    applied: bool
    reason: str
    called: FrozenSet[int]
    index: Optional[int]
    marked: FrozenSet[int]


def mark_number(board: Board, called: AbstractSet[int], number: int) -> MarkResult:
    """Call ``number`` against ``board``.

    Raises InvalidNumber for anything outside 1..25. A number already in
    ``called`` is a no-op reported with ``applied=False``.
    """
    number = check_number(number)
    current = frozenset(called)
    marked = marked_positions(board, current)
    if number in current:
        return MarkResult(number, False, ALREADY_CALLED, current, board.index_of(number), marked)
    index = board.index_of(number)
    if index is not None:
        marked = marked | {index}
    return MarkResult(number, True, APPLIED, current | {number}, index, marked)


@dataclass(frozen=True)
class BoardSnapshot:
    board: Board
    called: FrozenSet[int]
    marked: FrozenSet[int]
    completed_lines: Tuple[int, ...]

    @property
    def has_won(self) -> bool:
        return has_won(self.completed_lines)

    @property
    def crossed_letters(self) -> str:
        return crossed_letters(self.completed_lines)

    def advance(self, number: int) -> Tuple["BoardSnapshot", MarkResult]:
        """Mark ``number`` and return the next snapshot.

        Completed lines are updated incrementally from the newly marked cell;
        the result is identical to :func:`evaluate` on the new called set.
        """
        result = mark_number(self.board, self.called, number)
        if not result.applied:
            return self, result
        lines = self.completed_lines
        if result.index is not None:
            lines = completed_lines_after(lines, result.marked, result.index)
        return BoardSnapshot(self.board, result.called, result.marked, lines), result


def evaluate(board: Board, called: AbstractSet[int]) -> BoardSnapshot:
    for number in called:
        check_number(number)
    current = frozenset(called)
    marked = marked_positions(board, current)
    return BoardSnapshot(board, current, marked, compute_completed_lines(marked))
