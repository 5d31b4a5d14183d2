"""Core module for board evaluation."""

from .board import Board, NUMBER_POOL, create_board
from .evaluator import BoardSnapshot, MarkResult, evaluate, mark_number, marked_positions
from .patterns import (
    WIN_PATTERNS,
    WIN_THRESHOLD,
    compute_completed_lines,
    crossed_letters,
    has_won,
    pattern_name,
)

__all__ = [
    "Board",
    "BoardSnapshot",
    "MarkResult",
    "NUMBER_POOL",
    "WIN_PATTERNS",
    "WIN_THRESHOLD",
    "compute_completed_lines",
    "create_board",
    "crossed_letters",
    "evaluate",
    "has_won",
    "mark_number",
    "marked_positions",
    "pattern_name",
]
